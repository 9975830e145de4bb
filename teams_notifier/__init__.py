"""Send a single test-run summary to a Teams incoming webhook."""
