"""Discover a display name for the project under test."""

import logging
import tomllib
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Test Run"


def discover_project_name(start: Path) -> str:
    """Return [project].name from the nearest pyproject.toml.

    Walks from start up to the filesystem root. Falls back to a fixed name
    when no file is found, it has no name, or it cannot be parsed.
    """
    for directory in (start, *start.parents):
        pyproject = directory / "pyproject.toml"
        if not pyproject.is_file():
            continue

        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as e:
            log.error("❌ Error reading %s: %s", pyproject, e)
            return DEFAULT_PROJECT_NAME

        name = data.get("project", {}).get("name")
        if isinstance(name, str) and name:
            log.info("📦 Project name from %s: %s", pyproject, name)
            return name
        break

    log.warning(
        "⚠️ Could not find pyproject.toml or its project name. "
        "Using default project name."
    )
    return DEFAULT_PROJECT_NAME
