"""GitHub Actions metadata provider."""

from collections.abc import Sequence

from pydantic import BaseModel, Field

from teams_notifier.ci.base import CIProvider
from teams_notifier.models.card import Fact


class GitHubActionsEnv(BaseModel):
    """Variables exported by GitHub Actions runners."""

    ref: str | None = Field(default=None, alias="GITHUB_REF")
    sha: str | None = Field(default=None, alias="GITHUB_SHA")
    run_number: str | None = Field(default=None, alias="GITHUB_RUN_NUMBER")


class GitHubActionsProvider(CIProvider[GitHubActionsEnv]):
    """GitHub Actions provider."""

    detect_var = "GITHUB_ACTIONS"
    env_cls = GitHubActionsEnv

    def facts(self, env: GitHubActionsEnv) -> Sequence[Fact]:
        facts: list[Fact] = []
        if env.ref:
            branch = env.ref.removeprefix("refs/heads/")
            facts.append(Fact(name="Branch:", value=branch))
        if env.sha:
            facts.append(Fact(name="Commit:", value=env.sha[:7]))
        if env.run_number:
            facts.append(Fact(name="Build:", value=f"#{env.run_number}"))
        return facts


github_actions_provider = GitHubActionsProvider()
