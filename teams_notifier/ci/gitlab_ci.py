"""GitLab CI metadata provider."""

from collections.abc import Sequence

from pydantic import BaseModel, Field

from teams_notifier.ci.base import CIProvider
from teams_notifier.models.card import Fact


class GitLabCIEnv(BaseModel):
    """Predefined GitLab CI/CD variables.

    CI_COMMIT_BRANCH is unset in merge request and tag pipelines.
    """

    branch: str | None = Field(default=None, alias="CI_COMMIT_BRANCH")
    short_sha: str | None = Field(default=None, alias="CI_COMMIT_SHORT_SHA")
    pipeline_id: str | None = Field(default=None, alias="CI_PIPELINE_ID")


class GitLabCIProvider(CIProvider[GitLabCIEnv]):
    """GitLab CI provider."""

    detect_var = "GITLAB_CI"
    env_cls = GitLabCIEnv

    def facts(self, env: GitLabCIEnv) -> Sequence[Fact]:
        facts: list[Fact] = []
        if env.branch:
            facts.append(Fact(name="Branch:", value=env.branch))
        if env.short_sha:
            facts.append(Fact(name="Commit:", value=env.short_sha))
        if env.pipeline_id:
            facts.append(Fact(name="Pipeline:", value=f"#{env.pipeline_id}"))
        return facts


gitlab_ci_provider = GitLabCIProvider()
