"""Jenkins metadata provider."""

from collections.abc import Sequence

from pydantic import BaseModel, Field

from teams_notifier.ci.base import CIProvider
from teams_notifier.models.card import Fact


class JenkinsEnv(BaseModel):
    """Variables exported by Jenkins with the Git plugin."""

    branch: str | None = Field(default=None, alias="GIT_BRANCH")
    commit: str | None = Field(default=None, alias="GIT_COMMIT")
    build_number: str | None = Field(default=None, alias="BUILD_NUMBER")


class JenkinsProvider(CIProvider[JenkinsEnv]):
    """Jenkins provider."""

    detect_var = "JENKINS_HOME"
    env_cls = JenkinsEnv

    def facts(self, env: JenkinsEnv) -> Sequence[Fact]:
        facts: list[Fact] = []
        if env.branch:
            facts.append(Fact(name="Branch:", value=env.branch))
        if env.commit:
            facts.append(Fact(name="Commit:", value=env.commit[:7]))
        if env.build_number:
            facts.append(Fact(name="Build:", value=f"#{env.build_number}"))
        return facts


jenkins_provider = JenkinsProvider()
