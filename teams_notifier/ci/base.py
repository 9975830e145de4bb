"""Abstract base class for CI system metadata providers."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import ClassVar

from pydantic import BaseModel

from teams_notifier.models.card import Fact


class CIProvider[EnvT: BaseModel](ABC):
    """Detects a CI system and extracts build facts from its environment.

    Generic type EnvT is the pydantic model describing the variables the CI
    system exports.
    """

    detect_var: ClassVar[str]
    env_cls: ClassVar[type[BaseModel]]

    def detect(self, environ: Mapping[str, str]) -> bool:
        """Return True when running under this CI system."""
        return bool(environ.get(self.detect_var))

    def metadata(self, environ: Mapping[str, str]) -> Sequence[Fact]:
        """Return the build facts available in the environment."""
        env = self.env_cls.model_validate(dict(environ))
        return self.facts(env)  # type: ignore[arg-type]

    @abstractmethod
    def facts(self, env: EnvT) -> Sequence[Fact]:
        """Build facts from the parsed environment, skipping unset values."""
