"""Publisher configuration management using Pydantic."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from publisher.constants import DEFAULT_CONFIG_PATH, GITHUB_SSH_URL
from publisher.exceptions import ConfigurationError
from publisher.interpolation import expand_tree


class DeploymentTarget(BaseModel):
    """A named destination: one branch of one GitHub repository."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    branch: str = Field(min_length=1)
    github_repo: str = Field(alias="repo", pattern=r"^[^/\s]+/[^/\s]+$")
    custom_url: str = Field(default="", alias="url")
    remote: str | None = None

    @field_validator("custom_url", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("github_repo")
    @classmethod
    def _no_relative_parts(cls, value: str) -> str:
        # Used as a path under the clone cache
        if any(part in (".", "..") for part in value.split("/")):
            raise ValueError("repo must be in owner/name form")
        return value

    @property
    def remote_url(self) -> str:
        """URL the target repository is cloned from and pushed to."""
        return self.remote or GITHUB_SSH_URL.format(repo=self.github_repo)


class PublisherConfig(BaseModel):
    """Complete publisher configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    commit_message: str = Field(default="", alias="message")
    excluded_files: list[str] = Field(default_factory=list, alias="exclude")
    files: list[str] = Field(default_factory=list)
    pre_run_script: str = Field(default="", alias="preRun")
    targets: dict[str, DeploymentTarget] = Field(default_factory=dict)

    @field_validator("pre_run_script", "commit_message", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def load(
        cls,
        config_path: str | Path | None = None,
        variables: Mapping[str, str] | None = None,
    ) -> "PublisherConfig":
        """Load configuration from a YAML file.

        Args:
            config_path: Path to config file. Defaults to publisher.yml
            variables: Values for ``${VAR}`` placeholders

        Returns:
            PublisherConfig instance

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        config_path = Path(DEFAULT_CONFIG_PATH) if config_path is None else Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(f"config file not found at {str(config_path)!r}")

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"failed to read {str(config_path)!r}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"failed to parse config file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "failed to parse config file: top level must be a mapping",
                details={"path": str(config_path)},
            )

        return cls.from_dict(data, variables)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        variables: Mapping[str, str] | None = None,
    ) -> "PublisherConfig":
        """Create configuration from a parsed YAML dictionary.

        Args:
            data: Configuration dictionary
            variables: Values for ``${VAR}`` placeholders

        Returns:
            PublisherConfig instance
        """
        if variables is not None:
            data = expand_tree(data, variables)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid config file: {e}") from e

    def get_target(self, name: str) -> DeploymentTarget:
        """Look up a deployment target by name.

        Args:
            name: Target name as given on the command line

        Returns:
            The matching DeploymentTarget

        Raises:
            ConfigurationError: If no target has that name
        """
        try:
            return self.targets[name]
        except KeyError:
            raise ConfigurationError(
                f"{name} is not a valid deployment target",
                details={"targets": sorted(self.targets)},
            ) from None
