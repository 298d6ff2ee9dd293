# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML loader for the component engine configuration file."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".componentizer.yaml"


class WorkspaceConfigError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""


class WorkspaceConfig(BaseModel):
    """The parsed configuration of a component engine.

    Attributes:
        work_directory: Directory where components are fetched. Relative
            paths are resolved against the directory of the configuration file.
        git_timeout: Timeout in seconds of every git network operation.
        log_level: Level of the engine logger.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    work_directory: str = Field(alias="work-directory", min_length=1)
    git_timeout: int = Field(alias="git-timeout", default=120, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(alias="log-level", default="WARNING")

    def resolve_work_directory(self, base_dir: Path) -> Path:
        """Return the absolute work directory, resolving it against *base_dir* if relative."""
        return (base_dir / self.work_directory).resolve()


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and validate a configuration file.

    Args:
        path: Path to the `.componentizer.yaml` file.

    Returns:
        A validated WorkspaceConfig instance.

    Raises:
        WorkspaceConfigError: If the file cannot be read, contains invalid YAML,
            or does not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Configuration file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read configuration file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in '{path}': {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{path}: configuration must be a YAML mapping")

    try:
        return WorkspaceConfig.model_validate(data)
    except ValidationError as exc:
        raise WorkspaceConfigError(f"Invalid configuration '{path}': {exc}") from exc
