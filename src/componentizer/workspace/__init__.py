# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Engine configuration."""

from componentizer.workspace.config import (
    CONFIG_FILE_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "load_workspace_config",
]
