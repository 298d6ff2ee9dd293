# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Component, reference, model and repository abstractions."""

from componentizer.model.interfaces import (
    Component,
    ComponentRef,
    EnvVarsAware,
    Model,
    TemplateContext,
    as_env_vars_aware,
)
from componentizer.model.repository import Repository, RepositoryError, create_repository

__all__ = [
    "Component",
    "ComponentRef",
    "EnvVarsAware",
    "Model",
    "Repository",
    "RepositoryError",
    "TemplateContext",
    "as_env_vars_aware",
    "create_repository",
]
