# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Componentizer: resolve, fetch and template trees of linked components."""

from componentizer.engine import (
    ComponentManager,
    ComponentNotAvailableError,
    MatchingPath,
    MatchingPaths,
    ResolutionError,
    TemplateError,
    UsableComponent,
)
from componentizer.model import (
    Component,
    ComponentRef,
    EnvVarsAware,
    Model,
    Repository,
    RepositoryError,
    TemplateContext,
    create_repository,
)
from componentizer.scm import FetchError, ScmError, UnsupportedSchemeError

__all__ = [
    "Component",
    "ComponentManager",
    "ComponentNotAvailableError",
    "ComponentRef",
    "EnvVarsAware",
    "FetchError",
    "MatchingPath",
    "MatchingPaths",
    "Model",
    "Repository",
    "RepositoryError",
    "ResolutionError",
    "ScmError",
    "TemplateContext",
    "TemplateError",
    "UnsupportedSchemeError",
    "UsableComponent",
    "create_repository",
]
