# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution engine: component manager, templating, usable components and search results."""

from componentizer.engine.manager import ComponentManager, ComponentNotAvailableError, ResolutionError
from componentizer.engine.matching_path import MatchingPath, MatchingPaths
from componentizer.engine.template import TemplateError, compile_glob, execute_template
from componentizer.engine.usable import UsableComponent

__all__ = [
    "ComponentManager",
    "ComponentNotAvailableError",
    "MatchingPath",
    "MatchingPaths",
    "ResolutionError",
    "TemplateError",
    "UsableComponent",
    "compile_glob",
    "execute_template",
]
