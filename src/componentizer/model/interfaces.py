# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Abstractions implemented by the domain that embeds the component engine.

The engine never parses descriptors nor merges configuration itself. It relies
on the classes below, which a concrete platform (descriptor format, template
language, configuration model) must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from componentizer.model.repository import Repository

# ###############
# Public Interface
# ###############


class Model(ABC):
    """Mergeable configuration aggregate produced by parsing components."""

    @abstractmethod
    def merge(self, other: Model) -> Model:
        """Return the merge of this model with *other*.

        Values of *other* override the values of this model for identical
        keys. Implementations must not mutate this model or *other*: the
        resolution merges the same fragment into several intermediate models.

        Raises:
            Exception: Any error if the two models cannot be combined.
        """
        ...

    @abstractmethod
    def is_referenced(self, component: ComponentRef) -> bool:
        """Return True if the configuration accumulated so far uses *component*."""
        ...


class TemplateContext(ABC):
    """Substitution engine applied to the templated files of a component."""

    @abstractmethod
    def clone(self, ref: ComponentRef) -> TemplateContext:
        """Return a copy of this context scoped to the component *ref*."""
        ...

    @abstractmethod
    def execute(self, content: str) -> str:
        """Return *content* with every template expression substituted."""
        ...


class ComponentRef(ABC):
    """A lazy pointer to a component, resolvable against a model."""

    @abstractmethod
    def component_id(self) -> str:
        """Return the identity of the referenced component."""
        ...

    def has_component(self) -> bool:
        """Return False if this is an empty reference."""
        return bool(self.component_id())

    @abstractmethod
    def component(self, model: Model | None) -> Component:
        """Resolve the referenced component against *model*.

        The returned component may carry a different repository or different
        template patterns than a previous resolution, but always the same
        identity.
        """
        ...


class Component(ComponentRef):
    """A self-describing unit of configuration backed by a repository."""

    @abstractmethod
    def repository(self) -> Repository:
        """Return the repository the component is fetched from."""
        ...

    @abstractmethod
    def descriptor(self) -> str:
        """Return the descriptor path relative to the component root, or ''."""
        ...

    def templates(self) -> list[str]:
        """Return the patterns of the files to template, empty if none."""
        return []

    @abstractmethod
    def parse_model(self, descriptor_path: Path, context: TemplateContext) -> Model | None:
        """Parse the model fragment declared in the descriptor at *descriptor_path*."""
        ...

    @abstractmethod
    def parse_components(
        self, descriptor_path: Path, context: TemplateContext
    ) -> tuple[Component | None, list[Component]]:
        """Parse the parent and the directly declared components of this component.

        Returns:
            A ``(parent, references)`` tuple; *parent* is None when the
            component does not extend another one. References keep their
            declaration order.
        """
        ...


class EnvVarsAware(ABC):
    """Optional capability of a reference carrying environment variables."""

    @abstractmethod
    def env_vars(self) -> dict[str, str]:
        """Return the environment variables attached to the reference."""
        ...


def as_env_vars_aware(ref: ComponentRef) -> EnvVarsAware | None:
    """Return *ref* viewed as :class:`EnvVarsAware`, or None if it lacks the capability."""
    if isinstance(ref, EnvVarsAware):
        return ref
    return None
