# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures: a small YAML-described key/value domain backed by local directories.

A component directory holds a ``component.yaml`` descriptor::

    parent: {id: base, location: base}
    components:
      - {id: lib, location: lib, templates: ["*.tpl"]}
    model:
      x: 1

Models are flat dictionaries merged key by key. A model can restrict the
components it references with ``conditions`` (``{id: [key, minimum]}``,
referenced when ``model[key] > minimum``) and ``unreferenced`` (a list of ids).
Templates substitute ``{{ name }}`` expressions.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from componentizer.model import (
    Component,
    ComponentRef,
    EnvVarsAware,
    Model,
    Repository,
    TemplateContext,
    create_repository,
)

DESCRIPTOR = "component.yaml"


class DictModel(Model):
    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = dict(data or {})

    def merge(self, other: Model) -> Model:
        if not isinstance(other, DictModel):
            raise TypeError(f"cannot merge {type(other).__name__} into DictModel")
        if other.data.get("incompatible") and self.data.get("incompatible"):
            raise ValueError("incompatible models")
        merged = dict(self.data)
        for key, value in other.data.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
        return DictModel(merged)

    def is_referenced(self, component: ComponentRef) -> bool:
        component_id = component.component_id()
        if component_id in self.data.get("unreferenced", []):
            return False
        condition = self.data.get("conditions", {}).get(component_id)
        if condition is not None:
            key, minimum = condition
            return self.data.get(key, 0) > minimum
        return True


class FakeContext(TemplateContext):
    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values = dict(values or {})
        self.clones: list[str] = []

    def clone(self, ref: ComponentRef) -> TemplateContext:
        self.clones.append(ref.component_id())
        return FakeContext({**self.values, "component": ref.component_id()})

    def execute(self, content: str) -> str:
        def substitute(match: re.Match[str]) -> str:
            return str(self.values[match.group(1)])

        return re.sub(r"\{\{\s*(\w+)\s*\}\}", substitute, content)


class FakeRef(ComponentRef):
    def __init__(self, component_id: str) -> None:
        self._id = component_id

    def component_id(self) -> str:
        return self._id

    def component(self, model: Model | None) -> Component:
        raise LookupError("plain references are not resolvable")


class EnvRef(FakeRef, EnvVarsAware):
    def __init__(self, component_id: str, env: dict[str, str]) -> None:
        super().__init__(component_id)
        self._env = env

    def env_vars(self) -> dict[str, str]:
        return dict(self._env)


class FakeComponent(Component):
    def __init__(
        self,
        component_id: str,
        repository: Repository,
        templates: list[str] | None = None,
        descriptor: str = DESCRIPTOR,
    ) -> None:
        self._id = component_id
        self._repository = repository
        self._templates = list(templates or [])
        self._descriptor = descriptor
        self.resolutions = 0

    def component_id(self) -> str:
        return self._id

    def repository(self) -> Repository:
        return self._repository

    def descriptor(self) -> str:
        return self._descriptor

    def templates(self) -> list[str]:
        return list(self._templates)

    def component(self, model: Model | None) -> Component:
        """Apply the ``overrides`` of the model: ``{id: {location, templates}}``."""
        self.resolutions += 1
        overrides = model.data.get("overrides", {}).get(self._id) if isinstance(model, DictModel) else None
        if not overrides:
            return self
        repository = Repository(self._repository.location, self._repository.ref, dict(self._repository.auth))
        if "location" in overrides:
            repository.merge(create_repository(overrides["location"]))
        return FakeComponent(
            self._id,
            repository,
            overrides.get("templates", self._templates),
            self._descriptor,
        )

    def parse_model(self, descriptor_path: Path, context: TemplateContext) -> Model | None:
        data = _load(descriptor_path)
        if "model" not in data:
            return None
        return DictModel(data["model"])

    def parse_components(
        self, descriptor_path: Path, context: TemplateContext
    ) -> tuple[Component | None, list[Component]]:
        data = _load(descriptor_path)
        parent = self._child(data["parent"]) if "parent" in data else None
        return parent, [self._child(entry) for entry in data.get("components", [])]

    def _child(self, entry: dict[str, Any]) -> Component:
        repository = self._repository.create_child_repository(entry["location"], entry.get("ref", ""))
        return FakeComponent(entry["id"], repository, entry.get("templates"))


def _load(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: descriptor must be a mapping")
    return data


# ###############
# Fixtures
# ###############


@pytest.fixture
def sources(tmp_path: Path) -> Path:
    """Directory holding the component sources."""
    path = tmp_path / "sources"
    path.mkdir()
    return path


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Directory where components are fetched."""
    return tmp_path / "work"


@pytest.fixture
def make_component(sources: Path) -> Callable[..., FakeComponent]:
    """Return a factory laying out a component directory and returning its component.

    Args of the factory:
        name: Identity and directory name of the component.
        descriptor: Content of ``component.yaml``; no descriptor is written if None.
        files: Extra files, keyed by relative path.
        templates: Template patterns of the returned component.
    """

    def factory(
        name: str,
        descriptor: dict[str, Any] | None = None,
        files: dict[str, str] | None = None,
        templates: list[str] | None = None,
    ) -> FakeComponent:
        root = sources / name
        root.mkdir(parents=True, exist_ok=True)
        if descriptor is not None:
            (root / DESCRIPTOR).write_text(yaml.safe_dump(descriptor), encoding="utf-8")
        for relative, content in (files or {}).items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return FakeComponent(name, create_repository(root.as_uri()), templates)

    return factory
