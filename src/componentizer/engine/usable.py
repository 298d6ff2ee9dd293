# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Disposable, ready-to-read views over fetched components."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from componentizer.engine.matching_path import MatchingPath
from componentizer.model.interfaces import ComponentRef

# ###############
# Public Interface
# ###############


class UsableComponent:
    """A component which can be used physically, possibly through a templated copy.

    Instances are produced by :meth:`ComponentManager.use` and must be
    released once processing is over; releasing deletes the templated copy,
    if any. The instance can be used as a context manager.

    Attributes:
        id: Identity of the component.
        root_path: Root of the content to read (templated copy or fetched root).
        templated: True if *root_path* is a disposable templated copy.
        source: The reference used to produce this view.
        env_vars: Environment variables attached to the reference.
    """

    def __init__(
        self,
        id: str,
        root_path: Path,
        *,
        templated: bool = False,
        release: Callable[[], None] | None = None,
        source: ComponentRef | None = None,
        env_vars: dict[str, str] | None = None,
    ) -> None:
        self.id = id
        self.root_path = root_path
        self.templated = templated
        self.source = source
        self.env_vars = dict(env_vars or {})
        self._release = release

    def release(self) -> None:
        """Delete the templated content; does nothing if there is none or it is already gone."""
        release, self._release = self._release, None
        if release is not None:
            release()

    def contains_file(self, name: str) -> MatchingPath | None:
        """Return the matching path of the file *name*, or None if it is not a file here."""
        return self._contains(name, directory=False)

    def contains_directory(self, name: str) -> MatchingPath | None:
        """Return the matching path of the directory *name*, or None if it is not a directory here."""
        return self._contains(name, directory=True)

    def __enter__(self) -> UsableComponent:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"UsableComponent(id={self.id!r}, root_path={str(self.root_path)!r}, templated={self.templated})"

    # ################
    # Implementation
    # ################

    def _contains(self, name: str, *, directory: bool) -> MatchingPath | None:
        path = self.root_path / name
        if directory and path.is_dir():
            return MatchingPath(owner=self, relative_path=name)
        if not directory and path.is_file():
            return MatchingPath(owner=self, relative_path=name)
        return None
