# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Results of a containment search across usable components."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from componentizer.engine.usable import UsableComponent

# ###############
# Public Interface
# ###############


@dataclass
class MatchingPath:
    """The location of a searched file or directory inside a usable component."""

    owner: UsableComponent
    relative_path: str

    @property
    def absolute_path(self) -> Path:
        """Return the path under the owner's current root."""
        return self.owner.root_path / self.relative_path


@dataclass
class MatchingPaths:
    """The matching paths of one search, in search order."""

    paths: list[MatchingPath] = field(default_factory=list)

    def count(self) -> int:
        """Return the number of matching paths."""
        return len(self.paths)

    def release(self) -> None:
        """Release every distinct usable component owning a matching path."""
        released: set[int] = set()
        for path in self.paths:
            if id(path.owner) not in released:
                released.add(id(path.owner))
                path.owner.release()

    def join_absolute_paths(self, separator: str) -> str:
        """Join the absolute matching paths with *separator*."""
        return separator.join(str(p.absolute_path) for p in self.paths)

    def prefix_paths(self, prefix: str) -> list[str]:
        """Return the absolute paths, each one preceded by *prefix*.

        ``prefix_paths("-i")`` gives ``["-i", path1, "-i", path2, ...]``, ready
        to be passed as repeated command line flags.
        """
        result: list[str] = []
        for path in self.paths:
            result.append(prefix)
            result.append(str(path.absolute_path))
        return result

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[MatchingPath]:
        return iter(self.paths)
