# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Source location of a component: URL, version reference and credentials."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from urllib.parse import SplitResult, urlsplit

# ###############
# Public Interface
# ###############


class RepositoryError(Exception):
    """Raised when a repository location cannot be parsed."""


@dataclass
class Repository:
    """The location a component is fetched from.

    Attributes:
        location: Parsed URL of the repository, or None for an empty value.
        ref: Branch, tag or commit to check out. Empty means the default branch.
        auth: Credentials used when the repository is not publicly accessible.
    """

    location: SplitResult | None = None
    ref: str = ""
    auth: dict[str, str] = field(default_factory=dict)

    @property
    def scheme(self) -> str:
        """Return the scheme of the location, or an empty string."""
        return self.location.scheme if self.location is not None else ""

    @property
    def url(self) -> str:
        """Return the location rendered back as a string."""
        return self.location.geturl() if self.location is not None else ""

    def merge(self, other: Repository) -> None:
        """Override this repository in place with the non-empty fields of *other*.

        Credential keys from *other* always win over the existing ones.
        """
        if other.url:
            self.location = other.location
        if other.ref:
            self.ref = other.ref
        for key, value in other.auth.items():
            self.auth[key] = value

    def create_child_repository(
        self,
        location: str,
        ref: str = "",
        auth: dict[str, str] | None = None,
    ) -> Repository:
        """Create the repository of a child component declared by this one.

        A *location* carrying its own scheme is used as-is. Otherwise it is
        resolved against this repository's location: a path starting with
        ``/`` replaces the parent path, any other path is joined to the
        parent's directory.

        Raises:
            RepositoryError: If either location cannot be parsed.
        """
        child = _parse_location(location)
        if self.location is None or child.scheme:
            return Repository(location=child, ref=ref, auth=dict(auth or {}))

        if child.path.startswith("/"):
            path = child.path
        else:
            path = posixpath.normpath(posixpath.join(posixpath.dirname(self.location.path), child.path))
            if path == ".":
                path = ""
        return create_repository(self.location._replace(path=path).geturl(), ref, auth)

    def __str__(self) -> str:
        if self.location is None:
            return ""
        return f"{self.url}@{self.ref}"


def create_repository(location: str, ref: str = "", auth: dict[str, str] | None = None) -> Repository:
    """Create a repository from a raw location string.

    Args:
        location: URL-like location (``https://host/path``, ``file:///dir``...).
        ref: Branch, tag or commit to fetch; empty for the default branch.
        auth: Optional credentials; the mapping is copied.

    Raises:
        RepositoryError: If *location* is not a well-formed URL.
    """
    return Repository(location=_parse_location(location), ref=ref, auth=dict(auth or {}))


# ################
# Implementation
# ################


def _parse_location(location: str) -> SplitResult:
    """Parse *location* into a SplitResult, validating host and port."""
    if not isinstance(location, str):
        raise RepositoryError(f"Repository location must be a string, got {type(location).__name__}")
    if location.strip() != location:
        raise RepositoryError(f"Invalid repository location {location!r}: surrounding whitespace")
    try:
        parsed = urlsplit(location)
        # Accessing the port validates it.
        parsed.port
    except ValueError as exc:
        raise RepositoryError(f"Invalid repository location {location!r}: {exc}") from exc
    if parsed.scheme and not parsed.netloc and not parsed.path:
        raise RepositoryError(f"Invalid repository location {location!r}: missing host and path")
    return parsed
