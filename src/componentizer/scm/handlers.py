# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""SCM handlers materializing component repositories on local storage.

A handler implements four operations (``matches``, ``fetch``, ``update`` and
``switch``). The handler used for a component is selected from the scheme of
its repository location:

* ``file`` is served by :class:`FileScmHandler`, which copies a local
  directory and has no notion of revision.
* ``git``, ``http`` and ``https`` are served by :class:`GitScmHandler`.

Any other scheme raises :class:`UnsupportedSchemeError`.
"""

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import SplitResult
from urllib.request import url2pathname

from componentizer.model.interfaces import Component
from componentizer.scm import git_ops

# ###############
# Public Interface
# ###############

SCHEME_FILE = "file"
SCHEME_GIT = "git"
SCHEME_HTTP = "http"
SCHEME_HTTPS = "https"


class ScmError(Exception):
    """Base class of the errors raised while materializing a component."""


class UnsupportedSchemeError(ScmError):
    """Raised when no handler is registered for a repository scheme."""

    def __init__(self, scheme: str, location: str = "") -> None:
        self.scheme = scheme
        super().__init__(f"Unsupported SCM scheme '{scheme}' for location '{location}'")


class FetchError(ScmError):
    """Raised when a handler fails to fetch, update or switch a component."""

    def __init__(self, component_id: str, message: str) -> None:
        self.component_id = component_id
        super().__init__(f"Cannot fetch component '{component_id}': {message}")


class ScmHandler(ABC):
    """The operations needed to materialize a repository into a local directory."""

    @abstractmethod
    def matches(self, location: SplitResult, path: Path) -> bool:
        """Return True if *path* already holds a working copy of *location*.

        A matching working copy is refreshed in place with :meth:`update`
        instead of being deleted and fetched again.
        """
        ...

    @abstractmethod
    def fetch(self, location: SplitResult, path: Path, auth: dict[str, str]) -> None:
        """Populate the empty *path* with the content of *location*."""
        ...

    @abstractmethod
    def update(self, location: SplitResult, path: Path, auth: dict[str, str]) -> None:
        """Refresh the matching working copy at *path*."""
        ...

    @abstractmethod
    def switch(self, path: Path, ref: str) -> None:
        """Move the working copy at *path* to the version *ref*."""
        ...


class FileScmHandler(ScmHandler):
    """Handler copying components from the local filesystem."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def matches(self, location: SplitResult, path: Path) -> bool:
        # A plain directory has no revision to compare, always copy again.
        return False

    def fetch(self, location: SplitResult, path: Path, auth: dict[str, str]) -> None:
        source = Path(url2pathname(location.path))
        self._logger.debug("Copying %s into %s", source, path)
        shutil.copytree(source, path, symlinks=True)

    def update(self, location: SplitResult, path: Path, auth: dict[str, str]) -> None:
        pass

    def switch(self, path: Path, ref: str) -> None:
        pass


class GitScmHandler(ScmHandler):
    """Handler cloning components from git repositories."""

    def __init__(self, logger: logging.Logger, timeout: int = git_ops.DEFAULT_TIMEOUT) -> None:
        self._logger = logger
        self._timeout = timeout

    def matches(self, location: SplitResult, path: Path) -> bool:
        remote = git_ops.get_remote_url(path)
        return remote is not None and remote == git_ops.strip_credentials(location.geturl())

    def fetch(self, location: SplitResult, path: Path, auth: dict[str, str]) -> None:
        self._logger.info("Cloning %s into %s", git_ops.strip_credentials(location.geturl()), path)
        git_ops.clone(location.geturl(), path, auth=auth, timeout=self._timeout)

    def update(self, location: SplitResult, path: Path, auth: dict[str, str]) -> None:
        self._logger.info("Updating %s from %s", path, git_ops.strip_credentials(location.geturl()))
        git_ops.fetch(path, location.geturl(), auth=auth, timeout=self._timeout)

    def switch(self, path: Path, ref: str) -> None:
        if not ref:
            ref = git_ops.default_branch(path) or ""
            if not ref:
                self._logger.debug("No default branch recorded in %s, keeping the checkout", path)
                return
        self._logger.debug("Checking out %s in %s", ref, path)
        git_ops.checkout(path, ref, timeout=self._timeout)


@dataclass
class FetchedComponent:
    """The single local materialization of a component.

    Attributes:
        id: Identity of the component.
        root_path: Directory holding the fetched content.
        component: Last resolved definition of the component.
    """

    id: str
    root_path: Path
    component: Component


def get_scm_handler(
    component: Component,
    logger: logging.Logger,
    *,
    git_timeout: int = git_ops.DEFAULT_TIMEOUT,
) -> ScmHandler:
    """Return the handler able to fetch *component*.

    Raises:
        UnsupportedSchemeError: If the repository scheme has no handler.
    """
    repository = component.repository()
    scheme = repository.scheme
    if scheme == SCHEME_FILE:
        return FileScmHandler(logger)
    if scheme in (SCHEME_GIT, SCHEME_HTTP, SCHEME_HTTPS):
        return GitScmHandler(logger, timeout=git_timeout)
    raise UnsupportedSchemeError(scheme, git_ops.strip_credentials(repository.url))


def fetch_through_scm(component: Component, handler: ScmHandler, work_dir: Path) -> FetchedComponent:
    """Materialize *component* under *work_dir* using *handler*.

    The target directory is ``work_dir / <component id>``. An existing
    working copy is updated in place when the handler recognizes it, and is
    deleted and fetched again otherwise. The requested ref is then checked
    out.

    Raises:
        FetchError: If any handler operation or filesystem step fails. The
            on-disk state is left as-is.
    """
    component_id = component.component_id()
    repository = component.repository()
    if repository.location is None:
        raise FetchError(component_id, "repository has no location")
    location = repository.location
    target = work_dir / component_id

    try:
        if target.exists():
            if handler.matches(location, target):
                handler.update(location, target, repository.auth)
            else:
                shutil.rmtree(target)
                handler.fetch(location, target, repository.auth)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            handler.fetch(location, target, repository.auth)
        handler.switch(target, repository.ref)
    except (git_ops.GitError, OSError) as exc:
        raise FetchError(component_id, str(exc)) from exc

    return FetchedComponent(id=component_id, root_path=target, component=component)
