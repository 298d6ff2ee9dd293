# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Source control handlers and the fetch procedure."""

from componentizer.scm.git_ops import GitError
from componentizer.scm.handlers import (
    SCHEME_FILE,
    SCHEME_GIT,
    SCHEME_HTTP,
    SCHEME_HTTPS,
    FetchedComponent,
    FetchError,
    FileScmHandler,
    GitScmHandler,
    ScmError,
    ScmHandler,
    UnsupportedSchemeError,
    fetch_through_scm,
    get_scm_handler,
)

__all__ = [
    "FetchError",
    "FetchedComponent",
    "FileScmHandler",
    "GitError",
    "GitScmHandler",
    "SCHEME_FILE",
    "SCHEME_GIT",
    "SCHEME_HTTP",
    "SCHEME_HTTPS",
    "ScmError",
    "ScmHandler",
    "UnsupportedSchemeError",
    "fetch_through_scm",
    "get_scm_handler",
]
