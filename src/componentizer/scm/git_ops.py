# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Git operations backing the git SCM handler."""

import re
import shutil
import subprocess
from pathlib import Path
from urllib.parse import quote, urlsplit

# ###############
# Public Interface
# ###############

DEFAULT_TIMEOUT = 120

_COMMIT_HASH_RE = re.compile(r"^[0-9a-f]{40}$")


class GitError(Exception):
    """Raised when a git operation fails."""


def is_commit_hash(revision: str) -> bool:
    """Return True if *revision* is a full 40-character hexadecimal commit SHA."""
    return bool(_COMMIT_HASH_RE.match(revision))


def with_credentials(url: str, auth: dict[str, str]) -> str:
    """Return *url* with the credentials of *auth* injected as user info.

    Only ``http`` and ``https`` URLs are rewritten. A ``token`` entry is used
    as the password of an ``oauth2`` user unless a ``user`` is given; a
    ``user``/``password`` pair is used as-is. URLs already carrying user info
    are left untouched.
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or "@" in parts.netloc:
        return url
    password = auth.get("password") or auth.get("token")
    if not password:
        return url
    user = auth.get("user") or auth.get("username") or "oauth2"
    netloc = f"{quote(user, safe='')}:{quote(password, safe='')}@{parts.netloc}"
    return parts._replace(netloc=netloc).geturl()


def strip_credentials(url: str) -> str:
    """Return *url* without any user info."""
    parts = urlsplit(url)
    if "@" not in parts.netloc:
        return url
    return parts._replace(netloc=parts.netloc.rsplit("@", 1)[1]).geturl()


def clone(url: str, target_dir: Path, *, auth: dict[str, str] | None = None, timeout: int = DEFAULT_TIMEOUT) -> None:
    """Clone the repository at *url* into *target_dir*.

    The credentials of *auth* are only used for the network transfer; the
    recorded ``origin`` URL never contains them. On failure, any partially
    created *target_dir* is cleaned up.

    Raises:
        GitError: If any git operation fails.
    """
    target_dir.parent.mkdir(parents=True, exist_ok=True)
    try:
        _run_git(["clone", "--quiet", with_credentials(url, auth or {}), str(target_dir)], timeout=timeout)
        _run_git(["-C", str(target_dir), "remote", "set-url", "origin", strip_credentials(url)])
    except GitError:
        if target_dir.exists():
            shutil.rmtree(target_dir)
        raise


def fetch(target_dir: Path, url: str, *, auth: dict[str, str] | None = None, timeout: int = DEFAULT_TIMEOUT) -> None:
    """Refresh the remote-tracking branches and tags of an existing clone.

    Raises:
        GitError: If the fetch fails.
    """
    _run_git(
        [
            "-C",
            str(target_dir),
            "fetch",
            "--quiet",
            "--prune",
            "--tags",
            "--force",
            with_credentials(url, auth or {}),
            "+refs/heads/*:refs/remotes/origin/*",
        ],
        timeout=timeout,
    )


def get_remote_url(target_dir: Path) -> str | None:
    """Return the ``origin`` URL of a clone, or None if unavailable.

    Raises:
        GitError: If git is not available on the system.
    """
    result = _run_git_raw(["-C", str(target_dir), "config", "--get", "remote.origin.url"], timeout=10)
    if result.returncode != 0:
        return None
    url = result.stdout.strip()
    return url or None


def has_remote_branch(target_dir: Path, branch: str) -> bool:
    """Return True if ``origin/<branch>`` exists in the clone.

    Raises:
        GitError: If git is not available on the system.
    """
    result = _run_git_raw(
        ["-C", str(target_dir), "rev-parse", "--verify", "--quiet", f"refs/remotes/origin/{branch}"],
        timeout=10,
    )
    return result.returncode == 0


def checkout(target_dir: Path, ref: str, *, timeout: int = DEFAULT_TIMEOUT) -> None:
    """Check out *ref* in the clone.

    A branch known on ``origin`` is checked out as a local branch reset to
    the remote one; tags and commits are checked out detached.

    Raises:
        GitError: If the checkout fails.
    """
    if not is_commit_hash(ref) and has_remote_branch(target_dir, ref):
        _run_git(["-C", str(target_dir), "checkout", "--quiet", "-B", ref, f"origin/{ref}"], timeout=timeout)
    else:
        _run_git(["-C", str(target_dir), "checkout", "--quiet", "--detach", ref], timeout=timeout)


def default_branch(target_dir: Path) -> str | None:
    """Return the branch ``origin/HEAD`` points to, or None if the clone does not record it.

    Raises:
        GitError: If git is not available on the system.
    """
    result = _run_git_raw(
        ["-C", str(target_dir), "symbolic-ref", "--quiet", "--short", "refs/remotes/origin/HEAD"],
        timeout=10,
    )
    if result.returncode != 0:
        return None
    branch = result.stdout.strip().removeprefix("origin/")
    return branch or None


# ################
# Implementation
# ################


def _run_git_raw(args: list[str], *, timeout: int = DEFAULT_TIMEOUT) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the raw CompletedProcess result.

    Raises:
        GitError: If git is not found on PATH or the command times out.
    """
    try:
        return subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise GitError("git executable not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise GitError(f"Git command timed out: git {' '.join(_redact(args))}") from exc


def _run_git(args: list[str], *, timeout: int = DEFAULT_TIMEOUT) -> str:
    """Run a git command and return stdout, raising GitError on non-zero exit.

    Raises:
        GitError: If git is not found, times out, or exits with a non-zero code.
    """
    result = _run_git_raw(args, timeout=timeout)
    if result.returncode != 0:
        raise GitError(f"git {' '.join(_redact(args))}: {result.stderr.strip()}")
    return result.stdout


def _redact(args: list[str]) -> list[str]:
    """Strip credentials from URL arguments before they reach an error message."""
    return [strip_credentials(a) if "://" in a else a for a in args]
