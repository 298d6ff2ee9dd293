# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the repository value type."""

import pytest

from componentizer.model.repository import Repository, RepositoryError, create_repository

# ###############
# Creation
# ###############


class TestCreateRepository:
    def test_parses_location(self):
        """The location is parsed into scheme, host and path."""
        repo = create_repository("https://github.com/example/repo1", "master")
        assert repo.scheme == "https"
        assert repo.location.netloc == "github.com"
        assert repo.location.path == "/example/repo1"
        assert repo.ref == "master"
        assert repo.auth == {}

    def test_copies_auth(self):
        """The credentials mapping is copied, not shared."""
        auth = {"user": "me"}
        repo = create_repository("https://host/repo", auth=auth)
        auth["user"] = "someone else"
        assert repo.auth == {"user": "me"}

    def test_accepts_relative_location(self):
        """A bare path is a valid location without scheme."""
        repo = create_repository("repo2", "dev")
        assert repo.scheme == ""
        assert repo.location.path == "repo2"

    def test_rejects_invalid_port(self):
        """A non-numeric port is a parse error."""
        with pytest.raises(RepositoryError, match="Invalid repository location"):
            create_repository("https://host:notaport/repo")

    def test_rejects_unbalanced_ipv6_host(self):
        """An unterminated IPv6 host is a parse error."""
        with pytest.raises(RepositoryError):
            create_repository("http://[::1/repo")

    def test_rejects_scheme_without_host_or_path(self):
        """A scheme alone does not designate any repository."""
        with pytest.raises(RepositoryError, match="missing host and path"):
            create_repository("https:")

    def test_rejects_surrounding_whitespace(self):
        """Locations are not silently trimmed."""
        with pytest.raises(RepositoryError, match="whitespace"):
            create_repository(" https://host/repo")

    def test_str_renders_location_and_ref(self):
        """The string form is location@ref."""
        assert str(create_repository("git://host/repo", "v1.0")) == "git://host/repo@v1.0"

    def test_str_of_empty_repository(self):
        """A repository without location renders as an empty string."""
        assert str(Repository()) == ""


# ###############
# Merge
# ###############


class TestMerge:
    def test_other_fields_override(self):
        """Location, ref and colliding credentials all come from the override."""
        base = create_repository("https://host/l1", "master", {"k1": "a"})
        base.merge(create_repository("https://host/l2", "dev", {"k1": "b", "k2": "c"}))
        assert base.url == "https://host/l2"
        assert base.ref == "dev"
        assert base.auth == {"k1": "b", "k2": "c"}

    def test_empty_fields_do_not_override(self):
        """An empty ref and empty credentials leave the receiver untouched."""
        base = create_repository("https://github.com/example/repo1", "master", {"key1": "abc", "key2": "def"})
        base.merge(create_repository("repo2", "", {}))
        assert base.location.path == "repo2"
        assert base.ref == "master"
        assert base.auth == {"key1": "abc", "key2": "def"}

    def test_empty_location_does_not_override(self):
        """An override without location keeps the receiver's location."""
        base = create_repository("https://host/repo", "master")
        base.merge(Repository(ref="dev"))
        assert base.url == "https://host/repo"
        assert base.ref == "dev"

    def test_merge_into_zero_value(self):
        """Merging into an empty repository copies every field."""
        base = Repository()
        base.merge(create_repository("repo2", "dev", {"key1": "abc"}))
        assert base.location.path == "repo2"
        assert base.ref == "dev"
        assert base.auth == {"key1": "abc"}


# ###############
# Child repositories
# ###############


class TestCreateChildRepository:
    def test_relative_location_is_joined_to_parent_directory(self):
        """A relative child path resolves against the parent's directory."""
        parent = create_repository("scheme://host/group/parent")
        child = parent.create_child_repository("../sibling/child")
        assert child.url == "scheme://host/sibling/child"

    def test_sibling_location(self):
        """A bare name designates a sibling of the parent."""
        parent = create_repository("https://host/group/parent", "master")
        child = parent.create_child_repository("child", "v2")
        assert child.url == "https://host/group/child"
        assert child.ref == "v2"

    def test_rooted_location_replaces_parent_path(self):
        """A child path starting with '/' replaces the whole parent path."""
        parent = create_repository("scheme://host/group/parent")
        child = parent.create_child_repository("/other/child")
        assert child.url == "scheme://host/other/child"

    def test_absolute_location_is_kept(self):
        """A child location with its own scheme ignores the parent."""
        parent = create_repository("https://host/group/parent")
        child = parent.create_child_repository("git://elsewhere/repo", auth={"token": "t"})
        assert child.url == "git://elsewhere/repo"
        assert child.auth == {"token": "t"}

    def test_parent_query_is_preserved(self):
        """Only the path of the parent location is rewritten."""
        parent = create_repository("https://host/group/parent?x=1")
        child = parent.create_child_repository("child")
        assert child.url == "https://host/group/child?x=1"

    def test_parent_without_location(self):
        """Without a parent location the child location is used as-is."""
        child = Repository().create_child_repository("some/path")
        assert child.url == "some/path"

    def test_file_scheme_sibling(self):
        """Local file locations resolve like remote ones."""
        parent = create_repository("file:///srv/components/main")
        assert parent.create_child_repository("base").url == "file:///srv/components/base"
