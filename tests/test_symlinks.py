"""Tests for SymlinkClient."""

import os
from pathlib import Path

import pytest

from repofarm.domain import Link
from repofarm.infra.symlinks import SymlinkClient, points_to


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "dots" / "vimrc"
    path.parent.mkdir()
    path.write_text("set number\n")
    return path


@pytest.fixture
def client():
    return SymlinkClient()


class TestCreate:
    """Tests for creating links."""

    def test_creates_link_and_parent_dirs(self, client, source, tmp_path):
        target = tmp_path / "home" / ".config" / "vimrc"
        result = client.create(Link(tx=str(source), rx=str(target)))

        assert result.success
        assert result.skipped is None
        assert target.is_symlink()
        assert target.read_text() == "set number\n"

    def test_second_create_is_noop(self, client, source, tmp_path):
        link = Link(tx=str(source), rx=str(tmp_path / ".vimrc"))
        client.create(link)

        result = client.create(link)

        assert result.success
        assert result.skipped == "already linked"

    def test_relative_existing_link_counts_as_correct(self, client, source, tmp_path):
        target = tmp_path / ".vimrc"
        os.symlink(os.path.relpath(source, tmp_path), target)

        result = client.create(Link(tx=str(source), rx=str(target)))

        assert result.skipped == "already linked"

    def test_relative_source_is_linked_absolutely(self, client, source, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        target = tmp_path / "home" / ".vimrc"
        link = Link(tx="dots/vimrc", rx=str(target))

        first = client.create(link)

        assert first.success
        assert target.exists()
        assert os.path.isabs(os.readlink(target))
        assert Path(os.readlink(target)).resolve() == source.resolve()
        second = client.create(link)
        assert second.success
        assert second.skipped == "already linked"
        assert client.remove(link).skipped is None
        assert not target.is_symlink()

    def test_missing_source_fails(self, client, tmp_path):
        result = client.create(Link(tx=str(tmp_path / "nope"), rx=str(tmp_path / ".vimrc")))

        assert not result.success
        assert "Source not found" in result.output
        assert not (tmp_path / ".vimrc").exists()

    def test_regular_file_is_never_replaced(self, client, source, tmp_path):
        target = tmp_path / ".vimrc"
        target.write_text("mine\n")

        for force in (False, True):
            result = client.create(Link(tx=str(source), rx=str(target)), force=force)
            assert not result.success
            assert "not a symlink" in result.output
        assert target.read_text() == "mine\n"

    def test_directory_is_never_replaced(self, client, source, tmp_path):
        target = tmp_path / "config"
        target.mkdir()
        result = client.create(Link(tx=str(source), rx=str(target)), force=True)
        assert not result.success
        assert target.is_dir()

    def test_other_link_fails_without_force(self, client, source, tmp_path):
        other = tmp_path / "other"
        other.write_text("other\n")
        target = tmp_path / ".vimrc"
        target.symlink_to(other)

        result = client.create(Link(tx=str(source), rx=str(target)))

        assert not result.success
        assert "different file" in result.output
        assert points_to(target, other)

    def test_other_link_replaced_with_force(self, client, source, tmp_path):
        other = tmp_path / "other"
        other.write_text("other\n")
        target = tmp_path / ".vimrc"
        target.symlink_to(other)

        result = client.create(Link(tx=str(source), rx=str(target)), force=True)

        assert result.success
        assert points_to(target, source)

    def test_broken_link_fails_without_force(self, client, source, tmp_path):
        target = tmp_path / ".vimrc"
        target.symlink_to(tmp_path / "gone")

        result = client.create(Link(tx=str(source), rx=str(target)))

        assert not result.success
        assert "Broken symlink" in result.output

    def test_broken_link_replaced_with_force(self, client, source, tmp_path):
        target = tmp_path / ".vimrc"
        target.symlink_to(tmp_path / "gone")

        assert client.create(Link(tx=str(source), rx=str(target)), force=True).success
        assert target.read_text() == "set number\n"


class TestRemove:
    """Tests for removing links."""

    def test_removes_matching_link(self, client, source, tmp_path):
        link = Link(tx=str(source), rx=str(tmp_path / ".vimrc"))
        client.create(link)

        result = client.remove(link)

        assert result.success
        assert result.skipped is None
        assert not (tmp_path / ".vimrc").exists()
        assert source.exists()

    def test_remove_twice_is_noop(self, client, source, tmp_path):
        link = Link(tx=str(source), rx=str(tmp_path / ".vimrc"))
        client.create(link)
        client.remove(link)

        result = client.remove(link)

        assert result.success
        assert result.skipped == "not linked"

    def test_regular_file_left_alone(self, client, source, tmp_path):
        target = tmp_path / ".vimrc"
        target.write_text("mine\n")

        result = client.remove(Link(tx=str(source), rx=str(target)))

        assert result.skipped == "not a symlink"
        assert target.read_text() == "mine\n"

    def test_link_elsewhere_left_alone(self, client, source, tmp_path):
        other = tmp_path / "other"
        other.write_text("other\n")
        target = tmp_path / ".vimrc"
        target.symlink_to(other)

        result = client.remove(Link(tx=str(source), rx=str(target)))

        assert result.skipped == "points elsewhere"
        assert target.is_symlink()
