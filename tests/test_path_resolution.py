"""Tests for logical path validation and sandboxed resolution."""

import os

import pytest

from mems.core.path_operations import (
    iter_document_files,
    normalize_logical_path,
    resolve,
    split_logical_path,
)
from mems.errors import InvalidSegmentError, PathError, TraversalError


@pytest.fixture
def store_root(tmp_path):
    root = tmp_path / ".mems"
    (root / "archive").mkdir(parents=True)
    return root


class TestSplitLogicalPath:
    def test_accepts_nested_path(self):
        assert split_logical_path("arch/decisions/adr-001") == ("arch", "decisions", "adr-001")

    def test_accepts_segment_sequence(self):
        assert split_logical_path(["arch", "adr-001"]) == ("arch", "adr-001")

    def test_strips_markdown_extension_and_whitespace(self):
        assert normalize_logical_path("  guides/setup.MD ") == "guides/setup"

    @pytest.mark.parametrize("path", ["../escape", "a/../../b", "a/./b", ".."])
    def test_rejects_traversal(self, path):
        with pytest.raises(TraversalError):
            split_logical_path(path)

    @pytest.mark.parametrize("path", ["/etc/passwd", "\\share\\x", "~/notes", "C:/Windows"])
    def test_rejects_absolute_paths(self, path):
        with pytest.raises(TraversalError):
            split_logical_path(path)

    @pytest.mark.parametrize("path", ["", "a//b", "a/", "   "])
    def test_rejects_empty_segments(self, path):
        with pytest.raises(InvalidSegmentError):
            split_logical_path(path)

    @pytest.mark.parametrize("path", ["a/b:c", "what?", "x\x00y", "pipe|d", ".hidden", "a/ spaced"])
    def test_rejects_unsafe_segments(self, path):
        with pytest.raises(InvalidSegmentError):
            split_logical_path(path)

    def test_path_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            split_logical_path("../x")


class TestResolve:
    def test_maps_segments_to_markdown_file(self, store_root):
        handle = resolve(store_root, "arch/adr-001", root_index=2)
        assert handle.path == store_root / "arch" / "adr-001.md"
        assert handle.logical_path == "arch/adr-001"
        assert handle.root_index == 2
        assert not handle.exists()

    def test_rejects_before_touching_filesystem(self, tmp_path):
        missing_root = tmp_path / "does-not-exist"
        with pytest.raises(PathError):
            resolve(missing_root, "../escape")
        assert not missing_root.exists()

    def test_rejects_symlink_escaping_root(self, store_root, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.md").write_text("x", encoding="utf-8")
        os.symlink(outside, store_root / "linked")

        with pytest.raises(TraversalError):
            resolve(store_root, "linked/secret")


class TestIterDocumentFiles:
    def test_skips_hidden_and_temp_files(self, store_root):
        (store_root / "keep.md").write_text("x", encoding="utf-8")
        (store_root / ".hidden.md").write_text("x", encoding="utf-8")
        (store_root / ".keep.md.abc.tmp").write_text("x", encoding="utf-8")
        (store_root / "notes.txt").write_text("x", encoding="utf-8")

        found = [segments for segments, _ in iter_document_files(store_root)]
        assert found == [("keep",)]

    def test_terminates_on_symlink_loop(self, store_root):
        nested = store_root / "a" / "b"
        nested.mkdir(parents=True)
        (nested / "leaf.md").write_text("x", encoding="utf-8")
        os.symlink(store_root / "a", nested / "loop")

        found = [segments for segments, _ in iter_document_files(store_root)]
        assert found == [("a", "b", "leaf")]

    def test_missing_root_yields_nothing(self, tmp_path):
        assert list(iter_document_files(tmp_path / "absent")) == []

    def test_unreadable_directory_goes_to_error_handler(self, store_root, monkeypatch):
        (store_root / "locked").mkdir()
        (store_root / "open.md").write_text("x", encoding="utf-8")
        real_iterdir = type(store_root).iterdir

        def iterdir(self):
            if self.name == "locked":
                raise PermissionError(13, "Permission denied", str(self))
            return real_iterdir(self)

        monkeypatch.setattr(type(store_root), "iterdir", iterdir)
        failures = []

        found = [
            segments
            for segments, _ in iter_document_files(
                store_root, on_error=lambda segments, exc: failures.append((segments, type(exc)))
            )
        ]

        assert found == [("open",)]
        assert failures == [(("locked",), PermissionError)]

        with pytest.raises(PermissionError):
            list(iter_document_files(store_root))
