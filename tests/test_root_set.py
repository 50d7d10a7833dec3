"""Tests for federated root sets: precedence, enumeration, discovery."""

from datetime import datetime, timezone

import pytest

from mems.core.entry_operations import create_entry, read_entry
from mems.core.root_operations import RootSet, discover_root, init_root
from mems.errors import AlreadyExistsError, InvalidSegmentError, NotFoundError

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def roots(tmp_path):
    first = init_root(tmp_path / "a" / ".mems")
    second = init_root(tmp_path / "b" / ".mems")
    return RootSet([first, second], labels=["a", "b"])


def test_read_prefers_earlier_root(roots):
    create_entry(roots, "x", body="B-ver", root_index=1, now=NOW)
    # Same path in root 0 has to be written directly since create refuses duplicates
    single = RootSet([roots.root(0)])
    create_entry(single, "x", body="A-ver", now=NOW)

    entry = read_entry(roots, "x")
    assert entry.body == "A-ver"
    assert entry.root == roots.root(0)


def test_read_falls_through_to_later_root(roots):
    create_entry(roots, "only/in-b", body="b", root_index=1, now=NOW)
    assert read_entry(roots, "only/in-b").root == roots.root(1)


def test_from_paths_labels_roots_by_path(tmp_path):
    root_set = RootSet.from_paths([tmp_path / "a", str(tmp_path / "b")])
    assert len(root_set) == 2
    assert root_set.label(1) == str((tmp_path / "b").resolve())


def test_enumerate_lists_shadowed_path_once(roots):
    create_entry(RootSet([roots.root(1)]), "x", body="B-ver", now=NOW)
    create_entry(RootSet([roots.root(0)]), "x", body="A-ver", now=NOW)
    create_entry(roots, "y", body="y", root_index=1, now=NOW)

    handles = roots.enumerate().handles
    assert [handle.logical_path for handle in handles] == ["x", "y"]
    assert handles[0].root_index == 0
    assert handles[1].root_index == 1


def test_enumerate_prefix_is_segment_wise(roots):
    for path in ("arch/x", "architecture/y", "arch/deep/z"):
        create_entry(roots, path, body="body", now=NOW)

    listed = [handle.logical_path for handle in roots.enumerate("arch").handles]
    assert listed == ["arch/deep/z", "arch/x"]


def test_enumerate_hides_archive_unless_requested(roots):
    create_entry(roots, "live", body="body", now=NOW)
    create_entry(roots, "archive/old", body="body", now=NOW)

    assert [h.logical_path for h in roots.enumerate().handles] == ["live"]
    assert [h.logical_path for h in roots.enumerate(include_archived=True).handles] == [
        "archive/old",
        "live",
    ]
    assert [h.logical_path for h in roots.enumerate("archive").handles] == ["archive/old"]


def test_enumerate_reports_unsafe_file_names(roots):
    (roots.root(0) / "bad name .md").write_text("x", encoding="utf-8")
    (roots.root(0) / "double.md.md").write_text("x", encoding="utf-8")

    result = roots.enumerate()
    assert result.handles == []
    assert sorted(d.logical_path for d in result.diagnostics) == ["bad name ", "double.md"]
    assert all(isinstance(d.error, InvalidSegmentError) for d in result.diagnostics)


def test_resolve_read_missing_raises_not_found(roots):
    with pytest.raises(NotFoundError):
        roots.resolve_read("nowhere")


def test_resolve_write_rejects_bad_index(roots):
    with pytest.raises(NotFoundError):
        roots.resolve_write("x", root_index=5)


def test_empty_root_set_is_rejected():
    with pytest.raises(ValueError):
        RootSet([])


def test_discover_root_walks_upwards(tmp_path):
    store = init_root(tmp_path / ".mems")
    nested = tmp_path / "src" / "pkg"
    nested.mkdir(parents=True)

    assert discover_root(nested) == store
    assert list(RootSet.discover(nested)) == [store]


def test_discover_root_without_store(tmp_path):
    with pytest.raises(NotFoundError):
        discover_root(tmp_path / "nothing-here")


def test_init_root_refuses_existing_directory(tmp_path):
    init_root(tmp_path / ".mems")
    with pytest.raises(AlreadyExistsError):
        init_root(tmp_path / ".mems")
