"""Tests for archival (soft-delete by relocation)."""

import errno
from datetime import datetime, timedelta, timezone

import pytest

from mems.core import archive_operations
from mems.core.archive_operations import archive_entry, archive_path_for
from mems.core.entry_operations import create_entry, read_entry
from mems.core.root_operations import RootSet, init_root
from mems.errors import (
    AlreadyArchivedError,
    AlreadyExistsError,
    IoFailure,
    NotFoundError,
)

T0 = datetime(2023, 3, 1, 8, 30, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(days=200)


@pytest.fixture
def store(tmp_path):
    return RootSet([init_root(tmp_path / ".mems")])


def test_archive_path_for():
    assert archive_path_for("arch/adr-001") == "archive/arch/adr-001"


def test_moves_entry_and_refreshes_updated_at(store):
    original = create_entry(store, "arch/adr-001", title="ADR", body="Body\n", tags=["db"], now=T0)

    archived = archive_entry(store, "arch/adr-001", now=T1)

    assert archived.logical_path == "archive/arch/adr-001"
    assert archived.archived
    assert archived.updated_at == T1
    assert archived.updated_at > original.updated_at
    assert archived.created_at == original.created_at

    with pytest.raises(NotFoundError):
        read_entry(store, "arch/adr-001")

    stored = read_entry(store, "archive/arch/adr-001")
    assert (stored.title, stored.tags, stored.body) == ("ADR", ["db"], "Body\n")
    assert stored.updated_at == T1


def test_prunes_emptied_source_directory(store):
    create_entry(store, "arch/adr-001", now=T0)
    archive_entry(store, "arch/adr-001", now=T1)

    assert not (store.root(0) / "arch").exists()


def test_top_level_archive_name_can_be_archived(store):
    create_entry(store, "archive", body="x", now=T0)

    archived = archive_entry(store, "archive", now=T1)

    assert archived.logical_path == "archive/archive"
    assert (store.root(0) / "archive" / "archive.md").is_file()
    assert not (store.root(0) / "archive.md").exists()


def test_missing_entry_is_not_found(store):
    with pytest.raises(NotFoundError):
        archive_entry(store, "nope", now=T1)


def test_already_archived_is_rejected(store):
    create_entry(store, "x", now=T0)
    archive_entry(store, "x", now=T1)

    with pytest.raises(AlreadyArchivedError):
        archive_entry(store, "archive/x", now=T1)


def test_existing_archive_target_is_rejected(store):
    create_entry(store, "x", body="first", now=T0)
    archive_entry(store, "x", now=T1)
    create_entry(store, "x", body="second", now=T0)

    with pytest.raises(AlreadyExistsError):
        archive_entry(store, "x", now=T1)

    assert read_entry(store, "x").body == "second"
    assert read_entry(store, "archive/x").body == "first"


def test_archives_within_the_holding_root(tmp_path):
    roots = RootSet([init_root(tmp_path / "a"), init_root(tmp_path / "b")])
    create_entry(roots, "x", root_index=1, now=T0)

    archived = archive_entry(roots, "x", now=T1)

    assert archived.root == roots.root(1)
    assert (roots.root(1) / "archive" / "x.md").exists()
    assert not (roots.root(0) / "archive" / "x.md").exists()


def test_cross_device_fallback_copies_then_deletes(store, monkeypatch):
    create_entry(store, "x", body="payload", now=T0)

    def exdev(src, dst):
        raise OSError(errno.EXDEV, "Invalid cross-device link")

    monkeypatch.setattr(archive_operations.os, "rename", exdev)
    archived = archive_entry(store, "x", now=T1)

    assert archived.logical_path == "archive/x"
    assert not (store.root(0) / "x.md").exists()
    assert read_entry(store, "archive/x").body == "payload"


def test_failed_rename_leaves_original_intact(store, monkeypatch):
    create_entry(store, "x", body="payload", now=T0)

    def denied(src, dst):
        raise OSError(errno.EACCES, "Permission denied")

    monkeypatch.setattr(archive_operations.os, "rename", denied)
    with pytest.raises(IoFailure):
        archive_entry(store, "x", now=T1)

    assert read_entry(store, "x").body == "payload"
