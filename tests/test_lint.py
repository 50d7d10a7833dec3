"""Tests for the read-only lint validator."""

from datetime import datetime, timedelta, timezone

import pytest

from mems.core.entry_operations import create_entry
from mems.core.lint_operations import (
    BROKEN_LINK,
    DUPLICATE_TAG,
    EMPTY_BODY,
    EMPTY_TITLE,
    MALFORMED_HEADER,
    TIMESTAMP_ORDER,
    UNSAFE_PATH,
    lint,
    lint_entry,
    lint_store,
)
from mems.core.root_operations import RootSet, init_root
from mems.data_models import Entry

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _entry(path="t", **overrides):
    fields = dict(
        logical_path=path,
        title="Title",
        created_at=T0,
        updated_at=T0,
        tags=[],
        body="body",
    )
    fields.update(overrides)
    return Entry(**fields)


@pytest.fixture
def store(tmp_path):
    return RootSet([init_root(tmp_path / ".mems")])


def _kinds(violations):
    return [violation.kind for violation in violations]


def test_clean_entry_has_no_violations():
    assert lint_entry(_entry()) == []


def test_timestamp_order():
    entry = _entry(created_at=T0 + timedelta(days=1))
    assert _kinds(lint_entry(entry)) == [TIMESTAMP_ORDER]


def test_empty_title():
    assert _kinds(lint_entry(_entry(title="  "))) == [EMPTY_TITLE]


def test_duplicate_tag():
    violations = lint_entry(_entry(tags=["db", "ops", "db"]))
    assert _kinds(violations) == [DUPLICATE_TAG]
    assert "db" in violations[0].message


def test_unsafe_path():
    assert _kinds(lint_entry(_entry(path="a/../b"))) == [UNSAFE_PATH]


def test_empty_body_is_a_warning():
    violations = lint_entry(_entry(body="\n"))
    assert _kinds(violations) == [EMPTY_BODY]
    assert violations[0].severity == "warning"


def test_broken_relative_link():
    entries = [
        _entry("guides/setup", body="See [deploy](deploy.md) and [gone](../arch/gone.md)."),
        _entry("guides/deploy"),
    ]
    violations = lint(entries)
    assert _kinds(violations) == [BROKEN_LINK]
    assert violations[0].logical_path == "guides/setup"
    assert "../arch/gone.md" in violations[0].message


def test_external_links_are_ignored():
    entry = _entry(body="[site](https://example.com/page.md) [mail](mailto:a@b.md)")
    assert lint([entry]) == []


def test_store_lint_detects_timestamp_order_without_mutating(store):
    path = store.root(0) / "bad.md"
    raw = (
        "---\n"
        "title: Bad\n"
        "created-at: 2024-05-02T00:00:00+00:00\n"
        "updated-at: 2024-05-01T00:00:00+00:00\n"
        "---\n"
        "\n"
        "body\n"
    )
    path.write_text(raw, encoding="utf-8")
    before = path.stat().st_mtime_ns

    violations, checked = lint_store(store)

    assert checked == 1
    assert [(v.logical_path, v.kind) for v in violations] == [("bad", TIMESTAMP_ORDER)]
    assert path.read_text(encoding="utf-8") == raw
    assert path.stat().st_mtime_ns == before


def test_store_lint_reports_malformed_and_unsafe_files(store):
    create_entry(store, "good", body="fine", now=T0)
    (store.root(0) / "broken.md").write_text("no header", encoding="utf-8")
    (store.root(0) / "bad:name.md").write_text("x", encoding="utf-8")

    violations, checked = lint_store(store)

    assert checked == 3
    assert [(v.logical_path, v.kind) for v in violations] == [
        ("bad:name", UNSAFE_PATH),
        ("broken", MALFORMED_HEADER),
    ]


def test_store_lint_includes_archive_by_default(store):
    create_entry(store, "archive/old", body="", now=T0)

    violations, _ = lint_store(store)
    assert [(v.logical_path, v.kind) for v in violations] == [("archive/old", EMPTY_BODY)]
