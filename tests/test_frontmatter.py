import unittest
from datetime import date, datetime, timezone

from mems.core.frontmatter_operations import (
    parse_entry,
    parse_timestamp,
    serialize_entry,
)
from mems.data_models import Entry
from mems.errors import (
    FormatError,
    InvalidTimestampError,
    MissingDelimiterError,
    MissingRequiredFieldError,
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class ParseEntryTests(unittest.TestCase):
    def test_parses_header_fields_and_body(self) -> None:
        raw = (
            "---\n"
            "title: ADR 001\n"
            "created-at: 2024-01-02T03:04:05Z\n"
            "updated-at: 2024-02-03T04:05:06+00:00\n"
            "tags:\n"
            "  - arch\n"
            "  - db\n"
            "---\n"
            "\n"
            "# Decision\n\nUse Postgres.\n"
        )
        entry = parse_entry(raw, "arch/adr-001")

        self.assertEqual(entry.logical_path, "arch/adr-001")
        self.assertEqual(entry.title, "ADR 001")
        self.assertEqual(entry.created_at, _utc(2024, 1, 2, 3, 4, 5))
        self.assertEqual(entry.updated_at, _utc(2024, 2, 3, 4, 5, 6))
        self.assertEqual(entry.tags, ["arch", "db"])
        self.assertEqual(entry.body, "# Decision\n\nUse Postgres.\n")

    def test_tags_are_optional(self) -> None:
        raw = "---\ntitle: T\ncreated-at: 2024-01-01T00:00:00Z\nupdated-at: 2024-01-01T00:00:00Z\n---\n\nbody"
        entry = parse_entry(raw, "t")
        self.assertEqual(entry.tags, [])

    def test_single_string_tag_is_accepted(self) -> None:
        raw = "---\ntitle: T\ncreated-at: 2024-01-01T00:00:00Z\nupdated-at: 2024-01-01T00:00:00Z\ntags: ops\n---\n\nbody"
        self.assertEqual(parse_entry(raw, "t").tags, ["ops"])

    def test_unknown_keys_are_preserved(self) -> None:
        raw = (
            "---\ntitle: T\ncreated-at: 2024-01-01T00:00:00Z\n"
            "updated-at: 2024-01-01T00:00:00Z\nowner: platform\n---\n\nbody"
        )
        entry = parse_entry(raw, "t")
        self.assertEqual(entry.extra, {"owner": "platform"})
        self.assertIn("owner: platform", serialize_entry(entry))

    def test_naive_timestamp_is_taken_as_utc(self) -> None:
        self.assertEqual(
            parse_timestamp("2024-05-06T07:08:09", "created-at"),
            _utc(2024, 5, 6, 7, 8, 9),
        )

    def test_date_timestamp_is_midnight_utc(self) -> None:
        self.assertEqual(parse_timestamp(date(2024, 5, 6), "created-at"), _utc(2024, 5, 6))

    def test_offset_timestamp_is_converted_to_utc(self) -> None:
        self.assertEqual(
            parse_timestamp("2024-05-06T09:08:09+02:00", "updated-at"),
            _utc(2024, 5, 6, 7, 8, 9),
        )

    def test_body_without_blank_separator_is_kept(self) -> None:
        raw = "---\ntitle: T\ncreated-at: 2024-01-01T00:00:00Z\nupdated-at: 2024-01-01T00:00:00Z\n---\nbody"
        self.assertEqual(parse_entry(raw, "t").body, "body")

    def test_body_may_contain_delimiter_lines(self) -> None:
        raw = (
            "---\ntitle: T\ncreated-at: 2024-01-01T00:00:00Z\n"
            "updated-at: 2024-01-01T00:00:00Z\n---\n\nabove\n---\nbelow\n"
        )
        self.assertEqual(parse_entry(raw, "t").body, "above\n---\nbelow\n")

    def test_byte_order_mark_is_ignored(self) -> None:
        raw = "\ufeff---\ntitle: T\ncreated-at: 2024-01-01T00:00:00Z\nupdated-at: 2024-01-01T00:00:00Z\n---\n\nbody"
        self.assertEqual(parse_entry(raw, "t").title, "T")


class ParseEntryErrorTests(unittest.TestCase):
    def test_missing_opening_delimiter(self) -> None:
        with self.assertRaises(MissingDelimiterError) as ctx:
            parse_entry("title: T\n\nbody", "t")
        self.assertEqual(ctx.exception.logical_path, "t")

    def test_missing_closing_delimiter(self) -> None:
        with self.assertRaises(MissingDelimiterError):
            parse_entry("---\ntitle: T\ncreated-at: 2024-01-01T00:00:00Z\n", "t")

    def test_missing_required_field(self) -> None:
        raw = "---\ntitle: T\ncreated-at: 2024-01-01T00:00:00Z\n---\n\nbody"
        with self.assertRaises(MissingRequiredFieldError) as ctx:
            parse_entry(raw, "t")
        self.assertEqual(ctx.exception.field, "updated-at")

    def test_invalid_timestamp(self) -> None:
        raw = "---\ntitle: T\ncreated-at: yesterday\nupdated-at: 2024-01-01T00:00:00Z\n---\n\nbody"
        with self.assertRaises(InvalidTimestampError) as ctx:
            parse_entry(raw, "t")
        self.assertEqual(ctx.exception.field, "created-at")

    def test_impossible_calendar_date(self) -> None:
        raw = "---\ntitle: T\ncreated-at: 2024-02-30T00:00:00Z\nupdated-at: 2024-03-01T00:00:00Z\n---\n\nbody"
        with self.assertRaises(InvalidTimestampError) as ctx:
            parse_entry(raw, "t")
        self.assertEqual(ctx.exception.logical_path, "t")
        self.assertIsInstance(ctx.exception, FormatError)

    def test_invalid_yaml_is_a_format_error(self) -> None:
        raw = "---\ntitle: [unclosed\n---\n\nbody"
        with self.assertRaises(FormatError):
            parse_entry(raw, "t")

    def test_header_must_be_a_mapping(self) -> None:
        with self.assertRaises(MissingRequiredFieldError):
            parse_entry("---\n- a\n- b\n---\n\nbody", "t")

    def test_format_errors_are_value_errors(self) -> None:
        with self.assertRaises(ValueError):
            parse_entry("no header", "t")


class SerializeEntryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.entry = Entry(
            logical_path="guides/setup",
            title="Setup guide",
            created_at=_utc(2024, 1, 2, 3, 4, 5),
            updated_at=_utc(2024, 1, 3, 3, 4, 5),
            tags=["onboarding", "dev"],
            body="Run make install.\n",
        )

    def test_serializes_stable_layout(self) -> None:
        self.assertEqual(
            serialize_entry(self.entry),
            "---\n"
            "title: Setup guide\n"
            "created-at: 2024-01-02T03:04:05+00:00\n"
            "updated-at: 2024-01-03T03:04:05+00:00\n"
            "tags:\n"
            "  - onboarding\n"
            "  - dev\n"
            "---\n"
            "\n"
            "Run make install.\n",
        )

    def test_empty_tags_are_omitted(self) -> None:
        self.entry.tags = []
        self.assertNotIn("tags", serialize_entry(self.entry))

    def test_round_trip_preserves_entry(self) -> None:
        self.entry.extra = {"owner": "platform"}
        parsed = parse_entry(serialize_entry(self.entry), "guides/setup")
        self.assertEqual(parsed, self.entry)

    def test_round_trip_preserves_awkward_body_and_title(self) -> None:
        self.entry.title = "Colons: quotes 'and' #hashes"
        self.entry.body = "\n\nleading blank lines\n---\ntrailing without newline"
        parsed = parse_entry(serialize_entry(self.entry), "guides/setup")
        self.assertEqual(parsed.title, self.entry.title)
        self.assertEqual(parsed.body, self.entry.body)

    def test_round_trip_of_numeric_looking_title(self) -> None:
        self.entry.title = "2024"
        parsed = parse_entry(serialize_entry(self.entry), "guides/setup")
        self.assertEqual(parsed.title, "2024")


if __name__ == "__main__":
    unittest.main()
