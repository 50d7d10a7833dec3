"""YAML frontmatter codec for mem documents."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from typing import Any

import frontmatter
import yaml

from mems.constants import (
    CREATED_KEY,
    HEADER_DELIMITER,
    REQUIRED_KEYS,
    TAGS_KEY,
    TITLE_KEY,
    UPDATED_KEY,
)
from mems.data_models import Entry, format_timestamp
from mems.errors import (
    InvalidTimestampError,
    MissingDelimiterError,
    MissingRequiredFieldError,
)

logger = logging.getLogger(__name__)

_HANDLER = frontmatter.YAMLHandler()
_CLOSING_DELIMITER = re.compile(r"^---[ \t]*\r?$", re.MULTILINE)
# Keep long titles on one line.
_UNWRAPPED_WIDTH = 1_000_000


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


class _Timestamp(str):
    """Marker for header timestamps so they are emitted as plain YAML timestamps."""


class _HeaderDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indent(flow, False)


def _represent_timestamp(dumper: yaml.SafeDumper, data: _Timestamp) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:timestamp", str(data))


_HeaderDumper.add_representer(_Timestamp, _represent_timestamp)


def parse_timestamp(value: Any, field: str, logical_path: str = "") -> datetime:
    """Coerce a decoded header value into an aware UTC datetime.

    Args:
        value: Value produced by the YAML loader (datetime, date or string).
        field: Header key the value came from, used in error messages.
        logical_path: Mem the header belongs to, for error context.

    Returns:
        A timezone-aware UTC :class:`datetime` truncated to the second.

    Raises:
        InvalidTimestampError: If the value cannot be interpreted as a timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text[-1] in "zZ":
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidTimestampError(
                f"Header field '{field}' is not a valid timestamp: {value!r}",
                field=field,
                logical_path=logical_path,
            ) from exc
    else:
        raise InvalidTimestampError(
            f"Header field '{field}' is not a valid timestamp: {value!r}",
            field=field,
            logical_path=logical_path,
        )

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).replace(microsecond=0)


def _split_document(raw_text: str, logical_path: str) -> tuple[str, str]:
    """Split raw text into ``(header_yaml, body)`` on the ``---`` marker lines."""
    text = raw_text[1:] if raw_text.startswith("\ufeff") else raw_text

    first_line, newline, rest = text.partition("\n")
    if first_line.rstrip(" \t\r") != HEADER_DELIMITER or not newline:
        raise MissingDelimiterError(
            "Missing header: document must start with a '---' line.",
            logical_path=logical_path,
        )

    closing = _CLOSING_DELIMITER.search(rest)
    if closing is None:
        raise MissingDelimiterError(
            "Missing header: no closing '---' line found.",
            logical_path=logical_path,
        )

    header = rest[: closing.start()]
    body = rest[closing.end():]
    # Drop the newline ending the closing marker, then one blank separator line.
    for _ in range(2):
        if body.startswith("\r\n"):
            body = body[2:]
        elif body.startswith("\n"):
            body = body[1:]
        else:
            break
    return header, body


def _decode_header(header: str, logical_path: str) -> dict[str, Any]:
    try:
        metadata = _HANDLER.load(header)
    except yaml.YAMLError as exc:
        raise MissingRequiredFieldError(
            f"Header contains invalid YAML: {exc}",
            field="header",
            logical_path=logical_path,
        ) from exc
    except ValueError as exc:
        # YAML timestamps with impossible dates fail in the constructor.
        raise InvalidTimestampError(
            f"Header contains an invalid timestamp: {exc}",
            field="header",
            logical_path=logical_path,
        ) from exc

    if not isinstance(metadata, dict):
        raise MissingRequiredFieldError(
            "Header must be a mapping of key/value pairs.",
            field="header",
            logical_path=logical_path,
        )
    return metadata


def _decode_tags(value: Any, logical_path: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [str(tag).strip() for tag in value if tag is not None and str(tag).strip()]
    raise MissingRequiredFieldError(
        f"Header field '{TAGS_KEY}' must be a list of strings.",
        field=TAGS_KEY,
        logical_path=logical_path,
    )


# ==============================================================================
# CODEC
# ==============================================================================


def parse_entry(raw_text: str, logical_path: str = "") -> Entry:
    """Parse a mem document into an :class:`Entry`.

    Args:
        raw_text: Full file contents.
        logical_path: Logical path the document was read from.

    Returns:
        The decoded entry. Unknown header keys are kept in ``Entry.extra``.

    Raises:
        MissingDelimiterError: If the opening or closing ``---`` line is absent.
        MissingRequiredFieldError: If ``title``, ``created-at`` or ``updated-at``
            cannot be decoded.
        InvalidTimestampError: If a timestamp field is not parseable.
    """
    header, body = _split_document(raw_text, logical_path)
    metadata = _decode_header(header, logical_path)

    for key in REQUIRED_KEYS:
        if metadata.get(key) is None:
            raise MissingRequiredFieldError(
                f"Header is missing required field '{key}'.",
                field=key,
                logical_path=logical_path,
            )

    title = metadata[TITLE_KEY]
    if isinstance(title, (dict, list)):
        raise MissingRequiredFieldError(
            f"Header field '{TITLE_KEY}' must be a string.",
            field=TITLE_KEY,
            logical_path=logical_path,
        )

    extra = {
        key: value
        for key, value in metadata.items()
        if key not in (TITLE_KEY, CREATED_KEY, UPDATED_KEY, TAGS_KEY)
    }

    return Entry(
        logical_path=logical_path,
        title=str(title),
        created_at=parse_timestamp(metadata[CREATED_KEY], CREATED_KEY, logical_path),
        updated_at=parse_timestamp(metadata[UPDATED_KEY], UPDATED_KEY, logical_path),
        tags=_decode_tags(metadata.get(TAGS_KEY), logical_path),
        body=body,
        extra=extra,
    )


def serialize_entry(entry: Entry) -> str:
    """Serialize an entry into the on-disk header+body format.

    The header always lists ``title``, ``created-at`` and ``updated-at`` first,
    then ``tags`` (omitted when empty), then pass-through keys. One blank line
    separates the closing marker from the verbatim body.
    """
    metadata: dict[str, Any] = {
        TITLE_KEY: entry.title,
        CREATED_KEY: _Timestamp(format_timestamp(entry.created_at)),
        UPDATED_KEY: _Timestamp(format_timestamp(entry.updated_at)),
    }
    if entry.tags:
        metadata[TAGS_KEY] = list(entry.tags)
    for key, value in entry.extra.items():
        if key not in metadata:
            metadata[key] = value

    header = _HANDLER.export(
        metadata, Dumper=_HeaderDumper, sort_keys=False, width=_UNWRAPPED_WIDTH
    )
    return f"{HEADER_DELIMITER}\n{header}\n{HEADER_DELIMITER}\n\n{entry.body}"
