"""Search and discovery operations for mems."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Iterator

from mems.data_models import Entry

logger = logging.getLogger(__name__)

TAG_MATCH = "tag"
TEXT_MATCH = "text"


@dataclass(frozen=True)
class SearchMatch:
    """A search hit and how it matched."""

    entry: Entry
    kind: str

    def as_payload(self) -> dict[str, Any]:
        payload = self.entry.as_payload(include_body=False)
        payload["match"] = self.kind
        return payload


def _has_exact_tag(entry: Entry, query: str) -> bool:
    return query in entry.tags


def _contains_text(entry: Entry, query_lower: str) -> bool:
    if query_lower in entry.title.lower() or query_lower in entry.body.lower():
        return True
    return any(query_lower in tag.lower() for tag in entry.tags)


class SearchResults:
    """Lazy, restartable sequence of search matches.

    Exact tag matches come first, then substring matches; each group is ordered
    by logical path and an entry is reported once. Every ``iter()`` starts a
    fresh pass, and the substring pass only runs once the tag matches have been
    consumed.
    """

    def __init__(self, entries: Iterable[Entry], query: str) -> None:
        cleaned = query.strip()
        if not cleaned:
            raise ValueError("Search query cannot be empty.")
        self.query = cleaned
        self._entries = sorted(entries, key=lambda entry: entry.logical_path)

    def __iter__(self) -> Iterator[SearchMatch]:
        for entry in self._entries:
            if _has_exact_tag(entry, self.query):
                yield SearchMatch(entry=entry, kind=TAG_MATCH)

        query_lower = self.query.lower()
        for entry in self._entries:
            if not _has_exact_tag(entry, self.query) and _contains_text(entry, query_lower):
                yield SearchMatch(entry=entry, kind=TEXT_MATCH)

    def entries(self) -> Iterator[Entry]:
        for match in self:
            yield match.entry


def search(entries: Iterable[Entry], query: str) -> SearchResults:
    """Match entries whose title, tags or body contain ``query``.

    The match is a case-insensitive substring test; an entry whose tags contain
    ``query`` exactly ranks ahead of substring-only matches.

    Raises:
        ValueError: If the query is empty or whitespace.
    """
    return SearchResults(entries, query)


def search_by_tags(
    entries: Iterable[Entry],
    tags: list[str],
    match_all: bool = False,
) -> list[Entry]:
    """Filter entries by tags (case-insensitive), ordered by logical path.

    Args:
        entries: Entries to filter.
        tags: Tags to look for.
        match_all: When True require all tags; when False match any tag.

    Raises:
        ValueError: If the tags list is empty or contains only whitespace.
    """
    if not tags or not any(tag.strip() for tag in tags):
        raise ValueError("Must specify at least one non-empty tag.")

    normalized_search_tags = [tag.strip().lower() for tag in tags if tag.strip()]
    matches: list[Entry] = []

    for entry in entries:
        normalized_entry_tags = [tag.lower() for tag in entry.tags]
        if not normalized_entry_tags:
            continue
        if match_all:
            has_match = all(tag in normalized_entry_tags for tag in normalized_search_tags)
        else:
            has_match = any(tag in normalized_entry_tags for tag in normalized_search_tags)
        if has_match:
            matches.append(entry)

    matches.sort(key=lambda entry: entry.logical_path)
    logger.debug("Tag search %s matched %d mem(s)", normalized_search_tags, len(matches))
    return matches
