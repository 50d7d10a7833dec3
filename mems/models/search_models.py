"""Pydantic input models for listing, search and maintenance operations.

This module defines input models for store-wide tools:
- List mems under a prefix
- Show the mem hierarchy
- Search mems by text and tag
- Filter mems by tags
- Report stale mems
- Lint the store
- Dump mems into one document
"""

from __future__ import annotations

from typing import Optional
from pydantic import Field, field_validator

from mems.core.root_operations import parse_prefix

from .base import BaseRootsInput


class BasePrefixInput(BaseRootsInput):
    """Shared prefix and archive filtering for store-wide listings."""

    prefix: Optional[str] = Field(
        None,
        description=(
            "Only include mems under this logical path prefix (segment-wise). "
            "Examples: 'arch', 'arch/decisions'. Omit for the whole store."
        ),
        examples=["arch", "guides"]
    )

    include_archived: bool = Field(
        False,
        description="If True, include mems under archive/."
    )

    @field_validator('prefix')
    @classmethod
    def validate_prefix(cls, v: Optional[str]) -> Optional[str]:
        """Validate the prefix with the store's path rules.

        Raises:
            ValueError: If the prefix is unsafe
        """
        segments = parse_prefix(v)
        return "/".join(segments) or None


class ListMemsInput(BasePrefixInput):
    """Input model for list_mems tool.

    Examples:
        >>> ListMemsInput()
        >>> ListMemsInput(prefix="arch", include_archived=True)
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"prefix": None, "include_archived": False},
                {"prefix": "arch", "include_archived": True}
            ]
        }


class MemTreeInput(BasePrefixInput):
    """Input model for mem_tree tool.

    Examples:
        >>> MemTreeInput(prefix="arch")
    """


class FindMemsInput(BaseRootsInput):
    """Input model for find_mems tool.

    Exact tag matches rank first, then case-insensitive text matches in
    title, body and tags.

    Examples:
        >>> FindMemsInput(query="postgres")
        >>> FindMemsInput(query="database", limit=5)
    """

    query: str = Field(
        min_length=1,
        description="Text or tag to search for.",
        examples=["postgres", "deployment"]
    )

    limit: Optional[int] = Field(
        None,
        ge=1,
        le=500,
        description="Maximum number of results (omit for all)."
    )

    include_archived: bool = Field(
        False,
        description="If True, search archived mems too."
    )

    @field_validator('query')
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Validate query is not only whitespace."""
        if not v.strip():
            raise ValueError(
                "Search query cannot be empty or whitespace only. "
                "Provide text or a tag to search for."
            )
        return v.strip()


class FindMemsByTagInput(BaseRootsInput):
    """Input model for find_mems_by_tag tool.

    Examples:
        >>> FindMemsByTagInput(tags=["database"])
        >>> FindMemsByTagInput(tags=["database", "postgres"], match_all=True)
    """

    tags: list[str] = Field(
        min_length=1,
        description=(
            "Tags to search for (case-insensitive). "
            "Examples: ['database'], ['database', 'postgres']"
        )
    )

    match_all: bool = Field(
        False,
        description=(
            "If True, require all tags (AND logic). "
            "If False, match any tag (OR logic). "
            "Default: False"
        )
    )

    include_archived: bool = Field(
        False,
        description="If True, include archived mems."
    )

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        """Validate tags list contains at least one non-empty tag."""
        cleaned_tags = [tag.strip() for tag in v if tag.strip()]

        if not cleaned_tags:
            raise ValueError(
                "Tags list cannot contain only empty strings. "
                "Provide valid tag names."
            )

        return cleaned_tags


class StaleMemsInput(BasePrefixInput):
    """Input model for stale_mems tool.

    Examples:
        >>> StaleMemsInput()
        >>> StaleMemsInput(days=30)
    """

    days: Optional[int] = Field(
        None,
        ge=0,
        description=(
            "Report mems not updated in more than this many days. "
            "Omit to use the configured stale_days."
        )
    )


class LintMemsInput(BasePrefixInput):
    """Input model for lint_mems tool.

    Archived mems are linted by default.

    Examples:
        >>> LintMemsInput()
    """

    include_archived: bool = Field(
        True,
        description="If True, lint mems under archive/ as well."
    )


class DumpMemsInput(BasePrefixInput):
    """Input model for dump_mems tool.

    Examples:
        >>> DumpMemsInput(prefix="arch")
    """
