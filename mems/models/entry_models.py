"""Pydantic input models for mem CRUD operations.

This module defines input models for single-mem tools:
- Add a new mem
- Show a mem
- Edit title, tags or content
- Remove a mem permanently
- Archive a mem
"""

from __future__ import annotations

from typing import Optional
from pydantic import Field, field_validator, model_validator

from .base import BaseMemInput


def _clean_tags(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return None
    return [tag.strip() for tag in v if tag.strip()]


class ShowMemInput(BaseMemInput):
    """Input model for show_mem tool.

    Examples:
        >>> ShowMemInput(path="guides/setup")
        >>> ShowMemInput(path="arch/decisions/adr-001", roots=["~/notes/.mems"])
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"path": "guides/setup", "roots": None},
                {"path": "arch/decisions/adr-001", "roots": ["~/notes/.mems"]}
            ]
        }


class AddMemInput(BaseMemInput):
    """Input model for add_mem tool.

    Examples:
        >>> AddMemInput(path="guides/setup", content="Run make install.")
        >>> AddMemInput(path="arch/adr-001", content="...", title="ADR 1", tags=["arch"])
    """

    content: str = Field(
        description="Markdown body of the mem (stored verbatim, can be empty)."
    )

    title: Optional[str] = Field(
        None,
        description="Title. Defaults to the last path segment with dashes as spaces."
    )

    tags: Optional[list[str]] = Field(
        None,
        description="Tags for the mem. Duplicates are removed.",
        examples=[["database", "postgres"]]
    )

    root_index: int = Field(
        0,
        ge=0,
        description="Index of the root (in the root set) that receives the new file."
    )

    force: bool = Field(
        False,
        description="Overwrite the mem if it already exists in the target root."
    )

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Drop blank tags."""
        return _clean_tags(v)


class EditMemInput(BaseMemInput):
    """Input model for edit_mem tool.

    At least one of content, title or tags must be provided.

    Examples:
        >>> EditMemInput(path="guides/setup", content="Updated steps.")
        >>> EditMemInput(path="guides/setup", tags=["onboarding"])
    """

    content: Optional[str] = Field(None, description="New markdown body.")
    title: Optional[str] = Field(None, description="New title.")
    tags: Optional[list[str]] = Field(
        None,
        description="Replacement tag list (an empty list clears tags)."
    )
    root_index: Optional[int] = Field(
        None,
        ge=0,
        description="Edit the copy in this root. Omit to edit the visible copy."
    )

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Drop blank tags."""
        return _clean_tags(v)

    @model_validator(mode='after')
    def validate_has_changes(self) -> 'EditMemInput':
        """Ensure the edit changes something."""
        if self.content is None and self.title is None and self.tags is None:
            raise ValueError(
                "Nothing to edit. Provide at least one of 'content', 'title' or 'tags'."
            )
        return self


class RemoveMemInput(BaseMemInput):
    """Input model for remove_mem tool (permanent deletion).

    Examples:
        >>> RemoveMemInput(path="scratch/old-idea")
    """

    root_index: Optional[int] = Field(
        None,
        ge=0,
        description="Remove the copy in this root. Omit to remove the visible copy."
    )


class ArchiveMemInput(BaseMemInput):
    """Input model for archive_mem tool.

    Examples:
        >>> ArchiveMemInput(path="guides/setup")
    """

    root_index: Optional[int] = Field(
        None,
        ge=0,
        description="Archive the copy in this root. Omit to archive the visible copy."
    )
