"""Pydantic input models for store root management.

This module defines input models for root tools:
- List configured roots and session state
- Set the active root set for a session
- Initialize a new store root
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ListRootsInput(BaseModel):
    """Input model for list_mem_roots tool.

    Takes no parameters, but using a model maintains API consistency.

    Examples:
        >>> ListRootsInput()
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{}]
        }


class SetActiveRootsInput(BaseModel):
    """Input model for set_active_roots tool.

    Subsequent tool calls that omit ``roots`` use this root set.

    Examples:
        >>> SetActiveRootsInput(roots=["project", "shared"])
        >>> SetActiveRootsInput(roots=["~/code/app/.mems"])
    """

    roots: list[str] = Field(
        min_length=1,
        description=(
            "Ordered store roots (configured names or directories). "
            "Use list_mem_roots() to discover configured names."
        ),
        examples=[["project", "shared"], ["~/code/app/.mems"]]
    )

    @field_validator('roots')
    @classmethod
    def validate_roots(cls, v: list[str]) -> list[str]:
        """Validate every root entry is non-empty."""
        cleaned = [root.strip() for root in v]
        if any(not root for root in cleaned):
            raise ValueError(
                "Root entries cannot be empty. "
                "Use list_mem_roots() to see available roots."
            )
        return cleaned


class InitRootInput(BaseModel):
    """Input model for init_mem_root tool.

    Examples:
        >>> InitRootInput(path="~/code/app/.mems")
    """

    path: Optional[str] = Field(
        None,
        description=(
            "Directory to create. Omit to create .mems/ in the server's "
            "working directory."
        ),
        examples=["~/code/app/.mems"]
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: Optional[str]) -> Optional[str]:
        """Reject blank paths."""
        if v is not None and not v.strip():
            raise ValueError("Root path cannot be empty. Omit it to use the working directory.")
        return v.strip() if v else None
