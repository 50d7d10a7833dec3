"""Base Pydantic models for MCP tool input validation.

This module defines base models that provide common validation patterns
for mem operations. Other input models inherit from these bases.

Base Models:
- BaseRootsInput: Optional explicit root set shared by every tool
- BaseMemInput: Adds logical path validation for single-mem operations
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from mems.core.path_operations import normalize_logical_path


class BaseRootsInput(BaseModel):
    """Base model carrying the optional root set for an operation."""

    roots: Optional[list[str]] = Field(
        None,
        description=(
            "Ordered store roots (directories or configured root names). "
            "Earlier roots shadow later ones for reads. "
            "Omit to use the session's active roots or the configured default."
        ),
        examples=[["~/code/app/.mems", "~/notes/.mems"], ["project", "shared"]]
    )

    @field_validator('roots')
    @classmethod
    def validate_roots(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Reject empty root specifiers and treat an empty list as omitted.

        Raises:
            ValueError: If any root entry is empty or whitespace
        """
        if v is None:
            return None

        cleaned = [root.strip() for root in v]
        if any(not root for root in cleaned):
            raise ValueError(
                "Root entries cannot be empty. "
                "Provide store directories or configured root names, or omit 'roots'."
            )

        return cleaned or None


class BaseMemInput(BaseRootsInput):
    """Base model for operations on a single mem.

    Provides standard validation for logical paths. All single-mem input
    models should inherit from this class.
    """

    path: str = Field(
        min_length=1,
        description=(
            "Logical mem path (without .md extension). "
            "Examples: 'arch/decisions/adr-001', 'guides/setup'. "
            "Forward slashes for hierarchy, case-sensitive."
        ),
        examples=["arch/decisions/adr-001", "guides/setup", "README"]
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate the logical path with the same rules the store enforces.

        Enforces:
        - Non-empty path without empty segments
        - No path traversal attempts (.., .)
        - Relative path only (no absolute paths)
        - Strips .md extension if present

        Returns:
            The normalized logical path

        Raises:
            ValueError: If the path is unsafe or malformed
        """
        return normalize_logical_path(v)
