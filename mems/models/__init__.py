"""Pydantic input models for MCP tool validation.

Each model represents the input schema for one tool, with field-level
validation and descriptive error messages. Logical paths are validated with
the same rules the store applies, so unsafe paths never reach the filesystem.

Architecture:
- base: Base models (BaseRootsInput, BaseMemInput) for common validation
- entry_models: Input models for single-mem CRUD and archive operations
- search_models: Input models for listing, search and maintenance operations
- root_models: Input models for store root management

Usage:
    from mems.models import AddMemInput, ShowMemInput
    from mems.models import FindMemsInput, LintMemsInput
"""

from .base import BaseMemInput, BaseRootsInput
from .entry_models import (
    AddMemInput,
    ShowMemInput,
    EditMemInput,
    RemoveMemInput,
    ArchiveMemInput,
)
from .search_models import (
    BasePrefixInput,
    ListMemsInput,
    MemTreeInput,
    FindMemsInput,
    FindMemsByTagInput,
    StaleMemsInput,
    LintMemsInput,
    DumpMemsInput,
)
from .root_models import (
    ListRootsInput,
    SetActiveRootsInput,
    InitRootInput,
)

__all__ = [
    # Base models
    "BaseRootsInput",
    "BaseMemInput",
    "BasePrefixInput",
    # Entry models
    "AddMemInput",
    "ShowMemInput",
    "EditMemInput",
    "RemoveMemInput",
    "ArchiveMemInput",
    # Search and maintenance models
    "ListMemsInput",
    "MemTreeInput",
    "FindMemsInput",
    "FindMemsByTagInput",
    "StaleMemsInput",
    "LintMemsInput",
    "DumpMemsInput",
    # Root models
    "ListRootsInput",
    "SetActiveRootsInput",
    "InitRootInput",
]
