"""Module-level constants for the mems store and MCP server."""

from pathlib import Path

# Configuration
CONFIG_PATH = Path(__file__).parent.parent / "mems.yaml"
STORE_DIRNAME = ".mems"

# On-disk layout
DOC_EXTENSION = ".md"
ARCHIVE_DIR = "archive"
HEADER_DELIMITER = "---"
TEMP_SUFFIX = ".tmp"

# Header keys, in serialization order
TITLE_KEY = "title"
CREATED_KEY = "created-at"
UPDATED_KEY = "updated-at"
TAGS_KEY = "tags"
REQUIRED_KEYS = (TITLE_KEY, CREATED_KEY, UPDATED_KEY)

# Staleness
DEFAULT_STALE_DAYS = 90

# Dump output
DUMP_RULE = "═" * 67
DUMP_DIVIDER = f"<!-- {DUMP_RULE} -->"

# Logging
LOG_LEVEL = "INFO"
