"""Configuration loading and store root registry."""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from mems.constants import CONFIG_PATH, DEFAULT_STALE_DAYS, STORE_DIRNAME
from mems.core.root_operations import RootSet, discover_root
from mems.data_models import RootMetadata

logger = logging.getLogger(__name__)


class StoreConfiguration:
    """Holds configured store roots and the default precedence order.

    Provides root lookup by name, the default :class:`RootSet` and payload
    serialization for MCP responses.
    """

    def __init__(
        self,
        roots: dict[str, RootMetadata],
        default_roots: list[str],
        stale_days: int = DEFAULT_STALE_DAYS,
    ) -> None:
        self.roots = roots
        self.default_roots = default_roots
        self.stale_days = stale_days

    def get(self, name: str) -> RootMetadata:
        """Get root metadata by name.

        Raises:
            ValueError: If the root name is not found in configuration.
        """
        try:
            return self.roots[name]
        except KeyError as exc:
            raise ValueError(f"Unknown store root '{name}'") from exc

    def root_set(self, names: Optional[list[str]] = None) -> RootSet:
        """Build a root set from root names (defaults to the configured order)."""
        selected = [self.get(name) for name in (names or self.default_roots)]
        return RootSet([meta.path for meta in selected], labels=[meta.name for meta in selected])

    def as_payload(self) -> dict[str, Any]:
        return {
            "default": list(self.default_roots),
            "stale_days": self.stale_days,
            "roots": [root.as_payload() for root in self.roots.values()],
        }


def _root_metadata(name: str, path: Path, description: str = "") -> RootMetadata:
    resolved_path = path.expanduser()
    try:
        resolved_path = resolved_path.resolve(strict=False)
    except RuntimeError:
        # resolve can raise on symlink loops; fall back to the expanded path
        pass
    return RootMetadata(
        name=name,
        path=resolved_path,
        description=description,
        exists=resolved_path.is_dir(),
    )


def load_store_configuration(config_path: Path = CONFIG_PATH) -> StoreConfiguration:
    """Load and validate the store configuration file.

    Args:
        config_path: Path to the YAML configuration file. Defaults to ``mems.yaml``
            next to the package.

    Returns:
        A :class:`StoreConfiguration` with normalized root metadata.

    Raises:
        FileNotFoundError: If the configuration file is missing.
        ValueError: If the file does not provide the expected structure.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Store configuration file not found at {config_path}")

    raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw_config, dict):
        raise ValueError("Store configuration must be a mapping")

    roots_section = raw_config.get("roots")
    if not isinstance(roots_section, dict) or not roots_section:
        raise ValueError("Store configuration must include a non-empty 'roots' mapping")

    processed: dict[str, RootMetadata] = {}
    for name, entry in roots_section.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Store root '{name}' must map to a dictionary of settings")

        raw_path = entry.get("path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError(f"Store root '{name}' is missing a valid 'path' string")

        description = str(entry.get("description") or "").strip()
        processed[str(name)] = _root_metadata(str(name), Path(raw_path), description)

    default_roots = raw_config.get("default", list(processed))
    if isinstance(default_roots, str):
        default_roots = [default_roots]
    if (
        not isinstance(default_roots, list)
        or not default_roots
        or any(name not in processed for name in default_roots)
    ):
        raise ValueError("Store configuration 'default' must list roots present in the mapping")

    stale_days = raw_config.get("stale_days", DEFAULT_STALE_DAYS)
    if not isinstance(stale_days, int) or isinstance(stale_days, bool) or stale_days < 0:
        raise ValueError("Store configuration 'stale_days' must be a non-negative integer")

    return StoreConfiguration(roots=processed, default_roots=default_roots, stale_days=stale_days)


def discovered_configuration(start: Optional[Path] = None) -> StoreConfiguration:
    """Configuration with a single root found by walking up from ``start``."""
    root = discover_root(start)
    metadata = _root_metadata(STORE_DIRNAME, root, f"Discovered from {root.parent}")
    return StoreConfiguration(roots={metadata.name: metadata}, default_roots=[metadata.name])


@functools.lru_cache(maxsize=1)
def get_store_configuration() -> StoreConfiguration:
    """Return the configuration, loading it on first use.

    Falls back to ``.mems`` discovery from the working directory when no
    configuration file exists.
    """
    if CONFIG_PATH.exists():
        logger.info("Loading store configuration from %s", CONFIG_PATH)
        return load_store_configuration(CONFIG_PATH)
    logger.info("No configuration at %s; discovering %s/ from %s", CONFIG_PATH, STORE_DIRNAME, Path.cwd())
    return discovered_configuration()
