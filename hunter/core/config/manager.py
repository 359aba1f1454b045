"""
ConfigManager: progression tunables and reference data.

Defaults come from every YAML file under ``defaults/`` (deep-merged in path
order). ``set()`` layers an in-memory override on a single dotted key, for
balance experiments and tests; ``reset()`` drops all overrides.

Reads never raise: a key that is neither overridden nor present in the
defaults resolves to the caller's ``default``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

import yaml

from hunter.core.logging.logger import get_logger

logger = get_logger(__name__)

DEFAULTS_DIR = Path(__file__).resolve().parent / "defaults"

_MISSING = object()


class ConfigManagerError(RuntimeError):
    """Base error type for ConfigManager-related failures."""


class ConfigWriteError(ConfigManagerError):
    """Raised when a configuration override cannot be applied."""


class ConfigManager:
    """
    Class-level singleton, like ``Config`` and ``DatabaseService``.

    Examples
    --------
    >>> ConfigManager.get("progression.threshold_base")
    100
    >>> ConfigManager.set("progression.cascade_rank_promotions", True)
    """

    _defaults: Dict[str, Any] = {}
    _overrides: Dict[str, Any] = {}
    _initialized: bool = False

    # =========================================================================
    # YAML LOADING
    # =========================================================================

    @staticmethod
    def _deep_merge(target: MutableMapping[str, Any], source: MutableMapping[str, Any]) -> None:
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge(target[key], value)
            else:
                target[key] = value

    @classmethod
    def initialize(cls, config_dir: Optional[Path] = None) -> None:
        """
        Load YAML defaults. Safe to call repeatedly; each call discards
        previous overrides.
        """
        config_dir = config_dir or DEFAULTS_DIR
        cls._defaults = {}
        cls._overrides = {}

        loaded = []
        if config_dir.exists():
            for yaml_file in sorted(config_dir.rglob("*.y*ml")):
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
                if isinstance(data, dict):
                    cls._deep_merge(cls._defaults, data)
                    loaded.append(str(yaml_file.relative_to(config_dir)))
                elif data is not None:
                    logger.warning(
                        "Ignoring non-dict YAML root object",
                        extra={"file": yaml_file.name, "root_type": type(data).__name__},
                    )
        else:
            logger.warning(
                "Config directory not found; no defaults loaded",
                extra={"config_dir": str(config_dir)},
            )

        cls._initialized = True
        logger.info(
            "ConfigManager initialized",
            extra={"yaml_files": loaded, "sections": sorted(cls._defaults)},
        )

    @classmethod
    def _lookup_default(cls, key: str) -> Any:
        node: Any = cls._defaults
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    # =========================================================================
    # READS & WRITES
    # =========================================================================

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Examples
        --------
        >>> ConfigManager.get("progression.baseline_stat_value")
        10
        >>> ConfigManager.get("progression.unknown", 0)
        0
        """
        if not cls._initialized:
            cls.initialize()

        if key in cls._overrides:
            return cls._overrides[key]

        value = cls._lookup_default(key)
        return default if value is _MISSING or value is None else value

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """
        Override one dotted key in memory.

        Raises
        ------
        ConfigWriteError
            A parent of ``key`` holds a scalar, not a section.
        """
        if not cls._initialized:
            cls.initialize()

        parts = key.split(".")
        for depth in range(1, len(parts)):
            parent = ".".join(parts[:depth])
            current = cls._overrides.get(parent, cls._lookup_default(parent))
            if current is not _MISSING and not isinstance(current, dict):
                raise ConfigWriteError(
                    f"Cannot set '{key}': '{parent}' is not a configuration section"
                )

        old_value = cls.get(key)
        cls._overrides[key] = value
        logger.info(
            "Configuration override applied",
            extra={"config_key": key, "old_value": old_value, "new_value": value},
        )

    @classmethod
    def reset(cls) -> None:
        """Drop all overrides."""
        cls._overrides = {}
        logger.debug("Configuration overrides cleared")
