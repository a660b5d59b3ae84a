"""Interpreter configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from synthlang.catalog import DEFAULT_CATALOG_PATH, SchemaCatalog, load_catalog

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class InterpreterConfig:
    """Where the catalog lives and how strictly documents are parsed."""

    catalog_path: Path = DEFAULT_CATALOG_PATH
    strict: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> InterpreterConfig:
        """Create config from environment variables.

        1. SYNTHLANG_CATALOG_PATH: catalog YAML (default: the shipped catalog)
        2. SYNTHLANG_STRICT: 1/true/yes rejects deprecated syntax
        3. SYNTHLANG_LOG_LEVEL: logging level name (default: WARNING)
        """
        catalog_path = os.environ.get("SYNTHLANG_CATALOG_PATH")
        strict = os.environ.get("SYNTHLANG_STRICT", "").strip().lower() in _TRUTHY
        log_level = os.environ.get("SYNTHLANG_LOG_LEVEL", "WARNING").strip().upper()

        return cls(
            catalog_path=Path(catalog_path) if catalog_path else DEFAULT_CATALOG_PATH,
            strict=strict,
            log_level=log_level or "WARNING",
        )

    @property
    def logging_level(self) -> int:
        """Numeric level for ``log_level``; unknown names fall back to WARNING."""
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.WARNING

    def load_catalog(self) -> SchemaCatalog:
        return load_catalog(self.catalog_path)
