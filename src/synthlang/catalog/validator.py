"""
catalog/validator.py: JSON Schema validation for catalog and chord YAML files.

Usage:
    from synthlang.catalog.validator import validate_catalog_file

    issues = validate_catalog_file(Path("instrument.yaml"))
    for issue in issues:
        print(issue)

Structural problems are reported here as issues; semantic problems (allow-lists
naming unknown kinds) are raised by :class:`CatalogLoader` at load time.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

CATALOG_SCHEMA = "catalog.schema.json"
CHORDS_SCHEMA = "chords.schema.json"


@dataclass
class CatalogIssue:
    """A single validation finding for a catalog YAML file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "components/lfo/role"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema(name: str) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open() as fh:
        return json.load(fh)


def _load_registry() -> Registry:
    """Build a jsonschema Registry containing all catalog schemas."""
    schema_names = [
        "_defs.schema.json",
        CATALOG_SCHEMA,
        CHORDS_SCHEMA,
    ]
    resources = []
    for name in schema_names:
        schema = _load_schema(name)
        resources.append(
            (schema["$id"], Resource(contents=schema, specification=DRAFT202012))
        )
    return Registry().with_resources(resources)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _range_warnings(yaml_path: Path, doc: dict[str, Any]) -> list[CatalogIssue]:
    """Defaults outside [min, max] are accepted but reported."""
    issues: list[CatalogIssue] = []
    for section in ("components", "triggers"):
        for kind, spec in (doc.get(section) or {}).items():
            for name, attr in ((spec or {}).get("attributes") or {}).items():
                default = attr.get("default")
                if not isinstance(default, (int, float)):
                    continue
                low, high = attr.get("min"), attr.get("max")
                if (low is not None and default < low) or (
                    high is not None and default > high
                ):
                    issues.append(
                        CatalogIssue(
                            file=yaml_path,
                            message=f"default {default} is outside [{low}, {high}]",
                            path=f"{section}/{kind}/attributes/{name}",
                            severity="warning",
                        )
                    )
    return issues


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_yaml_file(
    yaml_path: Path,
    schema_name: str = CATALOG_SCHEMA,
    *,
    registry: Registry | None = None,
) -> list[CatalogIssue]:
    """
    Validate a single YAML file against the named schema.

    Args:
        yaml_path:   Path to the YAML file to validate.
        schema_name: Filename of the schema (e.g. ``"catalog.schema.json"``).
        registry:    Pre-built schema registry.  Built automatically if omitted.

    Returns:
        A list of :class:`CatalogIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [CatalogIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            CatalogIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    if registry is None:
        registry = _load_registry()

    schema = _load_schema(schema_name)
    validator = Draft202012Validator(schema, registry=registry)

    issues = [
        CatalogIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(raw), key=lambda e: list(e.path))
    ]

    if not issues and schema_name == CATALOG_SCHEMA:
        issues.extend(_range_warnings(yaml_path, raw))

    return issues


def validate_catalog_file(
    catalog_path: Path,
    chords_path: Path | None = None,
    *,
    strict: bool = False,
) -> list[CatalogIssue]:
    """
    Validate a catalog file and, optionally, its chord table.

    Args:
        catalog_path: The component/trigger catalog YAML.
        chords_path:  The chord table YAML, if any.
        strict:       If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of :class:`CatalogIssue` objects. Empty means valid.
    """
    if not catalog_path.is_file():
        return [
            CatalogIssue(file=catalog_path, message=f"Catalog file does not exist: {catalog_path}")
        ]

    try:
        registry = _load_registry()
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        return [
            CatalogIssue(
                file=_SCHEMAS_DIR,
                message=f"Failed to load JSON Schema files: {exc}",
            )
        ]

    issues = validate_yaml_file(catalog_path, CATALOG_SCHEMA, registry=registry)
    if chords_path is not None and chords_path.is_file():
        issues.extend(validate_yaml_file(chords_path, CHORDS_SCHEMA, registry=registry))

    if strict:
        for issue in issues:
            if issue.severity == "warning":
                issue.severity = "error"

    logger.debug("Validated %s: %d issue(s)", catalog_path, len(issues))
    return issues
