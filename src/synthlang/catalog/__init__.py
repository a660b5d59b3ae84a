"""Schema catalog: component, trigger and attribute kinds.

This module provides:
- SchemaCatalog and its schema types
- CatalogLoader: loads the catalog from YAML
- validate_catalog_file: JSON Schema validation of catalog files
"""

from synthlang.catalog.loader import (
    DEFAULT_CATALOG_PATH,
    DEFAULT_CHORDS_PATH,
    CatalogLoader,
    describe_catalog,
    load_catalog,
    load_default_catalog,
)
from synthlang.catalog.types import (
    AttributeSchema,
    AttributeType,
    CatalogError,
    ComponentRole,
    ComponentSchema,
    SchemaCatalog,
    TriggerSchema,
)
from synthlang.catalog.validator import CatalogIssue, validate_catalog_file

__all__ = [
    # Loader
    "DEFAULT_CATALOG_PATH",
    "DEFAULT_CHORDS_PATH",
    "CatalogLoader",
    "describe_catalog",
    "load_catalog",
    "load_default_catalog",
    # Types
    "AttributeSchema",
    "AttributeType",
    "CatalogError",
    "ComponentRole",
    "ComponentSchema",
    "SchemaCatalog",
    "TriggerSchema",
    # Validator
    "CatalogIssue",
    "validate_catalog_file",
]
