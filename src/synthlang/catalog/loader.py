"""Load and resolve the schema catalog from YAML files."""

import logging
from pathlib import Path
from typing import Any

import yaml

from synthlang.catalog.types import (
    AttributeSchema,
    AttributeType,
    CatalogError,
    ComponentRole,
    ComponentSchema,
    SchemaCatalog,
    TriggerSchema,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "instrument.yaml"
DEFAULT_CHORDS_PATH = DATA_DIR / "chords.yaml"


class CatalogLoader:
    """Loads component and trigger definitions from a catalog YAML file.

    The chord table is a separate YAML file; attributes declaring
    ``valuesFrom: chords`` get ``none`` plus every chord name as enum values.
    """

    def __init__(self, catalog_path: Path, chords_path: Path | None = None):
        self.catalog_path = catalog_path
        self.chords_path = chords_path if chords_path is not None else DEFAULT_CHORDS_PATH
        self.chords: dict[str, list[int]] = {}

    def load(self) -> SchemaCatalog:
        """Load the chord table, then the catalog, then cross-check references."""
        self._load_chords()
        data = self._read_yaml(self.catalog_path)

        components = {
            kind: self._resolve_component(kind, spec or {})
            for kind, spec in (data.get("components") or {}).items()
        }
        triggers = {
            kind: self._resolve_trigger(kind, spec or {})
            for kind, spec in (data.get("triggers") or {}).items()
        }

        catalog = SchemaCatalog(
            components=components,
            triggers=triggers,
            chords=dict(self.chords),
        )
        self._validate_references(catalog)

        logger.debug(
            "Loaded catalog %s: %d component kinds, %d trigger kinds",
            self.catalog_path,
            len(components),
            len(triggers),
        )
        return catalog

    def _read_yaml(self, path: Path) -> dict:
        if not path.exists():
            raise CatalogError(f"Catalog file not found: {path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise CatalogError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CatalogError(f"Catalog file {path} must contain a mapping")
        return data

    def _load_chords(self) -> None:
        """Load chord intervals, dropping the implied root."""
        self.chords = {}
        if not self.chords_path.exists():
            return

        data = self._read_yaml(self.chords_path)
        chords = data.get("chords") or []
        if not isinstance(chords, list):
            raise CatalogError(f"'chords' in {self.chords_path} must be a list")

        for i, chord in enumerate(chords):
            if not isinstance(chord, dict):
                raise CatalogError(f"Chord entry {i} in {self.chords_path} must be a mapping")
            name = chord.get("name")
            semitones = chord.get("semitones", [])
            if not isinstance(name, str) or not name:
                raise CatalogError(f"Chord entry {i} in {self.chords_path} needs a string 'name'")
            if not isinstance(semitones, list) or not all(
                isinstance(st, int) and not isinstance(st, bool) for st in semitones
            ):
                raise CatalogError(
                    f"Chord '{name}' in {self.chords_path} needs a list of integer 'semitones'"
                )
            self.chords[name] = [st for st in semitones if st != 0]

    def _resolve_component(self, kind: str, data: dict) -> ComponentSchema:
        role = data.get("role")
        try:
            component_role = ComponentRole(role)
        except ValueError:
            raise CatalogError(f"Component '{kind}' has unknown role '{role}'")

        return ComponentSchema(
            kind=kind,
            role=component_role,
            attributes=self._resolve_attributes(kind, data.get("attributes")),
            description=data.get("description", ""),
        )

    def _resolve_trigger(self, kind: str, data: dict) -> TriggerSchema:
        can_have_attributes = data.get("canHaveAttributes", False)
        attributes = self._resolve_attributes(kind, data.get("attributes"))

        if attributes and not can_have_attributes:
            raise CatalogError(
                f"Trigger '{kind}' declares attributes but canHaveAttributes is false"
            )

        return TriggerSchema(
            kind=kind,
            requires_name=data.get("requiresName", False),
            can_have_attributes=can_have_attributes,
            can_contain_components=data.get("canContainComponents", True),
            can_override_variables=data.get("canOverrideVariables", True),
            attributes=attributes,
            description=data.get("description", ""),
        )

    def _resolve_attributes(
        self, owner: str, data: dict | None
    ) -> dict[str, AttributeSchema]:
        if not data:
            return {}
        return {
            name: self._resolve_attribute(owner, name, spec or {})
            for name, spec in data.items()
        }

    def _resolve_attribute(self, owner: str, name: str, data: dict) -> AttributeSchema:
        """Convert an attribute dict to an AttributeSchema."""
        try:
            attr_type = AttributeType(data.get("type"))
        except ValueError:
            raise CatalogError(
                f"Attribute '{owner}.{name}' has unknown type '{data.get('type')}'"
            )

        values = list(data.get("values", []))
        if data.get("valuesFrom") == "chords":
            values = ["none", *self.chords.keys()]

        if attr_type == AttributeType.ENUM and not values:
            raise CatalogError(f"Enum attribute '{owner}.{name}' has no values")

        try:
            can_reference = [AttributeType(r) for r in data.get("canReference", [])]
        except ValueError as exc:
            raise CatalogError(f"Attribute '{owner}.{name}': {exc}") from exc

        return AttributeSchema(
            name=name,
            type=attr_type,
            default=data.get("default"),
            min=data.get("min"),
            max=data.get("max"),
            step=data.get("step"),
            unit=data.get("unit"),
            description=data.get("description", ""),
            values=values,
            allow_custom=data.get("allowCustom", False),
            modulation_mode=data.get("modulationMode"),
            can_reference=can_reference,
            accepts_components=list(data.get("acceptsComponents", [])),
            accepts_modulation=list(data.get("acceptsModulation", [])),
        )

    def _validate_references(self, catalog: SchemaCatalog) -> None:
        """Every kind named in an allow-list must exist in the catalog."""
        owners: list[tuple[str, dict[str, AttributeSchema]]] = [
            (kind, schema.attributes) for kind, schema in catalog.components.items()
        ]
        owners.extend(
            (kind, schema.attributes) for kind, schema in catalog.triggers.items()
        )

        for owner, attributes in owners:
            for attr in attributes.values():
                for referenced in attr.accepts_components + attr.accepts_modulation:
                    if not catalog.is_component_kind(referenced):
                        raise CatalogError(
                            f"Attribute '{owner}.{attr.name}' references unknown "
                            f"component kind '{referenced}'"
                        )
                if attr.is_reference and not attr.accepts_components:
                    raise CatalogError(
                        f"Component reference '{owner}.{attr.name}' has no acceptsComponents"
                    )


def load_catalog(path: Path | None = None, chords_path: Path | None = None) -> SchemaCatalog:
    """Load a catalog, defaulting to the one shipped with the package."""
    loader = CatalogLoader(path or DEFAULT_CATALOG_PATH, chords_path)
    return loader.load()


def load_default_catalog() -> SchemaCatalog:
    return load_catalog()


def describe_catalog(catalog: SchemaCatalog) -> dict[str, Any]:
    """Summarize kinds and their attribute names (for listings)."""
    return {
        "components": {
            kind: {"role": schema.role.value, "attributes": list(schema.attributes)}
            for kind, schema in catalog.components.items()
        },
        "triggers": {
            kind: {
                "requiresName": schema.requires_name,
                "attributes": list(schema.attributes),
            }
            for kind, schema in catalog.triggers.items()
        },
    }
