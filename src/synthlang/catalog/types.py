"""Schema catalog types.

The catalog declares which component, trigger and attribute kinds exist and
how their values are validated. It is pure data: the parser, the instance
store and the action collector read it but never special-case a kind.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AttributeType(str, Enum):
    """Value shapes an attribute can hold."""

    NUMBER = "number"
    INTEGER = "integer"
    PERCENTAGE = "percentage"  # 0-100, rendered as a gain of 0-1
    TIME_MS = "time_ms"
    TIME_SEC = "time_sec"
    FREQUENCY = "frequency"
    ENUM = "enum"
    VARIABLE_REF = "variable_ref"
    COMPONENT_REF = "component_ref"


NUMERIC_TYPES = frozenset(
    {
        AttributeType.NUMBER,
        AttributeType.INTEGER,
        AttributeType.PERCENTAGE,
        AttributeType.TIME_MS,
        AttributeType.TIME_SEC,
        AttributeType.FREQUENCY,
    }
)


class ComponentRole(str, Enum):
    """How a component participates in the rendered signal graph."""

    SOURCE = "source"
    MODULATOR = "modulator"
    PROCESSOR = "processor"


class CatalogError(Exception):
    """The catalog is missing, malformed or internally inconsistent."""
    pass


@dataclass
class AttributeSchema:
    """Declaration of a single component or trigger attribute."""

    name: str
    type: AttributeType
    default: Any = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    unit: str | None = None
    description: str = ""
    values: list[str] = field(default_factory=list)
    allow_custom: bool = False
    modulation_mode: str | None = None
    can_reference: list[AttributeType] = field(default_factory=list)
    accepts_components: list[str] = field(default_factory=list)
    accepts_modulation: list[str] = field(default_factory=list)

    @property
    def is_reference(self) -> bool:
        """True when the attribute's value itself is a component reference."""
        return self.type == AttributeType.COMPONENT_REF

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES

    @property
    def receives_modulation(self) -> bool:
        return bool(self.accepts_modulation)

    @property
    def resolves_components(self) -> bool:
        """True when a bare word in this attribute may name a component."""
        return self.is_reference or self.receives_modulation

    @property
    def can_reference_variables(self) -> bool:
        return AttributeType.VARIABLE_REF in self.can_reference

    def accepts(self, component_kind: str) -> bool:
        """Check the allow-list that applies to this attribute.

        Reference-typed attributes use ``accepts_components``; attributes that
        merely receive modulation use ``accepts_modulation``.
        """
        if self.is_reference:
            return component_kind in self.accepts_components
        if self.accepts_modulation:
            return component_kind in self.accepts_modulation
        return False

    def allow_list(self) -> list[str]:
        if self.is_reference:
            return list(self.accepts_components)
        return list(self.accepts_modulation)


@dataclass
class ComponentSchema:
    kind: str
    role: ComponentRole
    attributes: dict[str, AttributeSchema] = field(default_factory=dict)
    description: str = ""


@dataclass
class TriggerSchema:
    kind: str
    requires_name: bool = False
    can_have_attributes: bool = False
    can_contain_components: bool = True
    can_override_variables: bool = True
    attributes: dict[str, AttributeSchema] = field(default_factory=dict)
    description: str = ""


@dataclass
class SchemaCatalog:
    """The loaded catalog of component and trigger kinds.

    Attributes:
        components: Component schemas keyed by kind
        triggers: Trigger schemas keyed by kind
        chords: Chord intervals (semitones above the root) keyed by chord name
    """

    components: dict[str, ComponentSchema] = field(default_factory=dict)
    triggers: dict[str, TriggerSchema] = field(default_factory=dict)
    chords: dict[str, list[int]] = field(default_factory=dict)

    def get_component_schema(self, kind: str) -> ComponentSchema | None:
        return self.components.get(kind)

    def get_trigger_schema(self, kind: str) -> TriggerSchema | None:
        return self.triggers.get(kind)

    def get_attribute_schema(self, kind: str, attribute: str) -> AttributeSchema | None:
        schema = self.components.get(kind)
        if schema is None:
            return None
        return schema.attributes.get(attribute)

    def get_trigger_attribute_schema(
        self, kind: str, attribute: str
    ) -> AttributeSchema | None:
        schema = self.triggers.get(kind)
        if schema is None:
            return None
        return schema.attributes.get(attribute)

    def is_component_kind(self, kind: str) -> bool:
        return kind in self.components

    def is_trigger_kind(self, kind: str) -> bool:
        return kind in self.triggers

    def component_kinds(self) -> list[str]:
        return list(self.components.keys())

    def trigger_kinds(self) -> list[str]:
        return list(self.triggers.keys())

    def modulator_kinds(self) -> list[str]:
        """Component kinds whose output can drive another parameter."""
        return [
            kind
            for kind, schema in self.components.items()
            if schema.role == ComponentRole.MODULATOR
        ]

    def can_attribute_accept_component(
        self, kind: str, attribute: str, component_kind: str
    ) -> bool:
        attr_schema = self.get_attribute_schema(kind, attribute)
        if attr_schema is None:
            return False
        return attr_schema.accepts(component_kind)

    def can_attribute_reference_variable(self, kind: str, attribute: str) -> bool:
        attr_schema = self.get_attribute_schema(kind, attribute)
        if attr_schema is None:
            return False
        return attr_schema.can_reference_variables

    def chord_intervals(self, name: str) -> list[int]:
        """Intervals for a named chord, or an empty list for unknown/``none``."""
        return list(self.chords.get(name, []))
