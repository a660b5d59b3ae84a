"""Entity types held by the instance store."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from synthlang.core.values import AttributeValue, ValueKind, normalize_attribute

VARIABLE_KIND = "variable"
MASTER_KEY = "master"


class ScopeKind(str, Enum):
    """Where an entity lives: the global scope or a trigger scope."""

    GLOBAL = "global"
    TRIGGER = "trigger"


def make_scope_key(trigger_kind: str, name: str | None = None) -> str:
    """Build the composite key of a trigger scope (``master``, ``note_c4``, ``key_a``)."""
    if not name:
        return trigger_kind
    return f"{trigger_kind}_{name}"


def trigger_kind_for_key(scope_key: str) -> str:
    """Infer the trigger kind from a scope key."""
    if scope_key == MASTER_KEY:
        return MASTER_KEY
    kind, sep, _ = scope_key.partition("_")
    return kind if sep else scope_key


@dataclass(frozen=True)
class NameInfo:
    """Name registry entry."""

    scope: ScopeKind
    kind: str  # component kind, or "variable"
    scope_key: str | None = None

    @property
    def is_variable(self) -> bool:
        return self.kind == VARIABLE_KIND

    def to_dict(self) -> dict[str, Any]:
        return {"scope": self.scope.value, "kind": self.kind, "scopeKey": self.scope_key}


@dataclass
class ComponentInstance:
    """A named component and its attributes."""

    kind: str
    name: str
    scope: ScopeKind
    scope_key: str | None = None
    attributes: dict[str, AttributeValue] = field(default_factory=dict)

    def get_attribute(self, name: str) -> AttributeValue | None:
        if name not in self.attributes:
            return None
        return normalize_attribute(self.attributes[name])

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "scope": self.scope.value,
            "scopeKey": self.scope_key,
            "attributes": {
                name: normalize_attribute(value).to_dict()
                for name, value in self.attributes.items()
            },
        }


@dataclass
class VariableDefinition:
    """A declared variable.

    Attributes:
        value: Literal or Expression as written in the document
        min / max: Optional range declared with ``[min, max]``
        line: Document line of the declaration, used for grouping in editors
    """

    name: str
    value: ValueKind
    scope: ScopeKind
    scope_key: str | None = None
    min: float | None = None
    max: float | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value.to_dict(),
            "min": self.min,
            "max": self.max,
            "line": self.line,
        }


@dataclass
class TriggerRecord:
    """A trigger scope: owned components, attributes and variable overrides."""

    key: str
    kind: str
    components: dict[str, dict[str, ComponentInstance]] = field(default_factory=dict)
    attributes: dict[str, AttributeValue] = field(default_factory=dict)
    variable_overrides: dict[str, ValueKind] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "kind": self.kind,
            "components": {
                kind: {name: comp.to_dict() for name, comp in table.items()}
                for kind, table in self.components.items()
            },
            "attributes": {
                name: normalize_attribute(value).to_dict()
                for name, value in self.attributes.items()
            },
            "variableOverrides": {
                name: value.to_dict() for name, value in self.variable_overrides.items()
            },
        }
