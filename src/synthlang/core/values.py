"""Attribute value types shared by the parser, store and action collector.

An attribute holds an :class:`AttributeValue`: a value variant plus an
optional modulation reference. Code that reads attributes goes through
:func:`normalize_attribute`, which also accepts the older single-value
forms (a bare variant or a plain number/string).
"""

import math
from dataclasses import dataclass, replace
from typing import Any, Union


@dataclass(frozen=True)
class Literal:
    """A literal number or string."""

    value: int | float | str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "literal", "value": self.value}


@dataclass(frozen=True)
class VariableRef:
    """A reference to a named variable, resolved through the scope chain."""

    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "variable_ref", "name": self.name}


@dataclass(frozen=True)
class ComponentRef:
    """A reference to a named component.

    ``kind`` is None until reference resolution has confirmed the target.
    """

    name: str
    kind: str | None = None

    @property
    def resolved(self) -> bool:
        return self.kind is not None

    def to_dict(self) -> dict[str, Any]:
        return {"type": "component_ref", "name": self.name, "kind": self.kind}


@dataclass(frozen=True)
class Expression:
    """Arithmetic source text, evaluated on demand."""

    source: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "expression", "source": self.source}


@dataclass(frozen=True)
class Unresolved:
    """A bare word that may name a component or variable declared later."""

    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "unresolved", "text": self.text}


ValueKind = Union[Literal, VariableRef, ComponentRef, Expression, Unresolved]

_VALUE_KINDS = (Literal, VariableRef, ComponentRef, Expression, Unresolved)


@dataclass(frozen=True)
class AttributeValue:
    """An attribute's value with its optional attached modulation."""

    value: ValueKind | None = None
    modulation: ComponentRef | None = None

    def with_value(self, value: ValueKind | None) -> "AttributeValue":
        return replace(self, value=value)

    def with_modulation(self, modulation: ComponentRef | None) -> "AttributeValue":
        return replace(self, modulation=modulation)

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value.to_dict() if self.value is not None else None,
            "modulation": self.modulation.to_dict() if self.modulation is not None else None,
        }


def value_from_dict(data: dict[str, Any] | None) -> ValueKind | None:
    """Rebuild a value variant from its ``to_dict()`` form."""
    if data is None:
        return None

    kind = data.get("type")
    if kind == "literal":
        return Literal(data["value"])
    if kind == "variable_ref":
        return VariableRef(data["name"])
    if kind == "component_ref":
        return ComponentRef(data["name"], data.get("kind"))
    if kind == "expression":
        return Expression(data["source"])
    if kind == "unresolved":
        return Unresolved(data["text"])

    raise ValueError(f"Unknown attribute value type: {kind!r}")


def as_value(raw: Any) -> ValueKind | None:
    """Coerce a single value (variant, plain scalar or dict form) to a variant."""
    if raw is None or isinstance(raw, _VALUE_KINDS):
        return raw
    if isinstance(raw, dict):
        return value_from_dict(raw)
    if isinstance(raw, bool):
        raise TypeError(f"Boolean is not a valid attribute value: {raw!r}")
    if isinstance(raw, (int, float, str)):
        return Literal(raw)
    raise TypeError(f"Unsupported attribute value: {raw!r}")


def normalize_attribute(raw: Any) -> AttributeValue:
    """Return ``raw`` in ``{value, modulation}`` form.

    Old single-value forms become ``AttributeValue(value, modulation=None)``.
    """
    if isinstance(raw, AttributeValue):
        return raw
    if isinstance(raw, dict) and ("value" in raw or "modulation" in raw) and "type" not in raw:
        modulation = as_value(raw.get("modulation"))
        if modulation is not None and not isinstance(modulation, ComponentRef):
            raise TypeError(f"Modulation must be a component reference: {modulation!r}")
        return AttributeValue(value=as_value(raw.get("value")), modulation=modulation)
    return AttributeValue(value=as_value(raw))


def parse_literal(text: str) -> Literal:
    """Parse document text into a number when possible, else keep the string."""
    try:
        number = float(text)
    except ValueError:
        return Literal(text)

    if not math.isfinite(number):
        return Literal(text)
    if number.is_integer() and "." not in text and "e" not in text.lower():
        return Literal(int(number))
    return Literal(number)
