"""Value types shared across the interpreter."""

from synthlang.core.values import (
    AttributeValue,
    ComponentRef,
    Expression,
    Literal,
    Unresolved,
    ValueKind,
    VariableRef,
    as_value,
    normalize_attribute,
    parse_literal,
    value_from_dict,
)

__all__ = [
    "AttributeValue",
    "ComponentRef",
    "Expression",
    "Literal",
    "Unresolved",
    "ValueKind",
    "VariableRef",
    "as_value",
    "normalize_attribute",
    "parse_literal",
    "value_from_dict",
]
