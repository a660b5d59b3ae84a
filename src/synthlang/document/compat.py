"""Support for the older attribute-names-a-modulator syntax.

Documents written before nested ``modulation`` lines existed attach a
modulator by naming it as the attribute value::

    oscillator lead
      pitch vibrato

which now reads as::

    oscillator lead
      pitch 0
        modulation vibrato

Everything that knows about the old form lives here so it can be dropped in
one place.
"""

from synthlang.catalog import AttributeSchema
from synthlang.core.values import AttributeValue, ComponentRef, parse_literal


def legacy_syntax_message(attribute: str, component: str, default: object) -> str:
    return (
        f'Deprecated syntax: "{attribute} {component}". '
        f'Use "{attribute} {default}" with a nested "modulation {component}" line instead'
    )


def strict_syntax_message(attribute: str, component: str) -> str:
    return (
        f'Attribute "{attribute}" takes a value; attach "{component}" '
        f'with a nested "modulation {component}" line'
    )


def rewrite_legacy_modulation(
    current: AttributeValue,
    attribute: str,
    attr_schema: AttributeSchema,
    modulator: ComponentRef,
) -> tuple[AttributeValue, str] | None:
    """Rewrite ``<attribute> <modulator>`` as default value plus modulation.

    Returns the rewritten attribute and a deprecation message, or None when
    the attribute already carries a modulation from a nested line.
    """
    if current.modulation is not None:
        return None

    default = attr_schema.default
    value = parse_literal(str(default)) if default is not None else None
    rewritten = AttributeValue(value=value, modulation=modulator)
    return rewritten, legacy_syntax_message(attribute, modulator.name, default)
