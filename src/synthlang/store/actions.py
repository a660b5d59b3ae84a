"""Action collection.

Turns the attributes a trigger scope defines into a flat, ordered list of
actions. A rendering backend folds ``SetValue`` actions into parameter
offsets and ``ApplyModulation`` actions into live modulation sources without
looking at scopes, schemas or the name registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from synthlang.core.values import ComponentRef, ValueKind, normalize_attribute

if TYPE_CHECKING:
    from synthlang.store.instance_store import InstanceStore


class ActionType(str, Enum):
    SET_VALUE = "set_value"
    APPLY_MODULATION = "apply_modulation"


@dataclass(frozen=True)
class SetValue:
    """Set a parameter offset. ``value`` is left unevaluated for the consumer."""

    kind: str
    value: ValueKind
    unit: str

    @property
    def type(self) -> ActionType:
        return ActionType.SET_VALUE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "kind": self.kind,
            "value": self.value.to_dict(),
            "unit": self.unit,
        }


@dataclass(frozen=True)
class ApplyModulation:
    """Attach a modulating component to a parameter."""

    target: str
    modulator: ComponentRef

    @property
    def type(self) -> ActionType:
        return ActionType.APPLY_MODULATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "target": self.target,
            "modulator": self.modulator.to_dict(),
        }


Action = Union[SetValue, ApplyModulation]

# Attributes the action vocabulary understands, with the unit of their value.
# pitch is an additive cents offset, volume a percentage multiplier.
ACTION_VOCABULARY: dict[str, str] = {
    "pitch": "cents",
    "volume": "percentage",
}


def collect_actions(store: InstanceStore, scope_key: str) -> list[Action]:
    """Collect actions for a trigger scope, in attribute definition order.

    For each attribute in the vocabulary: ``SetValue`` first when a value is
    present, then ``ApplyModulation`` when a resolved modulation is attached. A
    modulation that reference resolution rejected keeps ``kind=None`` and
    is skipped.
    """
    record = store.get_trigger(scope_key)
    if record is None:
        return []

    actions: list[Action] = []
    for name, raw in record.attributes.items():
        unit = ACTION_VOCABULARY.get(name)
        if unit is None:
            continue

        attr = normalize_attribute(raw)
        if attr.value is not None:
            actions.append(SetValue(name, attr.value, unit))
        if attr.modulation is not None and attr.modulation.resolved:
            actions.append(ApplyModulation(name, attr.modulation))

    return actions
