"""Scoped instance store and action collection."""

from synthlang.store.actions import (
    ACTION_VOCABULARY,
    Action,
    ActionType,
    ApplyModulation,
    SetValue,
    collect_actions,
)
from synthlang.store.instance_store import ComponentTables, InstanceStore
from synthlang.store.types import (
    MASTER_KEY,
    VARIABLE_KIND,
    ComponentInstance,
    NameInfo,
    ScopeKind,
    TriggerRecord,
    VariableDefinition,
    make_scope_key,
    trigger_kind_for_key,
)

__all__ = [
    # Actions
    "ACTION_VOCABULARY",
    "Action",
    "ActionType",
    "ApplyModulation",
    "SetValue",
    "collect_actions",
    # Store
    "ComponentTables",
    "InstanceStore",
    # Types
    "MASTER_KEY",
    "VARIABLE_KIND",
    "ComponentInstance",
    "NameInfo",
    "ScopeKind",
    "TriggerRecord",
    "VariableDefinition",
    "make_scope_key",
    "trigger_kind_for_key",
]
