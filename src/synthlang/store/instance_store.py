"""Scoped instance store.

Holds the components, variables, trigger records and the global name
registry built from a document. The parser and any external editor mutate
the store through the same operations, so text edits and control-surface
edits share one code path.

Names are unique across every component and variable in every scope; a
bare word in a document therefore names at most one entity.
"""

import logging
from typing import Any

from synthlang.core.values import (
    AttributeValue,
    ComponentRef,
    Expression,
    Literal,
    ValueKind,
    VariableRef,
    as_value,
    normalize_attribute,
)
from synthlang.expressions import EvaluationError, evaluate
from synthlang.store.actions import Action, collect_actions
from synthlang.store.types import (
    VARIABLE_KIND,
    ComponentInstance,
    NameInfo,
    ScopeKind,
    TriggerRecord,
    VariableDefinition,
    trigger_kind_for_key,
)

logger = logging.getLogger(__name__)

ComponentTables = dict[str, dict[str, ComponentInstance]]


class InstanceStore:
    """The instance graph for one document.

    A store is owned by whoever parses the document; it is not safe for
    concurrent writers. Readers should treat it as a snapshot between parses.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Drop every component, variable, trigger and registered name."""
        self.global_components: ComponentTables = {}
        self.triggers: dict[str, TriggerRecord] = {}
        self.global_variables: dict[str, VariableDefinition] = {}
        self.trigger_variables: dict[str, dict[str, VariableDefinition]] = {}
        self.name_registry: dict[str, NameInfo] = {}
        self._resolving: set[tuple[str, str | None]] = set()

    # ------------------------------------------------------------------
    # Name registry
    # ------------------------------------------------------------------

    def _register_name(
        self, name: str, scope: ScopeKind, kind: str, scope_key: str | None
    ) -> bool:
        if name in self.name_registry:
            logger.warning("Name '%s' is already registered", name)
            return False
        self.name_registry[name] = NameInfo(scope, kind, scope_key)
        return True

    def _unregister_name(self, name: str) -> None:
        self.name_registry.pop(name, None)

    def is_name_registered(self, name: str) -> bool:
        return name in self.name_registry

    def get_name_info(self, name: str) -> NameInfo | None:
        return self.name_registry.get(name)

    # ------------------------------------------------------------------
    # Trigger records
    # ------------------------------------------------------------------

    def _ensure_trigger(self, scope_key: str, kind: str | None = None) -> TriggerRecord:
        record = self.triggers.get(scope_key)
        if record is None:
            record = TriggerRecord(key=scope_key, kind=kind or trigger_kind_for_key(scope_key))
            self.triggers[scope_key] = record
        return record

    def declare_trigger(self, scope_key: str, kind: str) -> TriggerRecord:
        """Make sure a trigger record exists, e.g. for a header with no body yet."""
        return self._ensure_trigger(scope_key, kind)

    def get_trigger(self, scope_key: str) -> TriggerRecord | None:
        return self.triggers.get(scope_key)

    def get_triggers_by_type(self, trigger_kind: str) -> list[str]:
        """Scope keys of every trigger of the given kind, in declaration order."""
        return [key for key, record in self.triggers.items() if record.kind == trigger_kind]

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def add_component(
        self,
        kind: str,
        name: str,
        scope: ScopeKind | str = ScopeKind.GLOBAL,
        scope_key: str | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> bool:
        """Create a component. Returns False if the name is already taken."""
        scope = ScopeKind(scope)
        if scope == ScopeKind.TRIGGER and not scope_key:
            raise ValueError("Trigger-scoped components require a scope key")

        if not self._register_name(name, scope, kind, scope_key):
            return False

        component = ComponentInstance(
            kind=kind,
            name=name,
            scope=scope,
            scope_key=scope_key if scope == ScopeKind.TRIGGER else None,
            attributes={
                attr: normalize_attribute(value)
                for attr, value in (attributes or {}).items()
            },
        )

        if scope == ScopeKind.GLOBAL:
            self.global_components.setdefault(kind, {})[name] = component
        else:
            record = self._ensure_trigger(scope_key)  # type: ignore[arg-type]
            record.components.setdefault(kind, {})[name] = component

        return True

    def get_component(self, name: str) -> ComponentInstance | None:
        info = self.name_registry.get(name)
        if info is None or info.is_variable:
            return None

        if info.scope == ScopeKind.GLOBAL:
            return self.global_components.get(info.kind, {}).get(name)

        record = self.triggers.get(info.scope_key or "")
        if record is None:
            return None
        return record.components.get(info.kind, {}).get(name)

    def get_components_by_type(
        self,
        kind: str,
        scope: ScopeKind | str = ScopeKind.GLOBAL,
        scope_key: str | None = None,
    ) -> dict[str, ComponentInstance]:
        if ScopeKind(scope) == ScopeKind.GLOBAL:
            return self.global_components.get(kind, {})

        record = self.triggers.get(scope_key or "")
        if record is None:
            return {}
        return record.components.get(kind, {})

    def get_all_components_in_scope(
        self,
        scope: ScopeKind | str = ScopeKind.GLOBAL,
        scope_key: str | None = None,
    ) -> ComponentTables:
        """Components visible in a scope.

        The global scope returns the live global tables. A trigger scope
        returns a copy of the global tables with the trigger's own tables
        laid over them.
        """
        if ScopeKind(scope) == ScopeKind.GLOBAL:
            return self.global_components

        result: ComponentTables = {
            kind: dict(table) for kind, table in self.global_components.items()
        }
        record = self.triggers.get(scope_key or "")
        if record is not None:
            self._overlay(result, record.components, scope_key)
        return result

    def _overlay(
        self, base: ComponentTables, layer: ComponentTables, layer_key: str | None
    ) -> None:
        for kind, table in layer.items():
            target = base.setdefault(kind, {})
            for name, component in table.items():
                if name in target and target[name] is not component:
                    # Unique names make this unreachable unless the registry is broken.
                    logger.warning(
                        "Component '%s' from scope '%s' shadows another component "
                        "with the same name",
                        name,
                        layer_key,
                    )
                target[name] = component

    def merge_scope_layers(self, note_key: str, key_key: str | None = None) -> ComponentTables:
        """Components for a sounding voice: global, then note, then key scope."""
        result = self.get_all_components_in_scope(ScopeKind.TRIGGER, note_key)
        if key_key:
            record = self.triggers.get(key_key)
            if record is not None:
                self._overlay(result, record.components, key_key)
        return result

    def update_component_attribute(self, name: str, attribute: str, value: Any) -> bool:
        """Replace an attribute's value, keeping any attached modulation."""
        component = self.get_component(name)
        if component is None:
            return False

        current = normalize_attribute(component.attributes.get(attribute))
        component.attributes[attribute] = current.with_value(as_value(value))
        return True

    def update_component_attribute_modulation(
        self, name: str, attribute: str, modulation: ComponentRef | None
    ) -> bool:
        """Replace an attribute's modulation, keeping its value."""
        component = self.get_component(name)
        if component is None:
            return False

        current = normalize_attribute(component.attributes.get(attribute))
        component.attributes[attribute] = current.with_modulation(modulation)
        return True

    def get_component_attribute(self, name: str, attribute: str) -> AttributeValue | None:
        component = self.get_component(name)
        if component is None:
            return None
        return component.get_attribute(attribute)

    def remove_component(self, name: str) -> bool:
        info = self.name_registry.get(name)
        if info is None or info.is_variable:
            return False

        if info.scope == ScopeKind.GLOBAL:
            self.global_components.get(info.kind, {}).pop(name, None)
        else:
            record = self.triggers.get(info.scope_key or "")
            if record is not None:
                record.components.get(info.kind, {}).pop(name, None)

        self._unregister_name(name)
        return True

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def add_variable(
        self,
        name: str,
        value: Any,
        scope: ScopeKind | str = ScopeKind.GLOBAL,
        scope_key: str | None = None,
        min: float | None = None,
        max: float | None = None,
        line: int | None = None,
    ) -> bool:
        """Declare a variable.

        Redeclaring a variable in the scope it already lives in updates it in
        place; any other clash with a registered name fails.
        """
        scope = ScopeKind(scope)
        if scope == ScopeKind.TRIGGER and not scope_key:
            raise ValueError("Trigger-scoped variables require a scope key")

        existing = self.name_registry.get(name)
        is_update = (
            existing is not None
            and existing.is_variable
            and existing.scope == scope
            and existing.scope_key == (scope_key if scope == ScopeKind.TRIGGER else None)
        )

        if not is_update and not self._register_name(
            name, scope, VARIABLE_KIND, scope_key if scope == ScopeKind.TRIGGER else None
        ):
            return False

        definition = VariableDefinition(
            name=name,
            value=as_value(value),  # type: ignore[arg-type]
            scope=scope,
            scope_key=scope_key if scope == ScopeKind.TRIGGER else None,
            min=min,
            max=max,
            line=line,
        )

        if scope == ScopeKind.GLOBAL:
            self.global_variables[name] = definition
        else:
            self.trigger_variables.setdefault(scope_key, {})[name] = definition  # type: ignore[index]

        return True

    def set_variable_override(self, name: str, value: Any, scope_key: str) -> None:
        """Override a variable's effective value inside a trigger scope.

        Overrides do not declare anything and never touch the name registry.
        """
        record = self._ensure_trigger(scope_key)
        record.variable_overrides[name] = as_value(value)  # type: ignore[assignment]

    def remove_variable_override(self, name: str, scope_key: str) -> bool:
        record = self.triggers.get(scope_key)
        if record is None or name not in record.variable_overrides:
            return False
        del record.variable_overrides[name]
        return True

    def _find_variable_value(self, name: str, scope_key: str | None) -> ValueKind | None:
        if scope_key:
            record = self.triggers.get(scope_key)
            if record is not None and name in record.variable_overrides:
                return record.variable_overrides[name]

            local = self.trigger_variables.get(scope_key, {})
            if name in local:
                return local[name].value

        if name in self.global_variables:
            return self.global_variables[name].value

        return None

    def resolve_variable(self, name: str, scope_key: str | None = None) -> Any:
        """Effective value of a variable seen from ``scope_key``.

        Lookup order: override on the trigger, variable declared in the
        trigger, global variable. A missing ``scope_key`` looks only at the
        global scope. Returns None when nothing matches.
        """
        value = self._find_variable_value(name, scope_key)
        if value is None:
            return None
        if isinstance(value, Literal):
            return value.value
        if not isinstance(value, (Expression, VariableRef)):
            return None

        guard = (name, scope_key)
        if guard in self._resolving:
            logger.warning("Variable '%s' refers to itself", name)
            return None

        self._resolving.add(guard)
        try:
            if isinstance(value, VariableRef):
                return self.resolve_variable(value.name, scope_key)
            return evaluate(
                value.source,
                lambda other: self.resolve_variable(other, scope_key),
            )
        except EvaluationError as exc:
            logger.debug("Variable '%s' did not evaluate: %s", name, exc)
            return None
        finally:
            self._resolving.discard(guard)

    def get_variable(self, name: str) -> Any:
        """A variable's own declared value, ignoring overrides."""
        definition = self.get_variable_metadata(name)
        if definition is None:
            return None
        if isinstance(definition.value, Literal):
            return definition.value.value
        return self.resolve_variable(name, definition.scope_key)

    def get_variable_metadata(self, name: str) -> VariableDefinition | None:
        info = self.name_registry.get(name)
        if info is None or not info.is_variable:
            return None
        if info.scope == ScopeKind.GLOBAL:
            return self.global_variables.get(name)
        return self.trigger_variables.get(info.scope_key or "", {}).get(name)

    def remove_variable(self, name: str) -> bool:
        info = self.name_registry.get(name)
        if info is None or not info.is_variable:
            return False

        if info.scope == ScopeKind.GLOBAL:
            self.global_variables.pop(name, None)
        else:
            self.trigger_variables.get(info.scope_key or "", {}).pop(name, None)

        self._unregister_name(name)
        return True

    # ------------------------------------------------------------------
    # Trigger attributes
    # ------------------------------------------------------------------

    def set_trigger_attribute(self, scope_key: str, attribute: str, value: Any) -> None:
        record = self._ensure_trigger(scope_key)
        current = normalize_attribute(record.attributes.get(attribute))
        record.attributes[attribute] = current.with_value(as_value(value))

    def set_trigger_attribute_modulation(
        self, scope_key: str, attribute: str, modulation: ComponentRef | None
    ) -> None:
        record = self._ensure_trigger(scope_key)
        current = normalize_attribute(record.attributes.get(attribute))
        record.attributes[attribute] = current.with_modulation(modulation)

    def get_trigger_attribute(self, scope_key: str, attribute: str) -> AttributeValue | None:
        record = self.triggers.get(scope_key)
        if record is None or attribute not in record.attributes:
            return None
        return normalize_attribute(record.attributes[attribute])

    def get_trigger_attributes(self, scope_key: str) -> dict[str, AttributeValue]:
        record = self.triggers.get(scope_key)
        if record is None:
            return {}
        return {name: normalize_attribute(value) for name, value in record.attributes.items()}

    # ------------------------------------------------------------------
    # Values and actions
    # ------------------------------------------------------------------

    def resolve_value(
        self,
        value: Any,
        scope_key: str | None = None,
        default: Any = None,
    ) -> Any:
        """Turn an attribute value into the number/string a consumer can use.

        Variable references go through the scope chain and expressions are
        evaluated against it. Anything that cannot be resolved yields
        ``default``. Component references are returned unchanged.
        """
        attr = normalize_attribute(value)
        current = attr.value

        if current is None:
            return default
        if isinstance(current, Literal):
            return current.value
        if isinstance(current, ComponentRef):
            return current
        if isinstance(current, VariableRef):
            resolved = self.resolve_variable(current.name, scope_key)
            return default if resolved is None else resolved
        if isinstance(current, Expression):
            try:
                return evaluate(
                    current.source,
                    lambda name: self.resolve_variable(name, scope_key),
                )
            except EvaluationError as exc:
                logger.debug("Expression '%s' failed: %s", current.source, exc)
                return default

        return default

    def collect_actions(self, scope_key: str) -> list[Action]:
        """Ordered actions for the attributes a trigger scope defines."""
        return collect_actions(self, scope_key)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Plain-data snapshot of the whole store."""
        return {
            "components": {
                kind: {name: comp.to_dict() for name, comp in table.items()}
                for kind, table in self.global_components.items()
            },
            "triggers": {key: record.to_dict() for key, record in self.triggers.items()},
            "variables": {
                "global": {
                    name: definition.to_dict()
                    for name, definition in self.global_variables.items()
                },
                "triggers": {
                    key: {name: definition.to_dict() for name, definition in table.items()}
                    for key, table in self.trigger_variables.items()
                },
            },
            "names": {name: info.to_dict() for name, info in self.name_registry.items()},
        }
