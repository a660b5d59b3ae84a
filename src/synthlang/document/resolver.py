"""Reference resolution (Pass 2).

Pass 1 builds the instance graph line by line, so a bare word can name a
component or variable that is declared further down the document. Pass 1
leaves such words as :class:`Unresolved` and attaches nested modulation
lines as ``ComponentRef(name, kind=None)``. Once every name is registered
this pass binds them or records an error, leaving the raw word in place.
"""

import logging

from synthlang.catalog import AttributeSchema, SchemaCatalog
from synthlang.core.values import (
    AttributeValue,
    ComponentRef,
    Literal,
    Unresolved,
    VariableRef,
    normalize_attribute,
)
from synthlang.document.compat import rewrite_legacy_modulation, strict_syntax_message
from synthlang.document.context import ParseContext
from synthlang.document.types import AttributeOwner, OwnerType
from synthlang.store import ComponentInstance, InstanceStore, TriggerRecord

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Binds names in attribute values and modulation lines."""

    def __init__(
        self,
        catalog: SchemaCatalog,
        store: InstanceStore,
        context: ParseContext,
        *,
        strict: bool = False,
    ):
        self.catalog = catalog
        self.store = store
        self.context = context
        self.strict = strict

    # ------------------------------------------------------------------
    # Pass 2
    # ------------------------------------------------------------------

    def resolve(self) -> None:
        """Resolve every component (global and trigger-owned) and trigger attribute."""
        for table in self.store.global_components.values():
            for component in list(table.values()):
                self._resolve_component(component)

        for record in self.store.triggers.values():
            for table in record.components.values():
                for component in list(table.values()):
                    self._resolve_component(component)
            self._resolve_trigger(record)

    def _resolve_component(self, component: ComponentInstance) -> None:
        owner = AttributeOwner(OwnerType.COMPONENT, component.name, component.kind)
        for attribute in list(component.attributes):
            attr_schema = self.catalog.get_attribute_schema(component.kind, attribute)
            self._resolve_attribute(owner, attribute, attr_schema)

    def _resolve_trigger(self, record: TriggerRecord) -> None:
        owner = AttributeOwner(OwnerType.TRIGGER, record.key, record.kind)
        for attribute in list(record.attributes):
            attr_schema = self.catalog.get_trigger_attribute_schema(record.kind, attribute)
            self._resolve_attribute(owner, attribute, attr_schema)

    def _resolve_attribute(
        self, owner: AttributeOwner, attribute: str, attr_schema: AttributeSchema | None
    ) -> None:
        current = self.read(owner, attribute)
        updated = current

        if isinstance(current.value, Unresolved):
            line = self.context.attribute_lines.get((owner, attribute))
            if attr_schema is None:
                updated = current.with_value(Literal(current.value.text))
            else:
                updated = self.bind_name(owner, attribute, attr_schema, current, current.value.text, line)

        if updated.modulation is not None and not updated.modulation.resolved:
            line = self.context.modulation_lines.get((owner, attribute))
            updated = updated.with_modulation(
                self._resolve_modulator(attribute, attr_schema, updated.modulation, line)
            )

        if updated != current:
            self.write(owner, attribute, updated)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def bind_name(
        self,
        owner: AttributeOwner,
        attribute: str,
        attr_schema: AttributeSchema,
        current: AttributeValue,
        text: str,
        line: int | None,
    ) -> AttributeValue:
        """Bind a bare word naming a registered entity, or record why it can't be.

        On failure the word is kept as a literal string.
        """
        raw = current.with_value(Literal(text))
        info = self.store.get_name_info(text)

        if info is None:
            self.context.add_error(
                f'Unknown name "{text}" for attribute "{attribute}" of {owner.describe()}',
                line,
            )
            return raw

        if info.is_variable:
            if attr_schema.can_reference_variables:
                return current.with_value(VariableRef(text))
            self.context.add_warning(f'Attribute "{attribute}" cannot reference variables', line)
            return raw

        if not attr_schema.resolves_components:
            self.context.add_error(
                f'Attribute "{attribute}" cannot reference component "{text}"', line
            )
            return raw

        if not attr_schema.accepts(info.kind):
            if attr_schema.is_reference:
                message = f'Attribute "{attribute}" cannot accept component type "{info.kind}"'
            else:
                message = f'Attribute "{attribute}" cannot accept modulation from "{info.kind}"'
            self.context.add_error(f"{message} (allowed: {', '.join(attr_schema.allow_list())})", line)
            return raw

        ref = ComponentRef(text, info.kind)
        if attr_schema.is_reference:
            return current.with_value(ref)

        # A modulator named as the value of a modulation-accepting attribute.
        if self.strict:
            self.context.add_error(strict_syntax_message(attribute, text), line)
            return raw

        rewritten = rewrite_legacy_modulation(current, attribute, attr_schema, ref)
        if rewritten is None:
            self.context.add_error(
                f'Attribute "{attribute}" already has a modulation; remove "{text}" from its value',
                line,
            )
            return raw

        updated, message = rewritten
        self.context.add_warning(message, line)
        return updated

    def _resolve_modulator(
        self,
        attribute: str,
        attr_schema: AttributeSchema | None,
        modulation: ComponentRef,
        line: int | None,
    ) -> ComponentRef:
        info = self.store.get_name_info(modulation.name)
        if info is None or info.is_variable:
            self.context.add_error(
                f'Modulator "{modulation.name}" not found or is not a component', line
            )
            return modulation

        if info.kind not in self.catalog.modulator_kinds():
            self.context.add_error(
                f'Component "{modulation.name}" is a {info.kind}, which cannot be used as a '
                f"modulator (modulators: {', '.join(self.catalog.modulator_kinds())})",
                line,
            )
            return modulation

        if attr_schema is not None:
            if not attr_schema.receives_modulation:
                self.context.add_error(f'Attribute "{attribute}" does not accept modulation', line)
                return modulation
            if info.kind not in attr_schema.accepts_modulation:
                self.context.add_error(
                    f'Attribute "{attribute}" cannot accept modulation from "{info.kind}" '
                    f"(allowed: {', '.join(attr_schema.accepts_modulation)})",
                    line,
                )
                return modulation

        logger.debug("Bound modulator '%s' (%s) to '%s'", modulation.name, info.kind, attribute)
        return ComponentRef(modulation.name, info.kind)

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    def read(self, owner: AttributeOwner, attribute: str) -> AttributeValue:
        if owner.type == OwnerType.COMPONENT:
            value = self.store.get_component_attribute(owner.name, attribute)
        else:
            value = self.store.get_trigger_attribute(owner.name, attribute)
        return normalize_attribute(value)

    def write(self, owner: AttributeOwner, attribute: str, value: AttributeValue) -> None:
        if owner.type == OwnerType.COMPONENT:
            self.store.update_component_attribute(owner.name, attribute, value.value)
            self.store.update_component_attribute_modulation(owner.name, attribute, value.modulation)
        else:
            self.store.set_trigger_attribute(owner.name, attribute, value.value)
            self.store.set_trigger_attribute_modulation(owner.name, attribute, value.modulation)
