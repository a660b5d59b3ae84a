"""Document parser.

Builds the instance graph from indented instrument text. Each line is
classified by its leading keyword and its indentation relative to the open
scopes:

    variable base = 440 [20, 2000]
    lfo vibrato
      rate 5
    oscillator lead
      pitch base / 100
        modulation vibrato
    note c4
      oscillator bright
        wave square

Parsing is two passes over a freshly reset store. Pass 1 (this module) walks
the lines; Pass 2 (:class:`~synthlang.document.resolver.ReferenceResolver`)
binds names that were used before they were declared.
"""

import logging
import re

from synthlang.catalog import (
    AttributeSchema,
    AttributeType,
    CatalogError,
    SchemaCatalog,
    load_default_catalog,
)
from synthlang.core.values import (
    AttributeValue,
    ComponentRef,
    Expression,
    Literal,
    Unresolved,
    ValueKind,
    VariableRef,
    parse_literal,
)
from synthlang.document.context import (
    AttributeCursor,
    ComponentCursor,
    ParseContext,
    TriggerCursor,
)
from synthlang.document.resolver import ReferenceResolver
from synthlang.document.types import AttributeOwner, OwnerType, ParseResult
from synthlang.expressions import is_expression
from synthlang.store import InstanceStore, ScopeKind, make_scope_key

logger = logging.getLogger(__name__)

VARIABLE_KEYWORD = "variable"
MODULATION_KEYWORD = "modulation"
VARIABLE_PATTERN = re.compile(r"^variable\s+(\w+)\s*=\s*(.+)$")
RANGE_PATTERN = re.compile(r"^(.+?)\s*\[([^\]]+)\]$")
NAME_PATTERN = re.compile(r"^[A-Za-z_]\w*$")
LEADING_NUMBER = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
TAB_WIDTH = 2


def measure_indent(line: str) -> int:
    """Leading whitespace width: a space counts 1, a tab counts 2."""
    indent = 0
    for char in line:
        if char == " ":
            indent += 1
        elif char == "\t":
            indent += TAB_WIDTH
        else:
            break
    return indent


def _first_word(content: str) -> str:
    return content.split(maxsplit=1)[0]


class DocumentParser:
    """Parses instrument documents into an :class:`InstanceStore`.

    Args:
        catalog: Loaded schema catalog
        store: Store to populate; a new one is created if omitted. It is
            reset at the start of every parse.
        strict: Reject the deprecated ``<attribute> <modulator>`` form instead
            of rewriting it
    """

    def __init__(
        self,
        catalog: SchemaCatalog,
        store: InstanceStore | None = None,
        *,
        strict: bool = False,
    ):
        if catalog is None or not catalog.components:
            raise CatalogError("Document parser requires a loaded catalog with component kinds")

        self.catalog = catalog
        self.store = store if store is not None else InstanceStore()
        self.strict = strict
        self.context = ParseContext()
        self.resolver = ReferenceResolver(catalog, self.store, self.context, strict=strict)

    def parse(self, text: str) -> ParseResult:
        """Rebuild the store from ``text`` and report what went wrong."""
        self.store.reset()
        self.context.reset()

        for number, line in enumerate(text.splitlines(), start=1):
            self.context.line_number = number
            self.parse_line(line)

        self.resolver.resolve()

        errors = sorted(self.context.errors, key=lambda issue: issue.line)
        warnings = sorted(self.context.warnings, key=lambda issue: issue.line)
        logger.debug(
            "Parsed %d lines: %d errors, %d warnings",
            self.context.line_number,
            len(errors),
            len(warnings),
        )
        return ParseResult(success=not errors, errors=errors, warnings=warnings)

    def parse_line(self, line: str) -> None:
        content = line.strip()
        if not content or content.startswith("#"):
            return

        ctx = self.context
        indent = measure_indent(line)

        if ctx.skip_indent is not None:
            if indent > ctx.skip_indent:
                return
            ctx.skip_indent = None

        if ctx.pop_scopes_to_indent(indent):
            ctx.clear_cursors()
            ctx.sync_trigger_cursor()
        if ctx.current_component is not None and indent <= ctx.current_component.indent:
            ctx.current_component = None
        if ctx.current_attribute is not None and indent <= ctx.current_attribute.indent:
            ctx.current_attribute = None

        if indent == 0 and (
            self._is_variable(content) or self._is_trigger(content) or self._is_component(content)
        ):
            ctx.reset_to_global()

        if self._is_variable(content):
            self._parse_variable(content)
        elif self._is_trigger(content):
            self._parse_trigger(content, indent)
        elif self._is_modulation(content):
            self._parse_modulation(content)
        elif self._continues_body(content, indent):
            self._parse_attribute(content, indent)
        elif self._is_component(content):
            self._parse_component(content, indent)
        else:
            self._parse_attribute(content, indent)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _is_variable(self, content: str) -> bool:
        return _first_word(content) == VARIABLE_KEYWORD

    def _is_trigger(self, content: str) -> bool:
        return self.catalog.is_trigger_kind(_first_word(content))

    def _is_modulation(self, content: str) -> bool:
        return _first_word(content) == MODULATION_KEYWORD

    def _is_component(self, content: str) -> bool:
        return self.catalog.is_component_kind(_first_word(content))

    def _continues_body(self, content: str, indent: int) -> bool:
        """Whether an indented line is an attribute of the open component or trigger.

        Inside a trigger body a component keyword opens a new component,
        unless the trigger has an attribute of that name (``master`` has
        ``filter``, ``compressor`` and ``envelope``).
        """
        ctx = self.context
        if indent == 0:
            return False
        if ctx.current_component is not None:
            return True
        if ctx.current_trigger is not None:
            word = _first_word(content)
            if not self.catalog.is_component_kind(word):
                return True
            return self.catalog.get_trigger_attribute_schema(ctx.current_trigger.kind, word) is not None
        return False

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def _parse_variable(self, content: str) -> None:
        ctx = self.context
        match = VARIABLE_PATTERN.match(content)
        if match is None:
            ctx.add_error('Invalid variable declaration (expected "variable <name> = <value>")')
            return

        name, text = match.group(1), match.group(2).strip()
        bounds: tuple[float, float] | None = None
        range_match = RANGE_PATTERN.match(text)
        if range_match is not None:
            text = range_match.group(1).strip()
            bounds = self._parse_range(range_match.group(2))
            if bounds is None:
                ctx.add_warning(
                    f'Invalid range "[{range_match.group(2)}]" for variable "{name}", ignoring it'
                )

        value = self._variable_value(text)
        minimum, maximum = bounds if bounds is not None else (None, None)
        scope = ctx.current_scope

        if scope.is_global:
            if not self.store.add_variable(
                name, value, ScopeKind.GLOBAL, min=minimum, max=maximum, line=ctx.line_number
            ):
                ctx.add_error(f'Variable name "{name}" is already in use')
            return

        info = self.store.get_name_info(name)
        if info is None:
            self.store.add_variable(
                name,
                value,
                ScopeKind.TRIGGER,
                scope.key,
                min=minimum,
                max=maximum,
                line=ctx.line_number,
            )
            return

        if not info.is_variable:
            ctx.add_error(f'Name "{name}" belongs to a {info.kind} and cannot be overridden')
            return

        trigger_schema = self.catalog.get_trigger_schema(scope.kind)
        if trigger_schema is not None and not trigger_schema.can_override_variables:
            ctx.add_error(f'Trigger "{scope.kind}" cannot override variables')
            return

        if bounds is not None:
            ctx.add_warning(f'Range is ignored when overriding variable "{name}"')
        self.store.set_variable_override(name, value, scope.key)  # type: ignore[arg-type]

    def _parse_range(self, text: str) -> tuple[float, float] | None:
        parts = [part.strip() for part in text.split(",")]
        if len(parts) != 2:
            return None
        try:
            low, high = float(parts[0]), float(parts[1])
        except ValueError:
            return None
        if low > high:
            return None
        return low, high

    def _variable_value(self, text: str) -> ValueKind:
        if is_expression(text):
            return Expression(text)
        if NAME_PATTERN.match(text):
            info = self.store.get_name_info(text)
            if info is not None and info.is_variable:
                return VariableRef(text)
        return parse_literal(text)

    # ------------------------------------------------------------------
    # Triggers and components
    # ------------------------------------------------------------------

    def _parse_trigger(self, content: str, indent: int) -> None:
        ctx = self.context
        kind, _, name = content.partition(" ")
        name = name.strip()
        schema = self.catalog.get_trigger_schema(kind)
        if schema is None:
            ctx.add_error(f'Unknown trigger type "{kind}"')
            ctx.skip_indent = indent
            return

        if schema.requires_name and not name:
            ctx.add_error(f'Trigger "{kind}" requires a name')
            ctx.skip_indent = indent
            return
        if name and not schema.requires_name:
            ctx.add_warning(f'Trigger "{kind}" does not take a name, ignoring "{name}"')
            name = ""
        if len(name.split()) > 1:
            ctx.add_error(f'Trigger name "{name}" must be a single word')
            ctx.skip_indent = indent
            return

        key = make_scope_key(kind, name or None)
        ctx.push_scope(kind, key, indent)
        ctx.current_trigger = TriggerCursor(kind, key, indent)
        ctx.current_component = None
        ctx.current_attribute = None
        self.store.declare_trigger(key, kind)

    def _parse_component(self, content: str, indent: int) -> None:
        ctx = self.context
        kind, _, name = content.partition(" ")
        name = name.strip()

        if not name:
            ctx.add_error(f'Component "{kind}" requires a name')
            ctx.skip_indent = indent
            return
        if not NAME_PATTERN.match(name):
            ctx.add_error(
                f'Component name "{name}" must be a single word of letters, digits or underscores'
            )
            ctx.skip_indent = indent
            return

        scope = ctx.current_scope
        if scope.is_global:
            added = self.store.add_component(kind, name, ScopeKind.GLOBAL)
        else:
            trigger_schema = self.catalog.get_trigger_schema(scope.kind)
            if trigger_schema is not None and not trigger_schema.can_contain_components:
                ctx.add_error(f'Trigger "{scope.kind}" cannot contain components')
                ctx.skip_indent = indent
                return
            added = self.store.add_component(kind, name, ScopeKind.TRIGGER, scope.key)

        if not added:
            ctx.add_error(f'Component name "{name}" is already in use')
            ctx.skip_indent = indent
            return

        ctx.current_component = ComponentCursor(kind, name, indent)
        ctx.current_attribute = None

    # ------------------------------------------------------------------
    # Attributes and modulation
    # ------------------------------------------------------------------

    def _attribute_owner(self) -> AttributeOwner | None:
        ctx = self.context
        if ctx.current_component is not None:
            component = ctx.current_component
            return AttributeOwner(OwnerType.COMPONENT, component.name, component.kind)
        if ctx.current_trigger is not None:
            trigger = ctx.current_trigger
            return AttributeOwner(OwnerType.TRIGGER, trigger.key, trigger.kind)
        return None

    def _parse_attribute(self, content: str, indent: int) -> None:
        ctx = self.context
        name, _, text = content.partition(" ")
        text = text.strip()

        owner = self._attribute_owner()
        if owner is None:
            ctx.add_error(f'Attribute "{name}" must be inside a component or trigger')
            return
        if not text:
            ctx.add_error(f'Attribute "{name}" requires a value')
            return

        attr_schema: AttributeSchema | None
        if owner.type == OwnerType.TRIGGER:
            trigger_schema = self.catalog.get_trigger_schema(owner.kind)
            if trigger_schema is None or not trigger_schema.can_have_attributes:
                ctx.add_error(f'Trigger "{owner.kind}" cannot have attributes')
                return
            attr_schema = trigger_schema.attributes.get(name)
        else:
            attr_schema = self.catalog.get_attribute_schema(owner.kind, name)

        if attr_schema is None:
            ctx.add_warning(f'Unknown attribute "{name}" for {owner.kind}')

        ctx.attribute_lines[(owner, name)] = ctx.line_number
        self.resolver.write(owner, name, self._interpret_value(owner, name, attr_schema, text))
        ctx.current_attribute = AttributeCursor(name, indent, owner)

    def _interpret_value(
        self,
        owner: AttributeOwner,
        attribute: str,
        attr_schema: AttributeSchema | None,
        text: str,
    ) -> AttributeValue:
        ctx = self.context
        current = self.resolver.read(owner, attribute)
        if attr_schema is None:
            return current.with_value(self._plain_value(text))

        if NAME_PATTERN.match(text):
            info = self.store.get_name_info(text)
            if attr_schema.resolves_components or attr_schema.can_reference_variables:
                if info is not None and (info.is_variable or attr_schema.is_reference):
                    return self.resolver.bind_name(
                        owner, attribute, attr_schema, current, text, ctx.line_number
                    )
                if attr_schema.type != AttributeType.ENUM:
                    # Declared further down, or a modulator whose nested
                    # modulation lines are still to come; Pass 2 decides.
                    return current.with_value(Unresolved(text))
            elif info is not None and info.is_variable:
                ctx.add_warning(f'Attribute "{attribute}" cannot reference variables')
                if attr_schema.is_numeric:
                    return current.with_value(self._default_value(attr_schema))

        if attr_schema.type == AttributeType.ENUM:
            if text in attr_schema.values or attr_schema.allow_custom:
                return current.with_value(Literal(text))
            ctx.add_error(
                f'Invalid enum value "{text}" for attribute "{attribute}" '
                f"(valid: {', '.join(attr_schema.values)})"
            )
            return current.with_value(self._default_value(attr_schema))

        if attr_schema.is_numeric and not is_expression(text):
            return current.with_value(self._numeric_value(attribute, attr_schema, text))

        return current.with_value(self._plain_value(text))

    def _plain_value(self, text: str) -> ValueKind:
        if is_expression(text):
            return Expression(text)
        return parse_literal(text)

    def _numeric_value(
        self, attribute: str, attr_schema: AttributeSchema, text: str
    ) -> Literal | None:
        """Read the leading number of ``text``, as in ``pitch 5 cents``."""
        literal = parse_literal(text)
        if not isinstance(literal.value, str):
            return literal

        match = LEADING_NUMBER.match(text)
        if match is None:
            self.context.add_warning(
                f'Attribute "{attribute}" expects a number, got "{text}"; '
                f"using default {attr_schema.default}"
            )
            return self._default_value(attr_schema)

        self.context.add_warning(
            f'Ignoring "{text[match.end():].strip()}" after the number '
            f'in attribute "{attribute}"'
        )
        return parse_literal(match.group())

    @staticmethod
    def _default_value(attr_schema: AttributeSchema) -> Literal | None:
        if attr_schema.default is None:
            return None
        return Literal(attr_schema.default)

    def _parse_modulation(self, content: str) -> None:
        ctx = self.context
        parts = content.split()
        if len(parts) < 2:
            ctx.add_error("Modulation requires a modulator name")
            return
        if len(parts) > 2:
            ctx.add_error("Modulation takes a single modulator name")
            return

        attribute = ctx.current_attribute
        if attribute is None:
            ctx.add_error("Modulation must be nested under an attribute")
            return

        current = self.resolver.read(attribute.owner, attribute.name)
        self.resolver.write(
            attribute.owner, attribute.name, current.with_modulation(ComponentRef(parts[1]))
        )
        ctx.modulation_lines[(attribute.owner, attribute.name)] = ctx.line_number


def parse_document(
    text: str,
    catalog: SchemaCatalog | None = None,
    *,
    store: InstanceStore | None = None,
    strict: bool = False,
) -> tuple[ParseResult, InstanceStore]:
    """Parse ``text`` with the shipped catalog unless another one is given."""
    if catalog is None:
        catalog = load_default_catalog()

    parser = DocumentParser(catalog, store, strict=strict)
    return parser.parse(text), parser.store
