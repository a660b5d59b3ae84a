"""Parse state carried from line to line."""

from dataclasses import dataclass

from synthlang.document.types import AttributeOwner, ParseIssue, Severity

GLOBAL_SCOPE = "global"


@dataclass
class ScopeFrame:
    kind: str  # "global" or a trigger kind
    key: str | None
    indent: int

    @property
    def is_global(self) -> bool:
        return self.kind == GLOBAL_SCOPE


@dataclass
class ComponentCursor:
    kind: str
    name: str
    indent: int


@dataclass
class TriggerCursor:
    kind: str
    key: str
    indent: int


@dataclass
class AttributeCursor:
    name: str
    indent: int
    owner: AttributeOwner


class ParseContext:
    """Scope stack, cursors and accumulated issues for one parse."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        # The global frame is a sentinel that is never popped.
        self.scope_stack: list[ScopeFrame] = [ScopeFrame(GLOBAL_SCOPE, None, -1)]
        self.current_component: ComponentCursor | None = None
        self.current_trigger: TriggerCursor | None = None
        self.current_attribute: AttributeCursor | None = None
        # Body lines deeper than this belong to a rejected header and are skipped
        self.skip_indent: int | None = None
        self.line_number = 0
        self.errors: list[ParseIssue] = []
        self.warnings: list[ParseIssue] = []
        # Where attributes and modulation lines were written, for Pass 2 messages
        self.attribute_lines: dict[tuple[AttributeOwner, str], int] = {}
        self.modulation_lines: dict[tuple[AttributeOwner, str], int] = {}

    @property
    def current_scope(self) -> ScopeFrame:
        return self.scope_stack[-1]

    def push_scope(self, kind: str, key: str, indent: int) -> None:
        self.scope_stack.append(ScopeFrame(kind, key, indent))

    def pop_scopes_to_indent(self, indent: int) -> bool:
        """Discard scopes opened at ``indent`` or deeper. Returns True if any were."""
        popped = False
        while len(self.scope_stack) > 1 and self.scope_stack[-1].indent >= indent:
            self.scope_stack.pop()
            popped = True
        return popped

    def reset_to_global(self) -> None:
        del self.scope_stack[1:]
        self.clear_cursors()

    def clear_cursors(self) -> None:
        self.current_component = None
        self.current_trigger = None
        self.current_attribute = None

    def sync_trigger_cursor(self) -> None:
        """Point the trigger cursor at the innermost open trigger scope."""
        frame = self.current_scope
        if frame.is_global or frame.key is None:
            self.current_trigger = None
        else:
            self.current_trigger = TriggerCursor(frame.kind, frame.key, frame.indent)

    def add_error(self, message: str, line: int | None = None) -> None:
        self.errors.append(ParseIssue(line or self.line_number, message, Severity.ERROR))

    def add_warning(self, message: str, line: int | None = None) -> None:
        self.warnings.append(ParseIssue(line or self.line_number, message, Severity.WARNING))
