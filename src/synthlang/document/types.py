"""Result and bookkeeping types for document parsing."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """Parse issue severity.

    ERROR: The line (or reference) was not understood and was dropped or left raw
    WARNING: The line was accepted, possibly after falling back to a safe default
    """

    ERROR = "error"
    WARNING = "warning"


class OwnerType(str, Enum):
    COMPONENT = "component"
    TRIGGER = "trigger"


@dataclass(frozen=True)
class AttributeOwner:
    """Who an attribute belongs to: a component name or a trigger scope key."""

    type: OwnerType
    name: str
    kind: str  # component kind or trigger kind

    def describe(self) -> str:
        return f"{self.kind} {self.name}" if self.type == OwnerType.COMPONENT else self.name


@dataclass(frozen=True)
class ParseIssue:
    """A single error or warning, attached to a document line (1-indexed)."""

    line: int
    message: str
    severity: Severity = Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {"line": self.line, "message": self.message}

    def __str__(self) -> str:
        return f"line {self.line}: [{self.severity.value.upper()}] {self.message}"


@dataclass
class ParseResult:
    """Outcome of parsing a whole document.

    Attributes:
        success: True if no errors (warnings don't affect this)
        errors: ERROR severity issues in line order
        warnings: WARNING severity issues in line order
    """

    success: bool
    errors: list[ParseIssue] = field(default_factory=list)
    warnings: list[ParseIssue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }
