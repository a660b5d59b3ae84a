"""Instrument document parsing.

This module provides:
- DocumentParser: text to instance graph, in two passes
- ReferenceResolver: binds names used before their declaration
- ParseResult / ParseIssue: errors and warnings by line
"""

from synthlang.document.compat import rewrite_legacy_modulation
from synthlang.document.context import ParseContext
from synthlang.document.parser import DocumentParser, measure_indent, parse_document
from synthlang.document.resolver import ReferenceResolver
from synthlang.document.types import (
    AttributeOwner,
    OwnerType,
    ParseIssue,
    ParseResult,
    Severity,
)

__all__ = [
    # Parser
    "DocumentParser",
    "ParseContext",
    "ReferenceResolver",
    "measure_indent",
    "parse_document",
    "rewrite_legacy_modulation",
    # Types
    "AttributeOwner",
    "OwnerType",
    "ParseIssue",
    "ParseResult",
    "Severity",
]
