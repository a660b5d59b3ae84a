"""Arithmetic expressions for attribute values.

This module provides:
- Lexer: Tokenizes expression strings
- Parser: Produces AST from tokens
- Evaluator: Evaluates the AST to a number
- evaluate / is_expression: entry points used by the parser and store
"""

from synthlang.expressions.evaluator import (
    EvaluationError,
    Evaluator,
    evaluate,
    is_expression,
    substitute_variables,
    try_evaluate,
)
from synthlang.expressions.lexer import Lexer, LexerError, Token, TokenType
from synthlang.expressions.parser import (
    ASTNode,
    BinaryOp,
    Identifier,
    Literal,
    ParseError,
    Parser,
    UnaryOp,
    parse,
)

__all__ = [
    # Evaluator
    "EvaluationError",
    "Evaluator",
    "evaluate",
    "is_expression",
    "substitute_variables",
    "try_evaluate",
    # Lexer
    "Lexer",
    "LexerError",
    "Token",
    "TokenType",
    # Parser
    "ASTNode",
    "BinaryOp",
    "Identifier",
    "Literal",
    "ParseError",
    "Parser",
    "UnaryOp",
    "parse",
]
