"""Evaluator for attribute arithmetic expressions.

Identifiers are resolved eagerly: every IDENTIFIER token is replaced with
the number returned by the caller's lookup before parsing starts. A lookup
that returns ``None`` fails the whole evaluation, there are no partial
results.

Division follows IEEE-754 float semantics: ``x / 0`` is ``inf`` with the
sign of ``x`` and ``0 / 0`` is ``nan``.
"""

import math
import re
from typing import Any, Callable

from synthlang.expressions.lexer import Lexer, LexerError, Token, TokenType
from synthlang.expressions.parser import (
    ASTNode,
    BinaryOp,
    Identifier,
    Literal,
    ParseError,
    Parser,
    UnaryOp,
)

VariableResolver = Callable[[str], Any]

_OPERATOR_CHARS = re.compile(r"[+\-*/()]")
_NUMBER_LITERAL = re.compile(r"^-?\d+\.?\d*$")


class EvaluationError(Exception):
    """Error during expression evaluation."""
    pass


def is_expression(value: Any) -> bool:
    """Lexical check for "this looks like arithmetic".

    True when the text contains at least one of ``+ - * / ( )`` and is not
    itself a plain, optionally negative, integer or decimal literal.
    """
    if not isinstance(value, str):
        return False
    return bool(_OPERATOR_CHARS.search(value)) and not _NUMBER_LITERAL.match(value)


def _to_number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise EvaluationError(f"Variable '{name}' is not numeric: {value!r}")
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        raise EvaluationError(f"Variable '{name}' is not numeric: {value!r}")


def substitute_variables(tokens: list[Token], resolve_variable: VariableResolver) -> list[Token]:
    """Replace identifier tokens with NUMBER tokens using the resolver."""
    resolved: list[Token] = []
    for token in tokens:
        if token.type != TokenType.IDENTIFIER:
            resolved.append(token)
            continue

        name = str(token.value)
        value = resolve_variable(name)
        if value is None:
            raise EvaluationError(f"Variable '{name}' not found")
        resolved.append(Token(TokenType.NUMBER, _to_number(name, value), token.position))
    return resolved


class Evaluator:
    """Evaluates an expression AST to a number.

    Usage:
        evaluator = Evaluator()
        result = evaluator.evaluate(Parser("2 * (3 + 4)").parse())
    """

    def evaluate(self, node: ASTNode) -> float:
        """Evaluate an AST node and return the result."""
        method_name = f"_eval_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")

        return method(node)

    def _eval_literal(self, node: Literal) -> float:
        return node.value

    def _eval_identifier(self, node: Identifier) -> float:
        raise EvaluationError(f"Unresolved identifier '{node.name}'")

    def _eval_unaryop(self, node: UnaryOp) -> float:
        operand = self.evaluate(node.operand)
        if node.operator == "-":
            return -operand
        raise EvaluationError(f"Unknown unary operator: {node.operator}")

    def _eval_binaryop(self, node: BinaryOp) -> float:
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)
        op = node.operator

        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            return self._divide(left, right)

        raise EvaluationError(f"Unknown operator: {op}")

    def _divide(self, left: float, right: float) -> float:
        if right != 0:
            return left / right
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def evaluate(expression: str, resolve_variable: VariableResolver) -> float:
    """Evaluate an arithmetic expression.

    This is the main entry point for expression evaluation.

    Args:
        expression: The expression text, e.g. ``"base * 2 + 10"``
        resolve_variable: Callback returning a variable's value or None

    Returns:
        The numeric result

    Raises:
        EvaluationError: on malformed input or an unresolvable variable

    Example:
        evaluate("base * 2", {"base": 110}.get)
        # 220
    """
    try:
        tokens = Lexer(expression).tokenize()
        tokens = substitute_variables(tokens, resolve_variable)
        ast = Parser(expression, tokens).parse()
    except (LexerError, ParseError) as exc:
        raise EvaluationError(f"Invalid expression '{expression}': {exc}") from exc

    return Evaluator().evaluate(ast)


def try_evaluate(expression: str, resolve_variable: VariableResolver) -> float | None:
    """Evaluate, returning None instead of raising on failure."""
    try:
        return evaluate(expression, resolve_variable)
    except EvaluationError:
        return None
