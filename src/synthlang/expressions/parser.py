"""Parser for attribute arithmetic expressions.

Converts a stream of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent parsing with operator precedence.

Grammar (lowest to highest precedence):
    sum     := product (('+' | '-') product)*
    product := unary (('*' | '/') unary)*
    unary   := '-' unary | primary
    primary := number | '(' sum ')' | identifier
"""

from dataclasses import dataclass

from synthlang.expressions.lexer import Lexer, Token, TokenType


# -----------------------------------------------------------------------------
# AST Node Types
# -----------------------------------------------------------------------------


@dataclass
class ASTNode:
    """Base class for AST nodes."""
    pass


@dataclass
class Literal(ASTNode):
    """A numeric literal."""
    value: int | float


@dataclass
class Identifier(ASTNode):
    """A variable reference that was not substituted before parsing."""
    name: str


@dataclass
class BinaryOp(ASTNode):
    """Binary operation (e.g., a + b)."""
    operator: str
    left: ASTNode
    right: ASTNode


@dataclass
class UnaryOp(ASTNode):
    """Unary negation."""
    operator: str
    operand: ASTNode


# -----------------------------------------------------------------------------
# Parser
# -----------------------------------------------------------------------------


class ParseError(Exception):
    """Error during parsing."""

    def __init__(self, message: str, token: Token):
        self.token = token
        super().__init__(f"{message} at position {token.position}")


_ADDITIVE = {TokenType.PLUS: "+", TokenType.MINUS: "-"}
_MULTIPLICATIVE = {TokenType.MULTIPLY: "*", TokenType.DIVIDE: "/"}


class Parser:
    """Recursive descent parser for attribute expressions.

    Accepts either source text or an already tokenized (and possibly
    variable-substituted) token list.

    Usage:
        ast = Parser("(base + 5) * 2").parse()
    """

    def __init__(self, source: str, tokens: list[Token] | None = None):
        self.source = source
        self.tokens = tokens if tokens is not None else Lexer(source).tokenize()
        self.position = 0

    def parse(self) -> ASTNode:
        """Parse the expression and return the AST root."""
        if not self.tokens or self.tokens[0].type == TokenType.EOF:
            raise ParseError("Empty expression", Token(TokenType.EOF, None, 0))

        ast = self._parse_sum()

        if not self._is_at_end():
            raise ParseError(
                f"Unexpected token '{self._current().value}'",
                self._current(),
            )

        return ast

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _current(self) -> Token:
        if self.position >= len(self.tokens):
            return Token(TokenType.EOF, None, len(self.source))
        return self.tokens[self.position]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        token = self._current()
        self.position += 1
        return token

    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._current().type == token_type:
            return self._advance()
        raise ParseError(message, self._current())

    # -------------------------------------------------------------------------
    # Parsing methods (in order of precedence, lowest to highest)
    # -------------------------------------------------------------------------

    def _parse_sum(self) -> ASTNode:
        left = self._parse_product()

        while self._current().type in _ADDITIVE:
            op = _ADDITIVE[self._advance().type]
            right = self._parse_product()
            left = BinaryOp(op, left, right)

        return left

    def _parse_product(self) -> ASTNode:
        left = self._parse_unary()

        while self._current().type in _MULTIPLICATIVE:
            op = _MULTIPLICATIVE[self._advance().type]
            right = self._parse_unary()
            left = BinaryOp(op, left, right)

        return left

    def _parse_unary(self) -> ASTNode:
        if self._current().type == TokenType.MINUS:
            self._advance()
            return UnaryOp("-", self._parse_unary())

        return self._parse_primary()

    def _parse_primary(self) -> ASTNode:
        token = self._current()

        if token.type == TokenType.NUMBER:
            self._advance()
            return Literal(token.value)  # type: ignore[arg-type]

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(str(token.value))

        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_sum()
            self._consume(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        if token.type == TokenType.EOF:
            raise ParseError("Unexpected end of expression", token)

        raise ParseError(f"Unexpected token '{token.value}'", token)


def parse(source: str) -> ASTNode:
    """Convenience function to parse an expression string."""
    return Parser(source).parse()
