"""Lexer/tokenizer for attribute arithmetic expressions.

Converts expression strings such as ``base * 2 + 10`` into a stream of
tokens for the parser.

Token types:
- Literals: NUMBER
- Identifiers: IDENTIFIER (variable names)
- Operators: PLUS, MINUS, MULTIPLY, DIVIDE
- Punctuation: LPAREN, RPAREN
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenType(Enum):
    """Types of tokens in the expression language."""

    NUMBER = auto()
    IDENTIFIER = auto()

    PLUS = auto()        # +
    MINUS = auto()       # -
    MULTIPLY = auto()    # *
    DIVIDE = auto()      # /

    LPAREN = auto()      # (
    RPAREN = auto()      # )

    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the lexer.

    Attributes:
        type: The token type
        value: Numeric value for NUMBER, name for IDENTIFIER, operator text otherwise
        position: Character position in the source string
    """

    type: TokenType
    value: str | int | float | None
    position: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


class LexerError(Exception):
    """Error during lexical analysis."""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at position {position}")


# Token patterns (order matters - decimals before integers)
TOKEN_PATTERNS = [
    (r"\s+", None),

    (r"\+", TokenType.PLUS),
    (r"-", TokenType.MINUS),
    (r"\*", TokenType.MULTIPLY),
    (r"/", TokenType.DIVIDE),
    (r"\(", TokenType.LPAREN),
    (r"\)", TokenType.RPAREN),

    (r"\d+\.\d*|\.\d+", TokenType.NUMBER),
    (r"\d+", TokenType.NUMBER),

    (r"[a-zA-Z_][a-zA-Z0-9_]*", TokenType.IDENTIFIER),
]


class Lexer:
    """Tokenizer for attribute expressions.

    Usage:
        lexer = Lexer("base * 2 + 10")
        for token in lexer:
            print(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self._compiled_patterns = [
            (re.compile(pattern), token_type)
            for pattern, token_type in TOKEN_PATTERNS
        ]

    def __iter__(self) -> Iterator[Token]:
        """Iterate over all tokens in the source."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def next_token(self) -> Token:
        """Get the next token from the source."""
        while self.position < len(self.source):
            for pattern, token_type in self._compiled_patterns:
                match = pattern.match(self.source, self.position)
                if not match:
                    continue

                value = match.group()
                start = self.position
                self.position = match.end()

                if token_type is None:
                    break

                if token_type == TokenType.NUMBER:
                    number = float(value) if "." in value else int(value)
                    return Token(token_type, number, start)

                return Token(token_type, value, start)
            else:
                raise LexerError(
                    f"Unexpected character '{self.source[self.position]}'",
                    self.position,
                )

        return Token(TokenType.EOF, None, self.position)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        return list(self)
