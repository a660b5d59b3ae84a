"""Tests for the attribute expression evaluator.

Tests cover:
- Lexer: Tokenization of expression strings
- Parser: AST generation and precedence
- Evaluator: Evaluation with variable lookup
- is_expression: the lexical "looks like arithmetic" check
"""

import math

import pytest

from synthlang.expressions import (
    BinaryOp,
    EvaluationError,
    Evaluator,
    Identifier,
    Lexer,
    LexerError,
    Literal,
    ParseError,
    Parser,
    Token,
    TokenType,
    UnaryOp,
    evaluate,
    is_expression,
    parse,
    try_evaluate,
)


def no_variables(name):
    return None


# =============================================================================
# Lexer Tests
# =============================================================================


class TestLexer:
    """Tests for the expression lexer."""

    def test_tokenize_numbers(self):
        tokens = Lexer("42 3.14 .5").tokenize()

        assert tokens[0] == Token(TokenType.NUMBER, 42, 0)
        assert tokens[1] == Token(TokenType.NUMBER, 3.14, 3)
        assert tokens[2] == Token(TokenType.NUMBER, 0.5, 8)
        assert tokens[3].type == TokenType.EOF

    def test_integer_stays_int(self):
        tokens = Lexer("7").tokenize()
        assert isinstance(tokens[0].value, int)

    def test_tokenize_operators(self):
        tokens = Lexer("+ - * / ( )").tokenize()
        types = [t.type for t in tokens[:-1]]

        assert types == [
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.MULTIPLY,
            TokenType.DIVIDE,
            TokenType.LPAREN,
            TokenType.RPAREN,
        ]

    def test_tokenize_identifiers(self):
        tokens = Lexer("base_pitch * depth2").tokenize()

        assert tokens[0] == Token(TokenType.IDENTIFIER, "base_pitch", 0)
        assert tokens[1].type == TokenType.MULTIPLY
        assert tokens[2] == Token(TokenType.IDENTIFIER, "depth2", 13)

    def test_unknown_character_raises(self):
        with pytest.raises(LexerError) as exc_info:
            Lexer("2 % 3").tokenize()
        assert exc_info.value.position == 2

    def test_empty_source_is_just_eof(self):
        tokens = Lexer("   ").tokenize()
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF


# =============================================================================
# Parser Tests
# =============================================================================


class TestParser:
    """Tests for the recursive descent parser."""

    def test_parse_literal(self):
        assert parse("5") == Literal(5)

    def test_parse_identifier(self):
        assert parse("base") == Identifier("base")

    def test_multiplication_binds_tighter(self):
        ast = parse("1 + 2 * 3")

        assert ast == BinaryOp("+", Literal(1), BinaryOp("*", Literal(2), Literal(3)))

    def test_left_associative(self):
        ast = parse("8 - 4 - 2")

        assert ast == BinaryOp("-", BinaryOp("-", Literal(8), Literal(4)), Literal(2))

    def test_parentheses_override_precedence(self):
        ast = parse("(1 + 2) * 3")

        assert ast == BinaryOp("*", BinaryOp("+", Literal(1), Literal(2)), Literal(3))

    def test_unary_minus(self):
        assert parse("--4") == UnaryOp("-", UnaryOp("-", Literal(4)))

    def test_empty_expression(self):
        with pytest.raises(ParseError, match="Empty expression"):
            Parser("").parse()

    def test_missing_close_paren(self):
        with pytest.raises(ParseError, match="Expected '\\)'"):
            parse("(1 + 2")

    def test_trailing_tokens(self):
        with pytest.raises(ParseError, match="Unexpected token"):
            parse("1 2")

    def test_dangling_operator(self):
        with pytest.raises(ParseError, match="Unexpected end"):
            parse("1 +")


# =============================================================================
# Evaluator Tests
# =============================================================================


class TestEvaluate:
    """Tests for evaluate() with variable lookup."""

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("1 + 2 * 3", 7),
            ("(1 + 2) * 3", 9),
            ("10 / 4", 2.5),
            ("-3 + 5", 2),
            ("2 * -3", -6),
            ("1.5 * 2", 3.0),
        ],
    )
    def test_arithmetic(self, source, expected):
        assert evaluate(source, no_variables) == expected

    def test_variables_are_substituted(self):
        variables = {"base": 110, "ratio": 2}
        assert evaluate("base * ratio + 10", variables.get) == 230

    def test_numeric_string_variable(self):
        assert evaluate("x + 1", {"x": "2.5"}.get) == 3.5

    def test_missing_variable_fails_whole_expression(self):
        with pytest.raises(EvaluationError, match="Variable 'missing' not found"):
            evaluate("1 + missing", no_variables)

    def test_non_numeric_variable(self):
        with pytest.raises(EvaluationError, match="not numeric"):
            evaluate("wave * 2", {"wave": "sine"}.get)

    def test_boolean_variable_rejected(self):
        with pytest.raises(EvaluationError):
            evaluate("flag + 1", {"flag": True}.get)

    def test_lexer_errors_are_wrapped(self):
        with pytest.raises(EvaluationError, match="Invalid expression"):
            evaluate("2 ^ 3", no_variables)

    def test_parse_errors_are_wrapped(self):
        with pytest.raises(EvaluationError, match="Invalid expression"):
            evaluate("(2 + 3", no_variables)

    def test_try_evaluate_returns_none_on_failure(self):
        assert try_evaluate("nope * 2", no_variables) is None
        assert try_evaluate("3 * 2", no_variables) == 6


class TestDivisionByZero:
    """Division follows IEEE-754 float semantics."""

    def test_positive_over_zero(self):
        assert evaluate("1 / 0", no_variables) == math.inf

    def test_negative_over_zero(self):
        assert evaluate("-1 / 0", no_variables) == -math.inf

    def test_zero_over_zero(self):
        assert math.isnan(evaluate("0 / 0", no_variables))

    def test_evaluator_directly(self):
        result = Evaluator().evaluate(BinaryOp("/", Literal(5), Literal(0)))
        assert result == math.inf


# =============================================================================
# is_expression Tests
# =============================================================================


class TestIsExpression:
    """Tests for the lexical expression check."""

    @pytest.mark.parametrize("text", ["base * 2", "1+1", "(x)", "a - b", "-x"])
    def test_expressions(self, text):
        assert is_expression(text) is True

    @pytest.mark.parametrize("text", ["440", "-5", "3.25", "-0.5", "vibrato", "sine"])
    def test_not_expressions(self, text):
        assert is_expression(text) is False

    def test_non_string(self):
        assert is_expression(5) is False
