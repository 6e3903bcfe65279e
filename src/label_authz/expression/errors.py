"""Exceptions raised while reading authorization expressions and label sets."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from label_authz.expression.lexer import Token


class AuthorizationExpressionError(Exception):
    """Base class for every error surfaced by expression handling."""


class LexerError(AuthorizationExpressionError):
    """An unexpected character was found in the expression source."""

    def __init__(self, char: str, position: int) -> None:
        self.char = char
        self.position = position
        super().__init__(f"unexpected character '{char}' at position {position}")


class ParserError(AuthorizationExpressionError):
    """The token stream does not form a valid expression."""

    message = "invalid expression"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class UnexpectedOperatorError(ParserError):
    """A scope mixes `&` and `|` without parentheses."""

    message = "unexpected operator"


class MissingOperatorError(ParserError):
    """A scope holds several items, or none, and never saw an operator."""

    message = "missing operator"


class UnmatchedClosingParenthesisError(ParserError):
    message = "unmatched closing parenthesis"


class MismatchedParenthesesError(ParserError):
    message = "mismatched parentheses"


class UnexpectedTokenError(ParserError):
    """Catch-all for tokens the parser does not accept in context."""

    def __init__(self, token: Token) -> None:
        self.token = token
        super().__init__(f"unexpected token: {token.kind.name}")


class LabelSetError(AuthorizationExpressionError):
    """A comma-separated authorization item is empty (strict mode only)."""

    def __init__(self, index: int, item: str) -> None:
        self.index = index
        self.item = item
        super().__init__(f"empty authorization label at index {index}")
