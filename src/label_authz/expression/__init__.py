"""Authorization expression language: lexer, parser and tree."""

from label_authz.expression.ast import (
    AccessToken,
    And,
    Expression,
    LabelSet,
    Or,
    evaluate,
    format_expression,
    to_dict,
)
from label_authz.expression.errors import (
    AuthorizationExpressionError,
    LabelSetError,
    LexerError,
    MismatchedParenthesesError,
    MissingOperatorError,
    ParserError,
    UnexpectedOperatorError,
    UnexpectedTokenError,
    UnmatchedClosingParenthesisError,
)
from label_authz.expression.lexer import Lexer, Token, TokenKind
from label_authz.expression.parser import Parser, Scope, parse

__all__ = [
    "AccessToken",
    "And",
    "Or",
    "Expression",
    "LabelSet",
    "evaluate",
    "format_expression",
    "to_dict",
    "Lexer",
    "Token",
    "TokenKind",
    "Parser",
    "Scope",
    "parse",
    "AuthorizationExpressionError",
    "LexerError",
    "ParserError",
    "UnexpectedOperatorError",
    "MissingOperatorError",
    "UnmatchedClosingParenthesisError",
    "MismatchedParenthesesError",
    "UnexpectedTokenError",
    "LabelSetError",
]
