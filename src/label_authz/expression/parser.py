"""Parser turning lexer tokens into an authorization expression tree.

Parsing uses an explicit stack of scopes, one per open parenthesis, rather
than recursion. Each scope collects the labels and sub-expressions seen at its
depth plus the single operator (`&` or `|`) allowed there. Mixing operators in
one scope is rejected: there is no precedence, parentheses must disambiguate.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from label_authz.expression.ast import AccessToken, And, Expression, Or
from label_authz.expression.errors import (
    LexerError,
    MismatchedParenthesesError,
    MissingOperatorError,
    UnexpectedOperatorError,
    UnexpectedTokenError,
    UnmatchedClosingParenthesisError,
)
from label_authz.expression.lexer import Lexer, TokenKind
from label_authz.utils.logging import get_logger

log = get_logger("authz.parser")


@dataclass
class Scope:
    """Accumulator for one parenthesis nesting level."""

    nodes: list[Expression] = field(default_factory=list)
    labels: list[AccessToken] = field(default_factory=list)
    operator: TokenKind | None = None

    def add_node(self, node: Expression) -> None:
        self.nodes.append(node)

    def add_label(self, label: str) -> None:
        self.labels.append(AccessToken(label))

    def set_operator(self, operator: TokenKind) -> None:
        """
        Declare the operator for this scope.

        Repeating the declared operator is allowed (`a & b & c`).

        Raises:
            UnexpectedOperatorError: If a different operator was already declared
        """
        if self.operator is None:
            self.operator = operator
        elif self.operator is not operator:
            raise UnexpectedOperatorError()

    def build(self) -> Expression:
        """
        Collapse the scope into a single expression.

        A lone label or lone sub-expression is returned as is. Anything else
        is combined, sub-expressions first then labels, each in encounter
        order, under the declared operator.

        Raises:
            MissingOperatorError: If several items need combining and no
                operator was declared, or if the scope is empty
        """
        if not self.labels and not self.nodes:
            raise MissingOperatorError()

        if len(self.labels) == 1 and not self.nodes:
            return self.labels[0]

        if len(self.nodes) == 1 and not self.labels:
            return self.nodes[0]

        if self.operator is None:
            raise MissingOperatorError()

        combined = (*self.nodes, *self.labels)
        if self.operator is TokenKind.AND:
            return And(combined)
        return Or(combined)


class Parser:
    """
    Single-shot parser over a Lexer.

    Examples:
        >>> Parser(Lexer("a & (b | c)")).parse()
        And(children=(Or(children=(AccessToken(label='b'), AccessToken(label='c'))), AccessToken(label='a')))
    """

    def __init__(self, lexer: Lexer) -> None:
        self._lexer = lexer

    def parse(self) -> Expression:
        """
        Consume the lexer and build the expression tree.

        Returns:
            Root of the expression tree

        Raises:
            LexerError: On an unexpected character
            ParserError: On any structural problem (see errors module)
        """
        stack = [Scope()]

        while True:
            token = self._lexer.next_token()
            scope = stack[-1]

            if token.kind is TokenKind.END:
                break

            if token.kind is TokenKind.ACCESS_TOKEN:
                scope.add_label(token.value)
            elif token.kind is TokenKind.OPEN_PAREN:
                stack.append(Scope())
            elif token.kind in (TokenKind.AND, TokenKind.OR):
                scope.set_operator(token.kind)
            elif token.kind is TokenKind.CLOSE_PAREN:
                if len(stack) == 1:
                    raise UnmatchedClosingParenthesisError()
                finished = stack.pop()
                stack[-1].add_node(finished.build())
            elif token.kind is TokenKind.ERROR:
                raise LexerError(token.value, token.position)
            else:
                raise UnexpectedTokenError(token)

        if len(stack) != 1:
            raise MismatchedParenthesesError()

        expression = stack[0].build()
        log.debug("expression_parsed", source=self._lexer.source)
        return expression


def parse(source: str) -> Expression:
    """Parse expression text into a tree."""
    return Parser(Lexer(source)).parse()
