"""Authorization expression tree.

Three node kinds make up every tree: `AccessToken` leaves and `And` / `Or`
groups. Trees are immutable once built and may be evaluated any number of
times, from any thread, against different label sets.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Union

from label_authz.expression.lexer import is_identifier_char

LabelSet = Mapping[str, bool]


@dataclass(frozen=True)
class AccessToken:
    """Leaf node: true when `label` is held."""

    label: str

    def evaluate(self, labels: LabelSet) -> bool:
        return evaluate(self, labels)


@dataclass(frozen=True)
class And:
    """True when every child is true."""

    children: tuple[Expression, ...]

    def __post_init__(self) -> None:
        if len(self.children) < 2:
            raise ValueError("And requires at least two children")

    def evaluate(self, labels: LabelSet) -> bool:
        return evaluate(self, labels)


@dataclass(frozen=True)
class Or:
    """True when at least one child is true."""

    children: tuple[Expression, ...]

    def __post_init__(self) -> None:
        if len(self.children) < 2:
            raise ValueError("Or requires at least two children")

    def evaluate(self, labels: LabelSet) -> bool:
        return evaluate(self, labels)


Expression = Union[AccessToken, And, Or]


def _not_a_node(value: object) -> TypeError:
    return TypeError(f"Not an expression node: {value!r}")


def evaluate(expression: Expression, labels: LabelSet) -> bool:
    """
    Evaluate an expression tree against a label set.

    Unknown labels are simply not held. `And` stops at the first false child
    and `Or` at the first true one, visiting children in stored order. The
    walk uses an explicit stack, so nesting depth is not bounded by the
    interpreter's recursion limit.

    Args:
        expression: Root of the tree to evaluate
        labels: Mapping of held labels to True

    Returns:
        True if the label set satisfies the expression

    Examples:
        >>> evaluate(And((AccessToken("a"), AccessToken("b"))), {"a": True})
        False
    """
    match expression:
        case AccessToken(label=label):
            return bool(labels.get(label, False))
        case And() | Or():
            pass
        case _:
            raise _not_a_node(expression)

    # Each frame is a group and the iterator over its remaining children
    stack = [(expression, iter(expression.children))]
    value: bool | None = None

    while stack:
        node, children = stack[-1]

        if value is not None:
            # A child just finished; a deciding value ends its parent too
            if (isinstance(node, And) and not value) or (
                isinstance(node, Or) and value
            ):
                stack.pop()
                continue
            value = None

        child = next(children, None)
        if child is None:
            # Exhausted: every child of an And was true, none of an Or
            stack.pop()
            value = isinstance(node, And)
            continue

        match child:
            case AccessToken(label=label):
                value = bool(labels.get(label, False))
            case And(children=grandchildren) | Or(children=grandchildren):
                stack.append((child, iter(grandchildren)))
            case _:
                raise _not_a_node(child)

    return bool(value)


def _format_label(label: str) -> str:
    if label and all(is_identifier_char(ch) for ch in label):
        return label
    # Labels hold the raw text between quotes, so they are emitted verbatim
    return f'"{label}"'


def format_expression(expression: Expression) -> str:
    """
    Render a tree back into expression text.

    Nested groups are parenthesized. For trees built by the parser, parsing
    the output yields an equal tree.

    Examples:
        >>> format_expression(Or((And((AccessToken("a"), AccessToken("b"))), AccessToken("c"))))
        '(a & b) | c'
    """
    match expression:
        case AccessToken(label=label):
            return _format_label(label)
        case And() | Or():
            pass
        case _:
            raise _not_a_node(expression)

    # Frames hold a group, its remaining children and the text rendered so far
    stack: list[tuple[And | Or, Iterator[Expression], list[str]]] = [
        (expression, iter(expression.children), [])
    ]

    while True:
        node, children, parts = stack[-1]
        child = next(children, None)

        if child is None:
            operator = " & " if isinstance(node, And) else " | "
            text = operator.join(parts)
            stack.pop()
            if not stack:
                return text
            stack[-1][2].append(f"({text})")
            continue

        match child:
            case AccessToken(label=label):
                parts.append(_format_label(label))
            case And(children=grandchildren) | Or(children=grandchildren):
                stack.append((child, iter(grandchildren), []))
            case _:
                raise _not_a_node(child)


def _node_dict(expression: Expression) -> dict[str, Any]:
    match expression:
        case AccessToken(label=label):
            return {"type": "access_token", "label": label}
        case And():
            return {"type": "and", "children": []}
        case Or():
            return {"type": "or", "children": []}
        case _:
            raise _not_a_node(expression)


def to_dict(expression: Expression) -> dict[str, Any]:
    """Convert a tree to a JSON-serializable dictionary."""
    root = _node_dict(expression)
    stack = [(expression, root)]

    while stack:
        node, data = stack.pop()
        if isinstance(node, AccessToken):
            continue
        for child in node.children:
            child_data = _node_dict(child)
            data["children"].append(child_data)
            stack.append((child, child_data))

    return root
