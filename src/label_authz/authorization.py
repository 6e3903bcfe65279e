"""Authorization checks against comma-separated credential strings.

This module is the public entry point for callers that hold a caller's
authorizations as text, e.g. `"admin, \"team lead\", reviewer"`.

Features:
    - One-shot checks (`check_authorization`)
    - Checks against an already-built label set (`check_authorization_by_map`)
    - Prepared checks that reuse one label set for many expressions
"""

from collections.abc import Callable
from types import MappingProxyType

from label_authz.expression import (
    AuthorizationExpressionError,
    LabelSet,
    LabelSetError,
    evaluate,
    parse,
)
from label_authz.utils.logging import get_logger

log = get_logger("authz.check")

# Checker returned by prepare_authorization_check
AuthorizationCheck = Callable[[str], bool]


def build_label_set(authorizations: str, *, strict: bool = False) -> dict[str, bool]:
    """
    Build a label set from a comma-separated credential string.

    Each item is stripped of surrounding whitespace, then of at most one
    leading and one trailing double quote (independently). Interior content is
    kept as is.

    Args:
        authorizations: Comma-separated labels
        strict: Reject empty items instead of keeping them as the "" label

    Returns:
        Mapping of every label to True

    Raises:
        LabelSetError: If strict and an item is empty after trimming

    Examples:
        >>> build_label_set('a, "b c" ,d')
        {'a': True, 'b c': True, 'd': True}
    """
    labels: dict[str, bool] = {}
    for index, item in enumerate(authorizations.split(",")):
        label = item.strip()
        if not label and strict:
            raise LabelSetError(index, item)
        if label.startswith('"'):
            label = label[1:]
        if label.endswith('"'):
            label = label[:-1]
        labels[label] = True
    return labels


def check_authorization_by_map(expression: str, labels: LabelSet) -> bool:
    """
    Check an expression against an already-built label set.

    Args:
        expression: Authorization expression text
        labels: Held labels

    Returns:
        True if the labels satisfy the expression

    Raises:
        AuthorizationExpressionError: If the expression is invalid
    """
    try:
        tree = parse(expression)
    except AuthorizationExpressionError as e:
        log.warning(
            "authorization_expression_invalid",
            expression=expression,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise

    allowed = evaluate(tree, labels)
    log.debug("authorization_checked", expression=expression, allowed=allowed)
    return allowed


def check_authorization(
    expression: str, authorizations: str, *, strict: bool = False
) -> bool:
    """
    Check whether comma-separated authorizations satisfy an expression.

    Args:
        expression: Authorization expression text, e.g. "a & (b | c)"
        authorizations: Comma-separated labels, e.g. "a,c"
        strict: Reject empty items (see build_label_set)

    Returns:
        True if the authorizations satisfy the expression

    Raises:
        AuthorizationExpressionError: If the expression is invalid. Callers
            should treat this as a denial.
        LabelSetError: If strict and an authorization item is empty

    Examples:
        >>> check_authorization("label1&(label2 | label3)", "label1,label3")
        True
    """
    labels = build_label_set(authorizations, strict=strict)
    return check_authorization_by_map(expression, labels)


def prepare_authorization_check(
    authorizations: str, *, strict: bool = False
) -> AuthorizationCheck:
    """
    Build the label set once and return a reusable checker.

    Each call of the returned function parses and evaluates a fresh
    expression against the cached labels.

    Args:
        authorizations: Comma-separated labels
        strict: Reject empty items (see build_label_set)

    Returns:
        Function mapping expression text to an authorization result

    Examples:
        >>> check = prepare_authorization_check("a,b")
        >>> check("a & b"), check("c")
        (True, False)
    """
    labels = MappingProxyType(build_label_set(authorizations, strict=strict))
    log.debug("authorization_check_prepared", label_count=len(labels))

    def check(expression: str) -> bool:
        return check_authorization_by_map(expression, labels)

    return check
