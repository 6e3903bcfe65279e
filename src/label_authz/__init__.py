"""label-authz - boolean authorization expressions over held labels."""

__version__ = "0.1.0"

from label_authz.authorization import (
    build_label_set,
    check_authorization,
    check_authorization_by_map,
    prepare_authorization_check,
)
from label_authz.expression import (
    AuthorizationExpressionError,
    Expression,
    evaluate,
    parse,
)

__all__ = [
    "build_label_set",
    "check_authorization",
    "check_authorization_by_map",
    "prepare_authorization_check",
    "parse",
    "evaluate",
    "Expression",
    "AuthorizationExpressionError",
    "__version__",
]
