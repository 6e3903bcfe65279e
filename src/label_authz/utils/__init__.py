"""Utility modules for label-authz.

Configuration lives in `label_authz.utils.config`; it is not imported here
because it depends on the expression package, which itself logs through
`label_authz.utils.logging`.
"""

from label_authz.utils.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
