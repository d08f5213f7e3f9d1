"""Exception types raised by lazytreelib.

Only fetch failures and bad configuration are errors. Looking up or
updating an id that is not in the tree is a normal outcome and never
raises.
"""

from typing import Optional

DEFAULT_FETCH_ERROR_MESSAGE = "Failed to load items"


class LazyTreeError(Exception):
    """Base class for all lazytreelib errors."""


class ConfigurationError(LazyTreeError, ValueError):
    """Raised when controller or cache configuration is invalid."""


class FetchError(LazyTreeError):
    """A fetch provider failed to list the children of a node.

    Attributes:
        node_id: Parent id whose children were requested (None for root)
        message: Message recorded in the controller's error state
    """

    def __init__(self, node_id: Optional[str], message: str):
        self.node_id = node_id
        self.message = message
        target = "root" if node_id is None else repr(node_id)
        super().__init__(f"Failed to load children of {target}: {message}")


def error_message(error: BaseException) -> str:
    """Extract the message stored per node for a failed fetch."""
    if isinstance(error, FetchError):
        return error.message
    message = str(error)
    return message if message else DEFAULT_FETCH_ERROR_MESSAGE
