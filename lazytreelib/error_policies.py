"""
Error handling policies for background loads.

Loads started by expanding a node run as fire-and-forget tasks. Their
failures are always recorded in the controller's error state; the policy
decides what else happens to the exception once the task has caught it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .errors import error_message

logger = logging.getLogger(__name__)


class ErrorPolicy(ABC):
    """
    Base class for background load error policies.

    Subclasses implement different strategies for failures that have no
    awaiting caller to propagate to.
    """

    @abstractmethod
    def handle(self, error: Exception, node_id: Optional[str]) -> None:
        """
        Handle a failed background load.

        Args:
            error: The exception raised by the load
            node_id: Node whose children were being fetched (None for root)

        Returning normally swallows the error; raising makes the task fail.
        """
        pass


class LogErrorsPolicy(ErrorPolicy):
    """
    Policy that logs the failure and lets the task finish cleanly.

    This is the default: the node's error decoration is the user-facing
    signal, the log line is for operators.
    """

    def __init__(self, level: int = logging.ERROR):
        self.level = level

    def handle(self, error: Exception, node_id: Optional[str]) -> None:
        logger.log(self.level, "Failed to load children for item %s: %s",
                   node_id, error_message(error))


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that collects all errors without logging, for later inspection.

    Useful in tests and in batch tools that report failures at the end.
    """

    def __init__(self):
        self.errors: List[Dict[str, Any]] = []

    def handle(self, error: Exception, node_id: Optional[str]) -> None:
        self.errors.append({
            'node_id': node_id,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': error_message(error),
        })

    def failed_ids(self) -> List[Optional[str]]:
        """Node ids in the order their failures were collected."""
        return [record['node_id'] for record in self.errors]

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        return {
            'total_errors': len(self.errors),
            'failed_nodes': len(set(self.failed_ids())),
            'errors': self.errors,
        }

    def clear(self) -> None:
        self.errors.clear()


class RaiseErrorsPolicy(ErrorPolicy):
    """
    Policy that re-raises, so awaiting the task surfaces the failure.

    Only useful when the caller keeps and awaits the tasks returned by
    handle_item_expansion().
    """

    def handle(self, error: Exception, node_id: Optional[str]) -> None:
        raise error
