"""Fetch provider abstraction.

A fetch provider is the source of truth for node children. The controller
only ever asks it two things: list the children of a parent, and report a
child count for a node without fetching anything.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Sequence, Set

from .node import NodeLike, TreeNode


def default_children_count(node: TreeNode) -> int:
    """Children count derived from what the node itself knows.

    Uses the explicit hint first, then the loaded children, else 0.
    """
    if node.children_count is not None:
        return node.children_count
    if node.children is not None:
        return len(node.children)
    return 0


class FetchProvider(ABC):
    """Abstract base class for fetch providers.

    Subclasses implement list_children(); children_count() defaults to the
    node's own hint, which is what most providers want.
    """

    @abstractmethod
    async def list_children(self, parent_id: Optional[str] = None) -> Sequence[NodeLike]:
        """Fetch the ordered children of a parent.

        Args:
            parent_id: Parent node id, or None for the root level

        Returns:
            Ordered sequence of TreeNode (or mappings). An empty sequence
            is a legitimate "no children" result.
        """
        pass

    def children_count(self, node: TreeNode) -> int:
        """Report how many children a node has without fetching.

        Must be quick and synchronous; 0 marks a leaf that is never fetched.
        """
        return default_children_count(node)

    def supports_capability(self, capability: str) -> bool:
        """Check if provider supports a specific capability."""
        return capability in self._define_capabilities()

    def _define_capabilities(self) -> Set[str]:
        return {"list_children", "children_count"}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class CallableFetchProvider(FetchProvider):
    """Provider built from plain callables.

    Example:
        async def fetch(parent_id=None):
            return await api.get_items(parent=parent_id)

        provider = CallableFetchProvider(fetch)
    """

    def __init__(self,
                 list_children: Callable[[Optional[str]], Awaitable[Sequence[NodeLike]]],
                 children_count: Optional[Callable[[TreeNode], int]] = None):
        self._list_children = list_children
        self._children_count = children_count

    async def list_children(self, parent_id: Optional[str] = None) -> Sequence[NodeLike]:
        return await self._list_children(parent_id)

    def children_count(self, node: TreeNode) -> int:
        if self._children_count is None:
            return super().children_count(node)
        return self._children_count(node)

    def __repr__(self) -> str:
        name = getattr(self._list_children, "__name__", repr(self._list_children))
        return f"CallableFetchProvider({name})"
