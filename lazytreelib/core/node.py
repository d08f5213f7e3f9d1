"""Tree node value types.

Nodes are immutable. Updating a tree means building new nodes along the
path to the change and sharing every untouched subtree with the previous
snapshot, so a reader holding an older snapshot never sees it change.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class NodeState:
    """UI decoration attached to a node by the enhancement pass.

    Only the presentation layer reads this; the controller's decisions
    never depend on it.
    """

    is_loading: bool = False
    error: Optional[str] = None
    has_children: bool = False
    children_count: Optional[int] = None
    is_placeholder: bool = False


@dataclass(frozen=True)
class TreeNode:
    """A single entry in the hierarchical data set.

    Attributes:
        id: Unique identifier across the whole tree
        label: Display string, opaque to the controller
        children: None when not yet loaded, a (possibly empty) tuple once loaded
        children_count: Optional hint of how many children the node has
        extra: Additional item properties carried through untouched
        state: Decoration added by enhance_items_with_states()
    """

    id: str
    label: str = ""
    children: Optional[Tuple["TreeNode", ...]] = None
    children_count: Optional[int] = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)
    state: Optional[NodeState] = None

    def __post_init__(self):
        # Lists coming from callers are frozen so snapshots stay immutable
        if self.children is not None and not isinstance(self.children, tuple):
            object.__setattr__(self, "children", as_nodes(self.children))

    @property
    def is_loaded(self) -> bool:
        """True once a children sequence (possibly empty) is present."""
        return self.children is not None

    def with_children(self, children: Optional[Iterable["NodeLike"]]) -> "TreeNode":
        """Return a copy of this node with its children replaced."""
        return replace(self, children=None if children is None else as_nodes(children))

    def with_state(self, state: Optional[NodeState]) -> "TreeNode":
        """Return a copy of this node carrying the given decoration."""
        return replace(self, state=state)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TreeNode":
        """Build a node from a plain mapping.

        Accepts both ``childrenCount`` and ``children_count`` for the count
        hint. Keys the node does not model are kept in ``extra``.
        """
        data = dict(data)
        if "id" not in data:
            raise ValueError("tree node mapping requires an 'id' key")

        node_id = str(data.pop("id"))
        label = data.pop("label", "")
        children = data.pop("children", None)
        count = data.pop("children_count", data.pop("childrenCount", None))
        data.pop("state", None)

        return cls(
            id=node_id,
            label=label,
            children=None if children is None else as_nodes(children),
            children_count=count,
            extra=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to a plain mapping (used by analytics and debugging)."""
        result: Dict[str, Any] = dict(self.extra)
        result["id"] = self.id
        result["label"] = self.label
        if self.children is not None:
            result["children"] = [child.to_dict() for child in self.children]
        if self.children_count is not None:
            result["childrenCount"] = self.children_count
        return result


NodeLike = Union[TreeNode, Mapping[str, Any]]


def as_node(item: NodeLike) -> TreeNode:
    """Normalize a provider result item into a TreeNode."""
    if isinstance(item, TreeNode):
        return item
    if isinstance(item, Mapping):
        return TreeNode.from_dict(item)
    raise TypeError(f"Expected TreeNode or mapping, got {type(item).__name__}")


def as_nodes(items: Iterable[NodeLike]) -> Tuple[TreeNode, ...]:
    """Normalize a sequence of nodes or mappings into a tuple of TreeNodes."""
    if isinstance(items, tuple) and all(isinstance(item, TreeNode) for item in items):
        return items
    return tuple(as_node(item) for item in items)
