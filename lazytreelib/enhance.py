"""Decorate a snapshot with loading, error and placeholder children.

The presentation layer renders the decorated tree directly, so it never
has to tell "children not known yet" apart from "children is a real,
empty list": any node that is loading, failed, or has children that are
not loaded yet gets exactly one synthetic child describing that state.
"""

from typing import Callable, Iterable, Mapping, Optional, Sequence, Tuple

from .config import PlaceholderKind
from .core.node import NodeState, TreeNode
from .core.provider import default_children_count

PLACEHOLDER_LABELS = {
    PlaceholderKind.LOADING: "Loading...",
    PlaceholderKind.ERROR: "Error loading children",
    PlaceholderKind.PLACEHOLDER: " ",
}


def placeholder_id(parent_id: str, kind: PlaceholderKind) -> str:
    """Id of the synthetic child injected under parent_id."""
    return f"{parent_id}{kind.value}"


def is_placeholder_id(node_id: str) -> bool:
    """True if node_id looks like an injected placeholder id."""
    return any(node_id.endswith(kind.value) for kind in PlaceholderKind)


def make_placeholder(parent_id: str,
                     kind: PlaceholderKind,
                     error: Optional[str] = None) -> TreeNode:
    """Build the synthetic child for a parent in the given state."""
    if kind is PlaceholderKind.LOADING:
        state = NodeState(is_loading=True)
    elif kind is PlaceholderKind.ERROR:
        state = NodeState(error=error)
    else:
        state = NodeState(is_placeholder=True)
    return TreeNode(
        id=placeholder_id(parent_id, kind),
        label=PLACEHOLDER_LABELS[kind],
        children=(),
        children_count=0,
        state=state,
    )


def enhance_items_with_states(items: Sequence[TreeNode],
                              loading_items: Optional[Iterable[str]] = None,
                              error_items: Optional[Mapping[str, str]] = None,
                              children_count: Optional[Callable[[TreeNode], int]] = None
                              ) -> Tuple[TreeNode, ...]:
    """Attach loading/error/placeholder decorations to a snapshot.

    Args:
        items: Snapshot to decorate
        loading_items: Ids with a fetch in flight
        error_items: Id -> message of the last failed fetch
        children_count: Child count source, usually the provider's
            children_count(); defaults to each node's own hint

    Returns:
        Decorated snapshot. Subtrees that needed no decoration are the
        same objects as in the input.
    """
    loading = frozenset(loading_items or ())
    errors = error_items or {}
    count_of = children_count or default_children_count
    return tuple(_enhance(item, loading, errors, count_of) for item in items)


def _enhance(item: TreeNode,
             loading: frozenset,
             errors: Mapping[str, str],
             count_of: Callable[[TreeNode], int]) -> TreeNode:
    children = item.children
    if children:
        enhanced_children = tuple(_enhance(child, loading, errors, count_of) for child in children)
        if all(new is old for new, old in zip(enhanced_children, children)):
            enhanced_children = children
    else:
        enhanced_children = children
    children_changed = enhanced_children is not children

    count = count_of(item)
    is_loading = item.id in loading
    error = errors.get(item.id)
    needs_placeholder = count != 0 and not item.children

    if not (is_loading or error or needs_placeholder or children_changed):
        return item

    state = NodeState(
        is_loading=is_loading,
        error=error,
        has_children=count != 0,
        children_count=count,
    )

    if is_loading:
        enhanced_children = (make_placeholder(item.id, PlaceholderKind.LOADING),)
    elif error:
        enhanced_children = (make_placeholder(item.id, PlaceholderKind.ERROR, error),)
    elif needs_placeholder:
        enhanced_children = (make_placeholder(item.id, PlaceholderKind.PLACEHOLDER),)

    return TreeNode(
        id=item.id,
        label=item.label,
        children=enhanced_children,
        children_count=item.children_count,
        extra=item.extra,
        state=state,
    )
