"""Pure functions over immutable tree snapshots.

A snapshot is a sequence of root-level TreeNodes. None of these functions
mutate their input: updates rebuild only the nodes on the path to the
change and share everything else with the previous snapshot.
"""

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .core.node import NodeLike, TreeNode, as_nodes


def find_by_id(items: Sequence[TreeNode], node_id: str) -> Optional[TreeNode]:
    """Depth-first search for a node by id.

    Args:
        items: Snapshot to search
        node_id: Id to look for

    Returns:
        The first matching node, or None if the id is nowhere in the tree
    """
    for item in items:
        if item.id == node_id:
            return item
        if item.children:
            found = find_by_id(item.children, node_id)
            if found is not None:
                return found
    return None


def replace_children(items: Sequence[TreeNode],
                     parent_id: str,
                     children: Iterable[NodeLike]) -> Tuple[TreeNode, ...]:
    """Return a snapshot where parent_id's children are replaced.

    Every ancestor of the updated node is a new object; all other
    subtrees are shared with the input. If parent_id is not in the tree
    the input is returned unchanged.

    Args:
        items: Current snapshot
        parent_id: Node whose children are replaced
        children: New children

    Returns:
        New snapshot tuple (or the input itself when nothing matched)
    """
    new_children = as_nodes(children)
    updated = _replace_in(items, parent_id, new_children)
    if updated is None:
        return items if isinstance(items, tuple) else tuple(items)
    return updated


def _replace_in(items: Sequence[TreeNode],
                parent_id: str,
                children: Tuple[TreeNode, ...]) -> Optional[Tuple[TreeNode, ...]]:
    # None signals "not found in this branch" so callers can keep sharing
    for index, item in enumerate(items):
        if item.id == parent_id:
            replacement = item.with_children(children)
        elif item.children:
            nested = _replace_in(item.children, parent_id, children)
            if nested is None:
                continue
            replacement = item.with_children(nested)
        else:
            continue
        return tuple(items[:index]) + (replacement,) + tuple(items[index + 1:])
    return None


def iter_nodes(items: Sequence[TreeNode]) -> Iterator[TreeNode]:
    """Yield every node depth-first, parents before their children."""
    for item in items:
        yield item
        if item.children:
            yield from iter_nodes(item.children)


def flatten_tree(items: Sequence[TreeNode]) -> List[TreeNode]:
    """Flatten a snapshot into a list in depth-first pre-order."""
    return list(iter_nodes(items))


def count_nodes(items: Sequence[TreeNode]) -> int:
    """Count every node in the snapshot."""
    return sum(1 for _ in iter_nodes(items))


def get_parent_ids(items: Sequence[TreeNode], target_id: str) -> List[str]:
    """Ids of all ancestors of target_id, from root to immediate parent.

    Returns an empty list when target_id is a root-level node or is not
    in the tree.
    """
    path = _ancestor_path(items, target_id, [])
    return path if path is not None else []


def _ancestor_path(items: Sequence[TreeNode],
                   target_id: str,
                   current: List[str]) -> Optional[List[str]]:
    for item in items:
        if item.id == target_id:
            return list(current)
        if item.children:
            found = _ancestor_path(item.children, target_id, current + [item.id])
            if found is not None:
                return found
    return None
