"""Core value types and collaborator interfaces for lazy tree loading."""

from .node import NodeState, TreeNode, NodeLike, as_node, as_nodes
from .provider import FetchProvider, CallableFetchProvider, default_children_count

__all__ = [
    # Nodes
    'TreeNode',
    'NodeState',
    'NodeLike',
    'as_node',
    'as_nodes',
    # Providers
    'FetchProvider',
    'CallableFetchProvider',
    'default_children_count',
]
