"""LazyTreeLib - Lazy loading controller for tree-shaped UIs.

LazyTreeLib lets a tree view display data that is too large or too
expensive to load eagerly: each node's children are fetched on demand
when the node is expanded, cached with a time-to-live, and failures are
tracked per node with retry support.

Typical use:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from lazytreelib import LazyTreeController

    controller = LazyTreeController(provider=my_provider)
    await controller.load_children()            # root level
    controller.handle_item_expansion(item_id)   # on expand
    render(controller.decorated_items)
━━━━━━━━━━━━━━━━━━━━━━━━━━

The controller knows nothing about rendering; any presentation layer that
can forward expansion events and draw a tree snapshot can drive it.
"""

__version__ = "0.1.0"

from .core import (
    TreeNode,
    NodeState,
    FetchProvider,
    CallableFetchProvider,
    default_children_count,
)
from .cache import TTLCacheStore, CacheEntry, DataSourceCache, cache_key_for
from .config import ControllerConfig, PlaceholderKind
from .controller import LazyTreeController
from .enhance import enhance_items_with_states, is_placeholder_id, placeholder_id
from .error_policies import (
    ErrorPolicy,
    LogErrorsPolicy,
    CollectErrorsPolicy,
    RaiseErrorsPolicy,
)
from .errors import LazyTreeError, FetchError, ConfigurationError
from .tree import (
    find_by_id,
    replace_children,
    flatten_tree,
    get_parent_ids,
    iter_nodes,
    count_nodes,
)

__all__ = [
    "__version__",
    # Nodes and providers
    "TreeNode",
    "NodeState",
    "FetchProvider",
    "CallableFetchProvider",
    "default_children_count",
    # Cache
    "TTLCacheStore",
    "CacheEntry",
    "DataSourceCache",
    "cache_key_for",
    # Configuration
    "ControllerConfig",
    "PlaceholderKind",
    # Controller
    "LazyTreeController",
    # Enhancement
    "enhance_items_with_states",
    "is_placeholder_id",
    "placeholder_id",
    # Error handling
    "ErrorPolicy",
    "LogErrorsPolicy",
    "CollectErrorsPolicy",
    "RaiseErrorsPolicy",
    "LazyTreeError",
    "FetchError",
    "ConfigurationError",
    # Tree utilities
    "find_by_id",
    "replace_children",
    "flatten_tree",
    "get_parent_ids",
    "iter_nodes",
    "count_nodes",
]
