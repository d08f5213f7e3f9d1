#!/usr/bin/env python3
"""
Lazy filesystem browser showing how a tree view drives LazyTreeLib.

This example demonstrates:
- A fetch provider that lists directories on demand
- Expanding nodes the way a UI would (expansion-list diffs)
- Rendering the decorated snapshot with loading/placeholder children
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from lazytreelib import FetchProvider, LazyTreeController, TreeNode


class DirectoryProvider(FetchProvider):
    """Lists the entries of a directory; node ids are absolute paths."""

    def __init__(self, root: Path):
        self.root = root

    async def list_children(self, parent_id=None):
        path = self.root if parent_id is None else Path(parent_id)
        return await asyncio.to_thread(self._scan, path)

    def _scan(self, path: Path):
        children = []
        with os.scandir(path) as entries:
            for entry in sorted(entries, key=lambda e: e.name):
                is_dir = entry.is_dir(follow_symlinks=False)
                children.append(TreeNode(
                    id=entry.path,
                    label=entry.name + ("/" if is_dir else ""),
                    children_count=1 if is_dir else 0,
                ))
        return children


def render(items, indent=0):
    for node in items:
        marker = ""
        if node.state is not None and node.state.is_loading:
            marker = "  (loading)"
        elif node.state is not None and node.state.error:
            marker = f"  (error: {node.state.error})"
        print("  " * indent + (node.label or "...") + marker)
        if node.children:
            render(node.children, indent + 1)


async def main():
    """Load the root, expand the first two directories, print the tree."""
    root = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()
    controller = LazyTreeController(DirectoryProvider(root))

    await controller.ensure_root_loaded()
    directories = [node.id for node in controller.items if node.children_count][:2]

    tasks = controller.handle_expanded_items_change([], directories)
    render(controller.decorated_items)   # shows loading placeholders
    await asyncio.gather(*tasks)

    print("-" * 50)
    render(controller.decorated_items)
    print(f"\nStats: {controller.get_stats()}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("LazyTreeLib - Filesystem Browser Example")
    print("=" * 50)
    asyncio.run(main())
