"""Test fixtures for lazytreelib consumers.

These fixtures give tests deterministic control over time and over the
fetch provider, without reaching into controller internals.
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.node import NodeLike, TreeNode
from ..core.provider import FetchProvider


class FakeClock:
    """Manually advanced clock, usable wherever a ``clock`` callable is accepted.

    Example:
        clock = FakeClock()
        controller = LazyTreeController(provider, clock=clock)
        clock.advance(31.0)
    """

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        """Move time forward and return the new time."""
        self.now += seconds
        return self.now

    def set(self, now: float) -> None:
        self.now = now


class RecordingFetchProvider(FetchProvider):
    """Dict-backed fetch provider that records every call.

    Children are looked up by parent id (None for the root level).
    Individual ids can be made to fail, or held in flight until the test
    releases them.

    Example:
        provider = RecordingFetchProvider({
            None: [{'id': 'a', 'label': 'A', 'childrenCount': 1}],
            'a': [{'id': 'a1', 'label': 'A1', 'childrenCount': 0}],
        })
        provider.hold('a')        # next fetch of 'a' waits
        ...
        provider.release('a')
    """

    def __init__(self,
                 children: Optional[Mapping[Optional[str], Sequence[NodeLike]]] = None,
                 counts: Optional[Mapping[str, int]] = None):
        """
        Args:
            children: Parent id -> children returned for it
            counts: Optional id -> children count overriding node hints
        """
        self.children: Dict[Optional[str], List[NodeLike]] = {
            key: list(value) for key, value in (children or {}).items()
        }
        self.counts: Dict[str, int] = dict(counts or {})
        self.calls: List[Optional[str]] = []
        self.count_calls: List[str] = []
        self._failures: Dict[Optional[str], BaseException] = {}
        self._gates: Dict[Optional[str], asyncio.Event] = {}

    async def list_children(self, parent_id: Optional[str] = None) -> Sequence[NodeLike]:
        self.calls.append(parent_id)

        gate = self._gates.get(parent_id)
        if gate is not None:
            await gate.wait()

        failure = self._failures.get(parent_id)
        if failure is not None:
            raise failure
        return list(self.children.get(parent_id, []))

    def children_count(self, node: TreeNode) -> int:
        self.count_calls.append(node.id)
        if node.id in self.counts:
            return self.counts[node.id]
        return super().children_count(node)

    def fail(self, parent_id: Optional[str], error: Any = "boom") -> None:
        """Make fetches of parent_id raise (a string becomes a RuntimeError)."""
        if isinstance(error, str):
            error = RuntimeError(error)
        self._failures[parent_id] = error

    def succeed(self, parent_id: Optional[str]) -> None:
        """Undo fail() for parent_id."""
        self._failures.pop(parent_id, None)

    def hold(self, parent_id: Optional[str]) -> None:
        """Block fetches of parent_id until release() is called."""
        self._gates[parent_id] = asyncio.Event()

    def release(self, parent_id: Optional[str]) -> None:
        """Let held fetches of parent_id complete."""
        gate = self._gates.pop(parent_id, None)
        if gate is not None:
            gate.set()

    def calls_for(self, parent_id: Optional[str]) -> int:
        """Number of list_children calls made for parent_id."""
        return sum(1 for call in self.calls if call == parent_id)

    def __repr__(self) -> str:
        return f"RecordingFetchProvider(parents={len(self.children)}, calls={len(self.calls)})"
