"""
CoRunner — Comparator-Ordered Priority Heap
=============================================
Array-backed binary min-heap whose order comes from a caller comparator.

Usage:
    heap = PriorityHeap(comparator=compare_by(lambda t: t.priority))
    heap.insert(record)
    top = heap.extract_min()
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Generic, Iterator, TypeVar

from corunner.scheduler.contracts import Comparator

T = TypeVar("T")


@dataclass(slots=True)
class _HeapEntry(Generic[T]):
    """
    Heap slot.  ``<`` asks the comparator first; ties fall back to
    insertion order so equal-priority items come out FIFO.
    """

    item: T
    key: object
    insertion_order: int
    comparator: Comparator = field(repr=False)

    def __lt__(self, other: _HeapEntry[T]) -> bool:
        ranked = self.comparator(self.key, other.key)
        if ranked:
            return ranked < 0
        return self.insertion_order < other.insertion_order


class PriorityHeap(Generic[T]):
    """
    Min-heap of items ranked by ``comparator(key(a), key(b))``.

    ``key`` extracts the value the comparator sees; for task records this
    is the submitted task, so comparators never see scheduler internals.
    The comparator must be a total preorder and must not change the
    ranking of an item that is already queued.

    Thread safety: NOT thread-safe.  Owned by a single runner.
    """

    def __init__(self, comparator: Comparator, key=None) -> None:
        self._comparator = comparator
        self._key = key if key is not None else (lambda item: item)
        self._entries: list[_HeapEntry[T]] = []
        self._counter: int = 0

    @property
    def comparator(self) -> Comparator:
        return self._comparator

    def insert(self, item: T) -> None:
        """Append ``item`` and sift it up.  O(log n)."""
        entry = _HeapEntry(
            item=item,
            key=self._key(item),
            insertion_order=self._counter,
            comparator=self._comparator,
        )
        self._counter += 1
        heapq.heappush(self._entries, entry)

    def extract_min(self) -> T:
        """
        Remove and return the highest-priority item.  O(log n).

        Raises ``IndexError`` if the heap is empty.
        """
        if not self._entries:
            raise IndexError("extract_min from an empty heap")
        return heapq.heappop(self._entries).item

    def peek(self) -> T | None:
        """Return the highest-priority item without removing it, or ``None``."""
        if not self._entries:
            return None
        return self._entries[0].item

    def set_comparator(self, comparator: Comparator) -> None:
        """Swap the ranking function and restore the heap property.  O(n)."""
        self._comparator = comparator
        for entry in self._entries:
            entry.comparator = comparator
        heapq.heapify(self._entries)

    def clear(self) -> None:
        """Drop every queued item."""
        self._entries.clear()
        self._counter = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[T]:
        """Iterate over a snapshot of the items in storage (not priority) order."""
        return iter([entry.item for entry in self._entries])
