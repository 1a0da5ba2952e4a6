"""
CoRunner Tests — Priority Heap
================================
Validates:
- Extraction order follows the comparator for any insertion order
- Ties come out in insertion order
- peek / clear / len / empty extraction
- Swapping the comparator re-establishes heap order
"""

from __future__ import annotations

import random
from dataclasses import dataclass

import pytest

from corunner.scheduler.adapters import compare_by
from corunner.scheduler.heap import PriorityHeap


@dataclass
class Item:
    priority: int
    label: str = ""


def ascending(a: int, b: int) -> int:
    return (a > b) - (a < b)


def drain(heap: PriorityHeap) -> list:
    out = []
    while heap:
        out.append(heap.extract_min())
    return out


class TestHeapOrdering:
    """Verify extraction order."""

    @pytest.mark.parametrize("seed", range(10))
    def test_random_insertions_come_out_sorted(self, seed):
        """Any insertion order is extracted in non-decreasing order."""
        rng = random.Random(seed)
        values = [rng.randint(-50, 50) for _ in range(rng.randint(0, 200))]
        heap = PriorityHeap(ascending)
        for v in values:
            heap.insert(v)

        assert drain(heap) == sorted(values)

    def test_interleaved_insert_and_extract(self):
        """Heap order holds when inserts and extractions interleave."""
        heap = PriorityHeap(ascending)
        for v in (5, 3, 8):
            heap.insert(v)
        assert heap.extract_min() == 3
        heap.insert(1)
        heap.insert(9)
        assert heap.extract_min() == 1
        assert drain(heap) == [5, 8, 9]

    def test_key_function_feeds_comparator(self):
        """The comparator sees key(item), not the item itself."""
        heap = PriorityHeap(compare_by(lambda it: it.priority), key=lambda w: w["item"])
        for p in (3, 1, 2):
            heap.insert({"item": Item(p)})

        assert [w["item"].priority for w in drain(heap)] == [1, 2, 3]

    def test_ties_are_fifo(self):
        """Equal-priority items come out in insertion order."""
        heap = PriorityHeap(compare_by(lambda it: it.priority))
        items = [Item(1, "a"), Item(0, "x"), Item(1, "b"), Item(1, "c")]
        for it in items:
            heap.insert(it)

        assert [it.label for it in drain(heap)] == ["x", "a", "b", "c"]

    def test_reverse_comparator(self):
        """compare_by(reverse=True) yields the largest key first."""
        heap = PriorityHeap(compare_by(lambda it: it.priority, reverse=True))
        for p in (2, 7, 4):
            heap.insert(Item(p))

        assert [it.priority for it in drain(heap)] == [7, 4, 2]


class TestHeapOperations:
    """Verify container operations."""

    def test_extract_from_empty_raises(self):
        heap = PriorityHeap(ascending)
        with pytest.raises(IndexError):
            heap.extract_min()

    def test_peek_does_not_remove(self):
        heap = PriorityHeap(ascending)
        assert heap.peek() is None
        heap.insert(4)
        heap.insert(2)

        assert heap.peek() == 2
        assert len(heap) == 2

    def test_clear(self):
        heap = PriorityHeap(ascending)
        for v in range(5):
            heap.insert(v)

        heap.clear()
        assert len(heap) == 0
        assert not heap
        assert heap.peek() is None

    def test_iter_is_unordered_snapshot(self):
        heap = PriorityHeap(ascending)
        for v in (3, 1, 2):
            heap.insert(v)

        assert sorted(heap) == [1, 2, 3]
        assert len(heap) == 3

    def test_set_comparator_reorders(self):
        """Swapping the comparator restores heap order under the new ranking."""
        heap = PriorityHeap(ascending)
        for v in (4, 9, 1, 6):
            heap.insert(v)

        heap.set_comparator(lambda a, b: ascending(b, a))
        assert heap.comparator is not ascending
        assert drain(heap) == [9, 6, 4, 1]
