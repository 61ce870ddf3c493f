"""Max-priority dispatch over intersections with keyed remove and update."""

from __future__ import annotations

import itertools
from typing import Callable, Dict, Generic, Hashable, Iterator, List, Optional, TypeVar

from .controller import IntersectionController

T = TypeVar("T")


def priority_score(intersection: IntersectionController, emergency_offset: int = 1000) -> int:
    """Dispatch score: queued vehicles, lifted by ``emergency_offset`` on emergencies."""

    total = intersection.total_vehicles()
    if intersection.has_emergency:
        return emergency_offset + total
    return total


class PriorityDispatch(Generic[T]):
    """Array backed binary max-heap ordered by a live score.

    Scores are never cached: ``score`` is evaluated on the items every time
    two entries are compared, so callers must :meth:`update` an item after
    mutating it.  Equal scores are ordered by insertion sequence (earlier
    first).  A reverse index from key to slot keeps :meth:`remove` and
    :meth:`update` at ``O(log n)`` instead of a linear scan.
    """

    def __init__(
        self,
        score: Callable[[T], float] = priority_score,  # type: ignore[assignment]
        key: Callable[[T], Hashable] = lambda item: item.id,  # type: ignore[attr-defined]
    ) -> None:
        self.score = score
        self.key = key
        self._heap: List[T] = []
        self._slots: Dict[Hashable, int] = {}
        self._sequence: Dict[Hashable, int] = {}
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._slots

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._heap))

    def is_empty(self) -> bool:
        return not self._heap

    def _higher(self, first: int, second: int) -> bool:
        a = self._heap[first]
        b = self._heap[second]
        score_a = self.score(a)
        score_b = self.score(b)
        if score_a != score_b:
            return score_a > score_b
        return self._sequence[self.key(a)] < self._sequence[self.key(b)]

    def _swap(self, first: int, second: int) -> None:
        heap = self._heap
        heap[first], heap[second] = heap[second], heap[first]
        self._slots[self.key(heap[first])] = first
        self._slots[self.key(heap[second])] = second

    def _sift_up(self, index: int) -> None:
        while index > 0:
            parent = (index - 1) // 2
            if not self._higher(index, parent):
                break
            self._swap(index, parent)
            index = parent

    def _sift_down(self, index: int) -> None:
        size = len(self._heap)
        while True:
            left = 2 * index + 1
            if left >= size:
                break
            larger = left
            right = left + 1
            if right < size and self._higher(right, left):
                larger = right
            if not self._higher(larger, index):
                break
            self._swap(index, larger)
            index = larger

    def push(self, item: T) -> None:
        """Insert ``item``; an item already present is re-positioned instead."""

        key = self.key(item)
        if key in self._slots:
            self.remove(key)
        self._heap.append(item)
        self._slots[key] = len(self._heap) - 1
        self._sequence[key] = next(self._counter)
        self._sift_up(len(self._heap) - 1)

    def peek(self) -> Optional[T]:
        if not self._heap:
            return None
        return self._heap[0]

    def pop_max(self) -> Optional[T]:
        """Remove and return the highest scoring item, ``None`` when empty."""

        if not self._heap:
            return None
        top = self._heap[0]
        self._detach(0)
        return top

    def remove(self, key: Hashable) -> bool:
        """Drop the entry stored under ``key``; ``False`` if it is absent."""

        index = self._slots.get(key)
        if index is None:
            return False
        self._detach(index)
        return True

    def update(self, item: T) -> None:
        """Re-order ``item`` after its score changed (remove then insert)."""

        self.remove(self.key(item))
        self.push(item)

    def _detach(self, index: int) -> None:
        last = len(self._heap) - 1
        if index != last:
            self._swap(index, last)
        item = self._heap.pop()
        key = self.key(item)
        del self._slots[key]
        del self._sequence[key]
        if index < len(self._heap):
            if index > 0 and self._higher(index, (index - 1) // 2):
                self._sift_up(index)
            else:
                self._sift_down(index)
