"""Priority waiting list; higher priority (older patients by default) first."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .models import Patient


@dataclass(order=True)
class WaitingEntry:
    """Heap entry; ``sort_key`` orders by descending priority."""

    sort_key: tuple = field(init=False, repr=False)
    priority: int = field(compare=False)
    sequence: int = field(compare=False)
    patient: Patient = field(compare=False)

    def __post_init__(self) -> None:
        # The sequence number only keeps tuples comparable; callers must not
        # depend on the resulting order among equal priorities.
        self.sort_key = (-self.priority, self.sequence)


class WaitingList:
    """Binary heap of patients awaiting service."""

    def __init__(self) -> None:
        self._heap: List[WaitingEntry] = []
        self._counter: Iterator[int] = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def enqueue(self, patient: Patient, priority: Optional[int] = None) -> WaitingEntry:
        if priority is None:
            priority = patient.age
        entry = WaitingEntry(priority=priority, sequence=next(self._counter), patient=patient)
        heapq.heappush(self._heap, entry)
        return entry

    def dequeue(self) -> Optional[Patient]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap).patient

    def peek(self) -> Optional[Patient]:
        if not self._heap:
            return None
        return self._heap[0].patient

    def size(self) -> int:
        return len(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    def all_waiting(self) -> List[Patient]:
        """Patients currently waiting, in heap order (not sorted)."""

        return [entry.patient for entry in self._heap]


__all__ = ["WaitingEntry", "WaitingList"]
