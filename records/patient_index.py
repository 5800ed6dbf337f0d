"""Ordered patient store backed by an unbalanced binary search tree.

Nodes live in an arena (a plain list) and refer to their children by slot
index instead of object references. Deleting a node with two children moves
the in-order successor's record into that node and then splices the
successor out, so no slot is ever reachable from two parents.

The tree is intentionally not self-balancing: its height depends only on
insertion order. Every walk is iterative so a degenerate tree built from
ascending identifiers (the common case for bulk imports) does not run into
the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .models import Patient

logger = logging.getLogger(__name__)

_NIL = -1


class RecordStoreError(RuntimeError):
    """Base exception for misuse of the record storage structures."""


class DuplicatePatientError(RecordStoreError):
    """Raised when the index is asked to store an identifier twice."""


@dataclass
class _Node:
    patient: Optional[Patient]
    left: int = _NIL
    right: int = _NIL


class PatientIndex:
    """Binary search tree of patients keyed by ``patient_id``."""

    def __init__(self) -> None:
        self._nodes: List[_Node] = []
        self._free: List[int] = []
        self._root: int = _NIL
        self._count: int = 0

    def __len__(self) -> int:
        return self._count

    def __contains__(self, patient_id: object) -> bool:
        return isinstance(patient_id, int) and self.search(patient_id) is not None

    def is_empty(self) -> bool:
        return self._root == _NIL

    def insert(self, patient: Patient) -> None:
        """Place ``patient`` in the tree by comparing identifiers.

        Callers are expected to check for an existing identifier first; the
        facade does. Hitting an equal key here is a programming error.
        """

        key = patient.patient_id
        parent = _NIL
        current = self._root
        while current != _NIL:
            node_key = self._key(current)
            if key == node_key:
                raise DuplicatePatientError(f"Patient {key} is already indexed")
            parent = current
            current = self._nodes[current].left if key < node_key else self._nodes[current].right

        slot = self._allocate(patient)
        if parent == _NIL:
            self._root = slot
        elif key < self._key(parent):
            self._nodes[parent].left = slot
        else:
            self._nodes[parent].right = slot
        self._count += 1

    def search(self, patient_id: int) -> Optional[Patient]:
        slot, _ = self._locate(patient_id)
        if slot == _NIL:
            return None
        return self._nodes[slot].patient

    def delete(self, patient_id: int) -> bool:
        """Remove the patient with ``patient_id``; return ``False`` if absent."""

        slot, parent = self._locate(patient_id)
        if slot == _NIL:
            logger.debug("Delete requested for unknown patient %s", patient_id)
            return False

        node = self._nodes[slot]
        if node.left != _NIL and node.right != _NIL:
            successor_parent = slot
            successor = node.right
            while self._nodes[successor].left != _NIL:
                successor_parent = successor
                successor = self._nodes[successor].left

            node.patient = self._nodes[successor].patient
            self._replace_child(successor_parent, successor, self._nodes[successor].right)
            self._release(successor)
        else:
            child = node.left if node.left != _NIL else node.right
            self._replace_child(parent, slot, child)
            self._release(slot)

        self._count -= 1
        return True

    def all_patients(self) -> List[Patient]:
        """Return every patient in ascending identifier order."""

        ordered: List[Patient] = []
        stack: List[int] = []
        current = self._root
        while stack or current != _NIL:
            while current != _NIL:
                stack.append(current)
                current = self._nodes[current].left
            current = stack.pop()
            ordered.append(self._nodes[current].patient)
            current = self._nodes[current].right
        return ordered

    def height(self) -> int:
        """Number of nodes on the longest root-to-leaf path."""

        if self._root == _NIL:
            return 0
        tallest = 0
        stack: List[Tuple[int, int]] = [(self._root, 1)]
        while stack:
            slot, depth = stack.pop()
            tallest = max(tallest, depth)
            node = self._nodes[slot]
            for child in (node.left, node.right):
                if child != _NIL:
                    stack.append((child, depth + 1))
        return tallest

    def _key(self, slot: int) -> int:
        return self._nodes[slot].patient.patient_id

    def _locate(self, patient_id: int) -> Tuple[int, int]:
        parent = _NIL
        current = self._root
        while current != _NIL:
            node_key = self._key(current)
            if patient_id == node_key:
                return current, parent
            parent = current
            current = self._nodes[current].left if patient_id < node_key else self._nodes[current].right
        return _NIL, parent

    def _replace_child(self, parent: int, old: int, new: int) -> None:
        if parent == _NIL:
            self._root = new
        elif self._nodes[parent].left == old:
            self._nodes[parent].left = new
        else:
            self._nodes[parent].right = new

    def _allocate(self, patient: Patient) -> int:
        if self._free:
            slot = self._free.pop()
            self._nodes[slot] = _Node(patient)
            return slot
        self._nodes.append(_Node(patient))
        return len(self._nodes) - 1

    def _release(self, slot: int) -> None:
        self._nodes[slot] = _Node(None)
        self._free.append(slot)


__all__ = ["DuplicatePatientError", "PatientIndex", "RecordStoreError"]
