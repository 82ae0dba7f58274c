"""
IdSequence -- explicit per-collection identifier counter.

Responsibility:
    Hands out unique, strictly increasing integer ids for one collection
    (warehouses, batches, suppliers, medicines, each movement stream).

Architecture position:
    Kernel > Domain -- pure, in-memory.  The owning aggregate serializes
    access; the sequence itself holds no lock.

Invariants enforced:
    - Monotonicity: ``next()`` never returns a value it returned before.
    - Scanning the collection for its last element is never used to derive
      the next id; the counter is the sole source of truth once seeded.
    - Ids of drained or deleted entities are never reused.
"""

from collections.abc import Iterable


class IdSequence:
    """Monotonic id counter, seeded once from the ids already in use."""

    __slots__ = ("_next",)

    def __init__(self, start: int = 1):
        if start < 1:
            raise ValueError(f"IdSequence must start at 1 or above, got {start}")
        self._next = start

    @classmethod
    def after(cls, existing_ids: Iterable[int]) -> "IdSequence":
        """Seed a sequence at ``max(existing_ids) + 1`` (or 1 when empty)."""
        return cls(max(existing_ids, default=0) + 1)

    def next(self) -> int:
        """Return the next id and advance."""
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        """Return the id the next call to ``next()`` will hand out."""
        return self._next

    def __repr__(self) -> str:
        return f"IdSequence(next={self._next})"
