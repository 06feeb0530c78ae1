"""
Result Accumulator
Session-wide, thread-safe, first-seen-ordered set of IMEI strings
"""

import threading
from typing import Iterable, Iterator, List, Tuple

from ..matching import is_imei


class IMEIAccumulator:
    """
    Deduplicating store for validated IMEIs

    Membership is exact string equality. ``view()`` lists members in the order
    they were first added. All mutations go through one lock, so concurrent
    pipeline runs never lose or duplicate an entry.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # dict keeps insertion order; values unused
        self._items = {}

    def add(self, candidate: str) -> bool:
        """
        Add one IMEI

        Returns:
            True if the value was not present before

        Raises:
            ValueError: if ``candidate`` is not a 15-digit string
        """
        if not is_imei(candidate):
            raise ValueError(f"Not an IMEI: {candidate!r}")
        with self._lock:
            if candidate in self._items:
                return False
            self._items[candidate] = None
            return True

    def add_all(self, candidates: Iterable[str]) -> List[str]:
        """Add a batch atomically; returns the newly added values in order."""
        batch = list(candidates)
        for candidate in batch:
            if not is_imei(candidate):
                raise ValueError(f"Not an IMEI: {candidate!r}")

        added = []
        with self._lock:
            for candidate in batch:
                if candidate not in self._items:
                    self._items[candidate] = None
                    added.append(candidate)
        return added

    def view(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._items)

    def reset(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self):
        with self._lock:
            return len(self._items)

    def __contains__(self, candidate) -> bool:
        with self._lock:
            return candidate in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self.view())

    def __repr__(self):
        return f"IMEIAccumulator(size={len(self)})"
