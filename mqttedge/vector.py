"""A fixed-capacity vector with room at both ends, safe across threads."""

from __future__ import annotations

import threading
from collections.abc import Iterator

DEFAULT_CAPACITY = 32


class VectorError(Exception):
    """An operation on a BoundedVector failed."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


def _overflow(message: str) -> VectorError:
    return VectorError(message, "overflow")


class BoundedVector:
    """Entries kept in a fixed array; a quarter of it is reserved at the head."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._cap = capacity
        self._slots: list[object] = [None] * capacity
        self._low = capacity // 4
        self._len = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[object]:
        with self._lock:
            items = self._slots[self._low : self._low + self._len]
        return iter(items)

    def __repr__(self) -> str:
        return f"BoundedVector({list(self)!r}, capacity={self._cap})"

    def capacity(self) -> int:
        """Size of the backing array."""
        return self._cap

    def append(self, entry: object) -> None:
        """Add ``entry`` at the tail."""
        with self._lock:
            if self._low + self._len >= self._cap:
                raise _overflow("no room at the tail")
            self._slots[self._low + self._len] = entry
            self._len += 1

    def insert(self, entry: object, pos: int) -> None:
        """Insert ``entry`` before position ``pos``; past the end it is appended."""
        with self._lock:
            if self._low + self._len + 1 > self._cap:
                raise _overflow("no room to insert")
            if pos < 0:
                raise _overflow(f"position {pos} out of range")
            if pos > self._len:
                self.append(entry)
                return
            start = self._low + pos
            end = self._low + self._len
            self._slots[start + 1 : end + 1] = self._slots[start:end]
            self._slots[start] = entry
            self._len += 1

    def delete(self, pos: int) -> object:
        """Remove and return the entry at ``pos``."""
        with self._lock:
            if pos < 0 or pos > self._len - 1:
                raise _overflow(f"position {pos} out of range")
            start = self._low + pos
            end = self._low + self._len
            entry = self._slots[start]
            self._slots[start : end - 1] = self._slots[start + 1 : end]
            self._slots[end - 1] = None
            self._len -= 1
            return entry

    def push_head(self, entry: object) -> None:
        """Add ``entry`` in front of the first one."""
        with self._lock:
            if self._low == 0:
                raise _overflow("no room at the head")
            self._low -= 1
            self._slots[self._low] = entry
            self._len += 1

    def pop_head(self) -> object:
        """Remove and return the first entry."""
        with self._lock:
            if self._len == 0:
                raise VectorError("vector is empty", "empty")
            entry = self._slots[self._low]
            self._slots[self._low] = None
            self._low += 1
            self._len -= 1
            return entry

    def pop_tail(self) -> object:
        """Remove and return the last entry."""
        with self._lock:
            if self._len == 0:
                raise VectorError("vector is empty", "empty")
            pos = self._low + self._len - 1
            entry = self._slots[pos]
            self._slots[pos] = None
            self._len -= 1
            return entry

    def get(self, idx: int) -> object:
        """Entry at position ``idx``."""
        with self._lock:
            if idx < 0 or idx >= self._len:
                raise _overflow(f"index {idx} out of range")
            return self._slots[self._low + idx]

    def index(self, entry: object) -> int:
        """Position of the first entry that is or equals ``entry``."""
        for position, item in enumerate(self):
            if item is entry or item == entry:
                return position
        raise VectorError("entry not found", "empty")

    def extend(self, other: BoundedVector | None) -> None:
        """Append every entry of ``other`` at the tail."""
        if other is None:
            return
        items = list(other)
        with self._lock:
            if self._low + self._len + len(items) > self._cap:
                raise _overflow("not enough room to extend")
            start = self._low + self._len
            self._slots[start : start + len(items)] = items
            self._len += len(items)