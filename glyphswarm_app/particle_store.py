"""
Flat particle storage.

All particles live back-to-back in a single float32 buffer, one record of
RECORD_WIDTH values per particle. Record i occupies exactly
values[i * RECORD_WIDTH:(i + 1) * RECORD_WIDTH]; records are addressed by slot
index only, never through per-particle objects.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import numpy as np

PARTICLE_FIELDS = ("x", "y", "vx", "vy", "bx", "by")
RECORD_WIDTH = len(PARTICLE_FIELDS)


class ParticleStore:
    """
    Typed arena of fixed-width particle records.

    `values` is the flat buffer, `records` a (count, RECORD_WIDTH) view of
    the same memory. Both are views: writing through them writes the store.
    """

    def __init__(self, count: int = 0, dtype: Any = np.float32) -> None:
        count = int(count)
        if count < 0:
            raise ValueError(f"particle count must be >= 0, got {count}")
        self._count = count
        self._values = np.zeros(count * RECORD_WIDTH, dtype=dtype)
        self._records = self._values.reshape((count, RECORD_WIDTH))

    @classmethod
    def allocate(cls, count: int) -> "ParticleStore":
        """Create a zero-initialized store sized for *count* records."""
        return cls(count)

    @classmethod
    def from_records(cls, records: Any) -> "ParticleStore":
        """Create a store holding a copy of an (N, RECORD_WIDTH) array-like."""
        arr = np.asarray(records, dtype=np.float32)
        if arr.size == 0:
            return cls(0)
        arr = arr.reshape((-1, RECORD_WIDTH))
        store = cls(arr.shape[0])
        store._records[:] = arr
        return store

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------
    @property
    def count(self) -> int:
        return self._count

    def __len__(self) -> int:
        return self._count

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def records(self) -> np.ndarray:
        return self._records

    def column(self, name: str) -> np.ndarray:
        """Return a strided view over one field of every record."""
        try:
            j = PARTICLE_FIELDS.index(name)
        except ValueError:
            raise KeyError(f"unknown particle field {name!r}") from None
        return self._records[:, j]

    # ------------------------------------------------------------------
    # Record access
    # ------------------------------------------------------------------
    def _check_index(self, i: int) -> int:
        i = int(i)
        if i < 0 or i >= self._count:
            raise IndexError(f"particle index {i} out of range [0, {self._count})")
        return i

    def read_record(self, i: int) -> np.ndarray:
        """Return the RECORD_WIDTH values of slot *i* as a view (no copy)."""
        i = self._check_index(i)
        start = i * RECORD_WIDTH
        return self._values[start:start + RECORD_WIDTH]

    def write_record(self, i: int, values: Sequence[float]) -> None:
        """Overwrite every field of slot *i* in one assignment."""
        i = self._check_index(i)
        arr = np.asarray(values, dtype=self._values.dtype)
        if arr.shape != (RECORD_WIDTH,):
            raise ValueError(
                f"a particle record has {RECORD_WIDTH} fields, got shape {arr.shape}"
            )
        self._records[i] = arr

    def for_each_record(
        self,
        fn: Callable[[np.ndarray, int], Optional[Sequence[float]]],
    ) -> None:
        """
        Call fn(record_view, index) for every record in slot order.

        When fn returns a sequence, it replaces the leading fields of the
        record (a full record, or e.g. just x, y, vx, vy).
        """
        for i in range(self._count):
            result = fn(self._records[i], i)
            if result is None:
                continue
            arr = np.asarray(result, dtype=self._values.dtype)
            if arr.ndim != 1 or arr.shape[0] > RECORD_WIDTH:
                raise ValueError(f"record replacement for slot {i} has shape {arr.shape}")
            self._records[i, :arr.shape[0]] = arr

    def __repr__(self) -> str:
        return f"ParticleStore(count={self._count})"
