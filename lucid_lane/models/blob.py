from __future__ import annotations

import io
from typing import Iterator, List, Optional, TextIO, Tuple

import numpy as np

from lucid_lane.models.pixel import Pixel, pack_pixel_key, unpack_pixel_key


class Blob:
    """
    One connected region of interest in a frame, stored as packed pixel keys.

    Keys keep insertion order and duplicates are allowed. Two blobs are equal when
    their key sequences are equal in order (this is not a set comparison).

    See :func:`lucid_lane.models.pixel.pack_pixel_key` for the key range limitation.
    """

    __slots__ = ("_keys",)

    def __init__(self) -> None:
        self._keys: List[int] = []

    def add_pixel(self, pixel: Pixel) -> None:
        self._keys.append(pack_pixel_key(pixel.x, pixel.y))

    def add_pixel_key(self, key: int) -> None:
        """Append a precomputed key verbatim."""
        self._keys.append(int(key))

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __getitem__(self, index: int) -> int:
        return self._keys[index]

    def __setitem__(self, index: int, key: int) -> None:
        self._keys[index] = int(key)

    def keys(self) -> Tuple[int, ...]:
        return tuple(self._keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Blob):
            return NotImplemented
        if self is other:
            return True
        return len(self._keys) == len(other._keys) and self._keys == other._keys

    __hash__ = None  # mutable

    def __copy__(self) -> "Blob":
        out = Blob()
        out._keys = list(self._keys)
        return out

    def write_to(self, sink: TextIO) -> TextIO:
        sink.write("Blob keys:\n")
        sink.write(", ".join(str(k) for k in self._keys))
        return sink

    def __str__(self) -> str:
        return self.write_to(io.StringIO()).getvalue()

    def __repr__(self) -> str:
        return f"Blob(n_pixels={len(self._keys)})"

    # ------------------------------------------------------------------
    # geometry helpers
    # ------------------------------------------------------------------

    def coordinates(self) -> np.ndarray:
        """Unpacked (x, y) of every key, shape ``(n, 2)``."""
        out = np.empty((len(self._keys), 2), dtype=np.int64)
        for i, k in enumerate(self._keys):
            out[i] = unpack_pixel_key(k)
        return out

    def centroid(self) -> Tuple[float, float]:
        if not self._keys:
            return float("nan"), float("nan")
        xy = self.coordinates()
        return float(xy[:, 0].mean()), float(xy[:, 1].mean())

    def bounding_box(self) -> Optional[Tuple[int, int, int, int]]:
        """(x_min, y_min, x_max, y_max), or None for an empty blob."""
        if not self._keys:
            return None
        xy = self.coordinates()
        return (int(xy[:, 0].min()), int(xy[:, 1].min()), int(xy[:, 0].max()), int(xy[:, 1].max()))
