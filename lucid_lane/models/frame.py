from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, List, Optional

import numpy as np

from lucid_lane.errors import LANEFormatError
from lucid_lane.models.pixel import Pixel
from lucid_lane.protocol import (
    DEFAULT_MAX_HITS_PER_FRAME,
    FRAME_HEADER_FMT,
    FRAME_HEADER_LEN,
    FRAME_HEIGHT,
    FRAME_WIDTH,
    HIT_DTYPE,
    PIXEL_DTYPE,
)

logger = logging.getLogger(__name__)


def _read_exact(stream: BinaryIO, n: int, what: str) -> bytes:
    offset = _tell(stream)
    buf = stream.read(n)
    if len(buf) != n:
        raise LANEFormatError(
            f"truncated {what}: expected {n} bytes, got {len(buf)}",
            path=getattr(stream, "name", None),
            offset=offset,
        )
    return buf


def _tell(stream: BinaryIO) -> Optional[int]:
    try:
        return int(stream.tell())
    except (OSError, AttributeError):
        return None


@dataclass(frozen=True, eq=False)
class Frame:
    """
    One raw detector frame: a 256 x 256 matrix of 16-bit pixel readings.

    Notes
    - data is indexed as data[x, y]; it is stored read-only so a Frame behaves as a value.
    - Frames compare equal when their matrices are element-wise equal.
    - On disk only the active (non-zero) pixels are stored, in row-major order.
    """
    data: np.ndarray = field(default_factory=lambda: np.zeros((FRAME_WIDTH, FRAME_HEIGHT), dtype=PIXEL_DTYPE))

    def __post_init__(self) -> None:
        arr = np.asarray(self.data)
        if arr.shape != (FRAME_WIDTH, FRAME_HEIGHT):
            raise ValueError(f"Frame data must have shape ({FRAME_WIDTH}, {FRAME_HEIGHT}), got {arr.shape}")
        if not (np.issubdtype(arr.dtype, np.integer) or arr.dtype == np.bool_):
            raise ValueError(f"Frame data must be integer pixel counts, got dtype {arr.dtype}")
        if arr.size and (arr.min() < 0 or arr.max() > np.iinfo(PIXEL_DTYPE).max):
            raise ValueError("Frame data values must fit in an unsigned 16-bit counter")
        arr = np.array(arr, dtype=PIXEL_DTYPE, copy=True)
        arr.setflags(write=False)
        object.__setattr__(self, "data", arr)

    @classmethod
    def from_pixels(cls, pixels: Iterable[Pixel]) -> "Frame":
        """Build a frame from active pixels; repeated coordinates are summed."""
        acc = np.zeros((FRAME_WIDTH, FRAME_HEIGHT), dtype=np.int64)
        for p in pixels:
            if not (0 <= p.x < FRAME_WIDTH and 0 <= p.y < FRAME_HEIGHT):
                raise ValueError(f"Pixel ({p.x}, {p.y}) outside the {FRAME_WIDTH}x{FRAME_HEIGHT} matrix")
            acc[p.x, p.y] += int(p.value)
        return cls(acc)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self is other or bool(np.array_equal(self.data, other.data))

    def __repr__(self) -> str:
        return f"Frame(n_hits={self.n_hits}, total_value={self.total_value})"

    @property
    def n_hits(self) -> int:
        return int(np.count_nonzero(self.data))

    @property
    def total_value(self) -> int:
        return int(self.data.sum(dtype=np.int64))

    def pixels(self) -> List[Pixel]:
        """Active pixels in row-major order."""
        xs, ys = np.nonzero(self.data)
        return [Pixel(int(x), int(y), int(self.data[x, y])) for x, y in zip(xs, ys)]

    def encode(self, stream: BinaryIO) -> int:
        """Write this frame as a frame record. Returns the number of bytes written."""
        xs, ys = np.nonzero(self.data)
        hits = np.empty(xs.size, dtype=HIT_DTYPE)
        hits["x"] = xs
        hits["y"] = ys
        hits["value"] = self.data[xs, ys]
        payload = hits.tobytes()
        stream.write(struct.pack(FRAME_HEADER_FMT, int(xs.size)))
        stream.write(payload)
        return FRAME_HEADER_LEN + len(payload)

    @classmethod
    def decode(cls, stream: BinaryIO, *, max_hits: int = DEFAULT_MAX_HITS_PER_FRAME) -> "Frame":
        """
        Read exactly one frame record from ``stream``.

        Raises LANEFormatError on a short read, a hit count above ``max_hits``, or a
        pixel listed twice in the same record.
        """
        offset = _tell(stream)
        (n_hits,) = struct.unpack(FRAME_HEADER_FMT, _read_exact(stream, FRAME_HEADER_LEN, "frame header"))
        if n_hits > int(max_hits):
            raise LANEFormatError(
                f"frame hit count {n_hits} exceeds limit {max_hits}",
                path=getattr(stream, "name", None),
                offset=offset,
            )
        raw = _read_exact(stream, n_hits * HIT_DTYPE.itemsize, "frame payload")
        hits = np.frombuffer(raw, dtype=HIT_DTYPE)

        data = np.zeros((FRAME_WIDTH, FRAME_HEIGHT), dtype=PIXEL_DTYPE)
        xs = hits["x"].astype(np.intp)
        ys = hits["y"].astype(np.intp)
        if n_hits:
            flat = xs * FRAME_HEIGHT + ys
            if np.unique(flat).size != flat.size:
                raise LANEFormatError(
                    "duplicate pixel in frame record",
                    path=getattr(stream, "name", None),
                    offset=offset,
                )
        data[xs, ys] = hits["value"]
        return cls(data)
