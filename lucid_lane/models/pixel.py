from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


# Keys are x * 256 + y: both coordinates are assumed to fit in 8 bits (0..255).
# Outside that range keys collide, e.g. (1, 0) and (0, 256) both give 256.
# The format is fixed; do not widen it here.
KEY_SHIFT = 8
KEY_MASK = 0xFF
KEY_LIMIT = 0xFFFFFFFF


def pack_pixel_key(x: int, y: int) -> int:
    """Pack pixel coordinates into a 32-bit key, ``(x << 8) + y``.

    No range checking is performed.
    """
    return ((int(x) << KEY_SHIFT) + int(y)) & KEY_LIMIT


def unpack_pixel_key(key: int) -> Tuple[int, int]:
    """Inverse of :func:`pack_pixel_key` for keys built from in-range coordinates."""
    key = int(key)
    return key >> KEY_SHIFT, key & KEY_MASK


@dataclass(frozen=True)
class Pixel:
    """
    One active detector pixel.

    x, y:
      Row and column of the pixel on the sensor matrix.
    value:
      Counter reading of the pixel (hit count or time-over-threshold, depending on
      the acquisition mode).
    """
    x: int
    y: int
    value: int = 1

    @property
    def key(self) -> int:
        return pack_pixel_key(self.x, self.y)
