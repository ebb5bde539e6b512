from __future__ import annotations

from collections import deque
from typing import List, Tuple

import numpy as np

from lucid_lane.models.blob import Blob
from lucid_lane.models.frame import Frame
from lucid_lane.models.pixel import Pixel

_NEIGHBOURS = {
    4: ((-1, 0), (1, 0), (0, -1), (0, 1)),
    8: ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)),
}


def find_blobs(frame: Frame, *, connectivity: int = 8) -> List[Blob]:
    """
    Group the active pixels of ``frame`` into connected regions.

    Each region becomes one Blob, filled through Blob.add_pixel in breadth-first order
    from its seed pixel. Seeds are taken in row-major order, so blobs come out ordered
    by their first pixel and the result is deterministic for a given frame.

    connectivity:
      8 (default): diagonal neighbours are connected.
      4: only edge neighbours are connected.
    """
    if connectivity not in _NEIGHBOURS:
        raise ValueError(f"connectivity must be 4 or 8, got {connectivity}")
    steps = _NEIGHBOURS[connectivity]

    data = frame.data
    active = data != 0
    visited = np.zeros(active.shape, dtype=bool)
    nx, ny = active.shape

    blobs: List[Blob] = []
    for sx, sy in zip(*np.nonzero(active)):
        if visited[sx, sy]:
            continue
        blob = Blob()
        queue: deque[Tuple[int, int]] = deque([(int(sx), int(sy))])
        visited[sx, sy] = True
        while queue:
            x, y = queue.popleft()
            blob.add_pixel(Pixel(x, y, int(data[x, y])))
            for dx, dy in steps:
                u, v = x + dx, y + dy
                if 0 <= u < nx and 0 <= v < ny and active[u, v] and not visited[u, v]:
                    visited[u, v] = True
                    queue.append((u, v))
        blobs.append(blob)
    return blobs
