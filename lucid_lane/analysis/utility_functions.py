"""Shared comparison and summary helpers for LANE data.

These functions hold the equality rules used by the container classes and
the tabular summaries used when inspecting a file interactively, so that the
containers, notebooks and tests share the same tested implementations.

Functions
---------
frame_sequences_equal
    Length check plus element-wise, order-sensitive frame comparison.
channel_maps_equal
    Same channel IDs, each mapping to an equal frame sequence.
lane_file_summary
    One row per frame (channel, index, hit count, total value).
blob_table
    One row per blob (pixel count and centroid).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from lucid_lane.ingest.lane_file import LANEFile
    from lucid_lane.models.blob import Blob
    from lucid_lane.models.frame import Frame


SUMMARY_COLUMNS = ["channel_id", "frame_index", "n_hits", "total_value"]
BLOB_COLUMNS = ["blob_index", "n_pixels", "centroid_x", "centroid_y"]


# =====================================================================
#  Equality helpers
# =====================================================================

def frame_sequences_equal(a: Sequence["Frame"], b: Sequence["Frame"]) -> bool:
    """Return True when *a* and *b* hold equal frames in the same order.

    Parameters
    ----------
    a, b : sequence of Frame
        Frame lists to compare.

    Returns
    -------
    bool
        False as soon as the lengths differ or one pair of frames differs.
    """
    if len(a) != len(b):
        return False
    return all(fa == fb for fa, fb in zip(a, b))


def channel_maps_equal(
    a: Mapping[int, Sequence["Frame"]],
    b: Mapping[int, Sequence["Frame"]],
) -> bool:
    """Return True when both maps hold the same channel IDs with equal frame sequences.

    Insertion order of the channels is irrelevant; frame order within a
    channel is not.
    """
    if a.keys() != b.keys():
        return False
    return all(frame_sequences_equal(a[cid], b[cid]) for cid in a)


# =====================================================================
#  Tabular summaries
# =====================================================================

def lane_file_summary(lane_file: "LANEFile") -> pd.DataFrame:
    """Build a per-frame summary table of a LANE file.

    Parameters
    ----------
    lane_file : LANEFile
        File to summarise.

    Returns
    -------
    pd.DataFrame
        Columns ``channel_id``, ``frame_index``, ``n_hits``, ``total_value``,
        ordered by ascending channel ID and then frame index.  An empty file
        gives an empty table with the same columns.
    """
    rows = []
    for cid in lane_file.channel_ids():
        for i, frame in enumerate(lane_file.get_frames(cid)):
            rows.append(
                {
                    "channel_id": int(cid),
                    "frame_index": i,
                    "n_hits": frame.n_hits,
                    "total_value": frame.total_value,
                }
            )
    df = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    return df.astype(np.int64)


def blob_table(blobs: Iterable["Blob"]) -> pd.DataFrame:
    """Build a per-blob table with pixel count and centroid.

    Empty blobs get a NaN centroid.
    """
    rows = []
    for i, blob in enumerate(blobs):
        cx, cy = blob.centroid()
        rows.append({"blob_index": i, "n_pixels": len(blob), "centroid_x": cx, "centroid_y": cy})
    df = pd.DataFrame(rows, columns=BLOB_COLUMNS)
    return df.astype({"blob_index": np.int64, "n_pixels": np.int64, "centroid_x": np.float64, "centroid_y": np.float64})
