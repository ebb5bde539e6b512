"""Analysis package.

Design principle:
  - Ingest produces LANEFile objects holding validated Frame values per channel.
  - Analysis consumes Frames and produces derived objects (Blobs, summary tables).
"""

from .clustering import find_blobs
from .utility_functions import (
    blob_table,
    channel_maps_equal,
    frame_sequences_equal,
    lane_file_summary,
)

__all__ = [
    "find_blobs",
    "blob_table",
    "channel_maps_equal",
    "frame_sequences_equal",
    "lane_file_summary",
]
