"""LUCID LANE -- Python tooling for LUCID detector raw-frame data.

This package provides tools for:
- Storing raw detector frames per acquisition channel in LANE intermediate files
- Reading and writing those files with strict, atomic round-trip behaviour
- Identifying pixels by a packed 32-bit key (x * 256 + y)
- Grouping active pixels into Blobs and summarising files as DataFrames

Key principles:
- Frames are values: equal matrices compare equal, stored matrices are read-only
- Deterministic output: channels are always written in ascending channel ID
- Malformed input is rejected, never partially loaded

Main subpackages:
- models: Pixel, Frame, Blob
- ingest: LANEFile reader/writer
- analysis: blob clustering, equality helpers, summary tables
"""

from lucid_lane.errors import LANEFormatError
from lucid_lane.ingest import LANEFile, LANEFileConfig
from lucid_lane.models import Blob, Frame, Pixel, pack_pixel_key, unpack_pixel_key

__all__ = [
    "LANEFormatError",
    "LANEFile",
    "LANEFileConfig",
    "Blob",
    "Frame",
    "Pixel",
    "pack_pixel_key",
    "unpack_pixel_key",
]
