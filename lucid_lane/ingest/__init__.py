"""Ingest package - LANE intermediate file reading and writing.

This package handles:
- Reading LANE files into channel-keyed frame collections
- Writing them back in a deterministic (ascending channel) order

Key classes:
- LANEFile: in-memory container with read/write
- LANEFileConfig: reader/writer bounds and write policy

Design principle:
- A read either fully succeeds or leaves the container untouched
- I/O errors propagate as OSError, malformed content as LANEFormatError
"""

from .lane_file import LANEFile, LANEFileConfig

__all__ = ["LANEFile", "LANEFileConfig"]
