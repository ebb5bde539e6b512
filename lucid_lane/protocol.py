"""LANE on-disk protocol constants.

Single source of truth for record layouts and safety bounds.
Keep this file stable. Reader and writer must remain synchronized.

Layout (all integers little-endian):
  [file_id u32 | start_time u32]                            file header
  [channel_id u32 | frame_count u32] + frame_count frames   channel record, repeated to EOF
  [n_hits u32] + n_hits * [x u8 | y u8 | value u16]          frame record
"""

import numpy as np

# File header: [FileID(4) | StartTime(4)] = 8 bytes
FILE_HEADER_FMT = "<II"
FILE_HEADER_LEN = 8

# Channel record header: [ChannelID(4) | FrameCount(4)] = 8 bytes
CHANNEL_HEADER_FMT = "<II"
CHANNEL_HEADER_LEN = 8

# Frame record header: [HitCount(4)] = 4 bytes
FRAME_HEADER_FMT = "<I"
FRAME_HEADER_LEN = 4

# One active pixel inside a frame record = 4 bytes
HIT_DTYPE = np.dtype([("x", "<u1"), ("y", "<u1"), ("value", "<u2")])

# Detector geometry (Timepix: 256 x 256 pixels, 16-bit counters)
FRAME_WIDTH = 256
FRAME_HEIGHT = 256
PIXEL_DTYPE = np.dtype("<u2")

U32_MAX = 0xFFFFFFFF

# file_id / start_time before they are set or loaded
UNSET = U32_MAX

# Default safety bounds
DEFAULT_MAX_FRAMES_PER_CHANNEL = 1_000_000
DEFAULT_MAX_HITS_PER_FRAME = FRAME_WIDTH * FRAME_HEIGHT
