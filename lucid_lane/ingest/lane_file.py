from __future__ import annotations

import io
import logging
import operator
import os
import stat
import struct
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, TextIO, Tuple

import pandas as pd

from lucid_lane.analysis.utility_functions import channel_maps_equal, lane_file_summary
from lucid_lane.errors import LANEFormatError
from lucid_lane.models.frame import Frame
from lucid_lane.protocol import (
    CHANNEL_HEADER_FMT,
    CHANNEL_HEADER_LEN,
    DEFAULT_MAX_FRAMES_PER_CHANNEL,
    DEFAULT_MAX_HITS_PER_FRAME,
    FILE_HEADER_FMT,
    FILE_HEADER_LEN,
    U32_MAX,
    UNSET,
)

logger = logging.getLogger(__name__)

ChannelMap = Dict[int, List[Frame]]


@dataclass(frozen=True)
class LANEFileConfig:
    """
    Reader/writer configuration for LANE intermediate files.

    atomic_write:
      - True: write to a temporary file next to the target, then rename it over the target.
              A failed write never leaves a half-written file at the target path.
      - False: truncate and write the target in place.
    max_frames_per_channel:
      Upper bound accepted for a channel record's frame count when reading.
    max_hits_per_frame:
      Upper bound accepted for a frame record's active-pixel count when reading.
    """
    atomic_write: bool = True
    max_frames_per_channel: int = DEFAULT_MAX_FRAMES_PER_CHANNEL
    max_hits_per_frame: int = DEFAULT_MAX_HITS_PER_FRAME


def _check_u32(name: str, value: int) -> int:
    try:
        v = operator.index(value)
    except TypeError:
        raise ValueError(f"{name}={value!r} is not an integer") from None
    if not 0 <= v <= U32_MAX:
        raise ValueError(f"{name}={value} does not fit in an unsigned 32-bit field")
    return v


def _target_mode(path: Path) -> int:
    """Permission bits for a written file: keep an existing target's, else honour the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _fmt_u32(v: int) -> str:
    return "unset" if v == UNSET else str(v)


class LANEFile:
    """
    LANE intermediate raw-data file: frames grouped by acquisition channel.

    The file carries two header fields (file ID and start time) and, per channel,
    the ordered list of frames recorded on it.

    Notes
    - Equality compares the channel maps only; file ID and start time are metadata.
    - Channels are written in ascending channel ID so write -> read reproduces an equal object.
    - read() replaces the whole in-memory state, and only once the file parsed cleanly.
    - Asking for a channel that was never added returns an empty list, not an error.
    """

    def __init__(self, file_path: Optional[str | Path] = None, *, config: Optional[LANEFileConfig] = None):
        self.config = config or LANEFileConfig()
        self._channels: ChannelMap = {}
        self._file_id: int = UNSET
        self._start_time: int = UNSET
        if file_path is not None:
            self.read(file_path)

    # ------------------------------------------------------------------
    # metadata
    # ------------------------------------------------------------------

    def get_file_id(self) -> int:
        return self._file_id

    def set_file_id(self, file_id: int) -> None:
        self._file_id = file_id

    def get_start_time(self) -> int:
        return self._start_time

    def set_start_time(self, start_time: int) -> None:
        self._start_time = start_time

    file_id = property(get_file_id, set_file_id)
    start_time = property(get_start_time, set_start_time)

    # ------------------------------------------------------------------
    # frames
    # ------------------------------------------------------------------

    def add_frame(self, frame: Frame, channel_id: int = 0) -> None:
        """Append ``frame`` to ``channel_id`` (channel 0 when not given), creating the channel if needed."""
        self._channels.setdefault(channel_id, []).append(frame)

    def get_frames(self, channel_id: int) -> List[Frame]:
        return list(self._channels.get(channel_id, ()))

    def channel_ids(self) -> List[int]:
        return sorted(self._channels)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._channels

    def __len__(self) -> int:
        return sum(len(frames) for frames in self._channels.values())

    def clear(self) -> None:
        self._channels = {}
        self._file_id = UNSET
        self._start_time = UNSET

    # ------------------------------------------------------------------
    # equality / copy / move
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LANEFile):
            return NotImplemented
        return self is other or channel_maps_equal(self._channels, other._channels)

    __hash__ = None  # mutable

    def copy(self) -> "LANEFile":
        """Copy with its own channel map; frames are immutable values and are shared."""
        out = LANEFile(config=self.config)
        out._channels = {cid: list(frames) for cid, frames in self._channels.items()}
        out._file_id = self._file_id
        out._start_time = self._start_time
        return out

    def __copy__(self) -> "LANEFile":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "LANEFile":
        return self.copy()

    def take(self) -> "LANEFile":
        """Move this file's state into a new LANEFile and leave this one empty."""
        out = LANEFile(config=self.config)
        out._channels, out._file_id, out._start_time = self._channels, self._file_id, self._start_time
        self.clear()
        return out

    # ------------------------------------------------------------------
    # I/O
    # ------------------------------------------------------------------

    def read(self, file_path: str | Path) -> None:
        """
        Read a LANE file, replacing everything currently held.

        Raises OSError (e.g. FileNotFoundError) if the file cannot be opened and
        LANEFormatError if its content is malformed. On failure the current state
        is left unchanged.
        """
        path = Path(file_path).expanduser()
        with path.open("rb") as f:
            try:
                file_id, start_time, channels = self._parse(f, str(path))
            except LANEFormatError as exc:
                logger.warning("Rejected malformed LANE file: %s", exc)
                raise

        self._channels = channels
        self._file_id = file_id
        self._start_time = start_time
        logger.info(
            "Read LANE file %s: %d channel(s), %d frame(s)", path, len(channels), len(self)
        )

    def _parse(self, f: BinaryIO, name: str) -> Tuple[int, int, ChannelMap]:
        cfg = self.config

        header = f.read(FILE_HEADER_LEN)
        if len(header) != FILE_HEADER_LEN:
            raise LANEFormatError(
                f"truncated file header: expected {FILE_HEADER_LEN} bytes, got {len(header)}",
                path=name,
                offset=0,
            )
        file_id, start_time = struct.unpack(FILE_HEADER_FMT, header)

        channels: ChannelMap = {}
        while True:
            offset = f.tell()
            rec = f.read(CHANNEL_HEADER_LEN)
            if not rec:
                break
            if len(rec) != CHANNEL_HEADER_LEN:
                raise LANEFormatError(
                    f"truncated channel header: expected {CHANNEL_HEADER_LEN} bytes, got {len(rec)}",
                    path=name,
                    offset=offset,
                )
            channel_id, frame_count = struct.unpack(CHANNEL_HEADER_FMT, rec)
            if channel_id in channels:
                raise LANEFormatError(f"duplicate channel {channel_id}", path=name, offset=offset)
            if frame_count == 0:
                raise LANEFormatError(f"channel {channel_id} has no frames", path=name, offset=offset)
            if frame_count > cfg.max_frames_per_channel:
                raise LANEFormatError(
                    f"channel {channel_id} frame count {frame_count} exceeds limit {cfg.max_frames_per_channel}",
                    path=name,
                    offset=offset,
                )
            channels[channel_id] = [
                Frame.decode(f, max_hits=cfg.max_hits_per_frame) for _ in range(frame_count)
            ]

        return file_id, start_time, channels

    def write(self, file_path: str | Path) -> None:
        """
        Write to ``file_path``, overwriting any existing file.

        Header fields and channel IDs are checked before the target is touched;
        values outside the unsigned 32-bit range raise ValueError.
        """
        file_id = _check_u32("file_id", self._file_id)
        start_time = _check_u32("start_time", self._start_time)
        for cid in self._channels:
            _check_u32("channel_id", cid)

        path = Path(file_path).expanduser()
        if self.config.atomic_write:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    self._serialize(f, file_id, start_time)
                os.chmod(tmp_name, _target_mode(path))
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        else:
            with path.open("wb") as f:
                self._serialize(f, file_id, start_time)

        logger.info(
            "Wrote LANE file %s: %d channel(s), %d frame(s)", path, len(self._channels), len(self)
        )

    def _serialize(self, f: BinaryIO, file_id: int, start_time: int) -> None:
        f.write(struct.pack(FILE_HEADER_FMT, file_id, start_time))
        for cid in sorted(self._channels):
            frames = self._channels[cid]
            f.write(struct.pack(CHANNEL_HEADER_FMT, int(cid), len(frames)))
            for frame in frames:
                frame.encode(f)

    # ------------------------------------------------------------------
    # diagnostics
    # ------------------------------------------------------------------

    def write_to(self, sink: TextIO) -> TextIO:
        """Write a human-readable listing of this file into ``sink`` and return it."""
        sink.write("LANE file\n")
        sink.write(f"  file ID: {_fmt_u32(self._file_id)}\n")
        sink.write(f"  start time: {_fmt_u32(self._start_time)}\n")
        sink.write(f"  channels: {len(self._channels)}\n")
        for cid in sorted(self._channels):
            frames = self._channels[cid]
            sink.write(f"  channel {cid}: {len(frames)} frame(s)\n")
            for i, frame in enumerate(frames):
                sink.write(f"    frame {i}: {frame.n_hits} hit(s), total value {frame.total_value}\n")
        return sink

    def __str__(self) -> str:
        return self.write_to(io.StringIO()).getvalue()

    def __repr__(self) -> str:
        return f"LANEFile(file_id={_fmt_u32(self._file_id)}, channels={self.channel_ids()}, frames={len(self)})"

    def to_dataframe(self) -> pd.DataFrame:
        """Per-frame summary table, see :func:`lucid_lane.analysis.utility_functions.lane_file_summary`."""
        return lane_file_summary(self)
