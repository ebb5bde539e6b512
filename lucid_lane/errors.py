from __future__ import annotations

from typing import Optional


class LANEFormatError(ValueError):
    """Raised when a LANE file (or a frame record inside it) is malformed.

    I/O failures are not wrapped: they surface as the ``OSError`` raised by the
    file system (``FileNotFoundError``, ``PermissionError``, ...).
    """

    def __init__(self, message: str, *, path: Optional[str] = None, offset: Optional[int] = None):
        self.path = path
        self.offset = offset
        if offset is not None:
            message = f"offset {offset}: {message}"
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
