from .pixel import Pixel, pack_pixel_key, unpack_pixel_key
from .frame import Frame
from .blob import Blob

__all__ = [
    "Pixel",
    "pack_pixel_key",
    "unpack_pixel_key",
    "Frame",
    "Blob",
]
