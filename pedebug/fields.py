from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

DEBUG_DIR_ENTRY_SIZE = 28

_FORMATS = {1: "<B", 2: "<H", 4: "<I", 8: "<Q"}


class DebugDirectoryKey(enum.Enum):
    CHARACTERISTICS = "characteristics"
    TIME_DATE_STAMP = "time_date_stamp"
    MAJOR_VERSION = "major_version"
    MINOR_VERSION = "minor_version"
    TYPE = "type"
    SIZE_OF_DATA = "size_of_data"
    ADDRESS_OF_RAW_DATA = "address_of_raw_data"
    POINTER_TO_RAW_DATA = "pointer_to_raw_data"


# IMAGE_DEBUG_DIRECTORY: (key, description, byte offset, byte width)
DEBUG_DIRECTORY_LAYOUT: Tuple[Tuple[DebugDirectoryKey, str, int, int], ...] = (
    (DebugDirectoryKey.CHARACTERISTICS, "Characteristics", 0, 4),
    (DebugDirectoryKey.TIME_DATE_STAMP, "Time date stamp", 4, 4),
    (DebugDirectoryKey.MAJOR_VERSION, "Major version", 8, 2),
    (DebugDirectoryKey.MINOR_VERSION, "Minor version", 10, 2),
    (DebugDirectoryKey.TYPE, "Type", 12, 4),
    (DebugDirectoryKey.SIZE_OF_DATA, "Size of data", 16, 4),
    (DebugDirectoryKey.ADDRESS_OF_RAW_DATA, "Address of raw data", 20, 4),
    (DebugDirectoryKey.POINTER_TO_RAW_DATA, "Pointer to raw data", 24, 4),
)


@dataclass(frozen=True)
class StandardField:
    key: DebugDirectoryKey
    description: str
    value: int
    offset: int  # absolute file offset of the field
    size: int

    def __str__(self) -> str:
        return f"{self.description}: {self.value} (0x{self.value:x})"


def _read_uint(data: bytes, off: int, width: int) -> Optional[int]:
    fmt = _FORMATS.get(width)
    if fmt is None or off < 0 or off + width > len(data):
        return None
    return struct.unpack_from(fmt, data, off)[0]


def decode_fields(
    data: bytes,
    *,
    file_offset: int,
    layout: Tuple[Tuple[DebugDirectoryKey, str, int, int], ...] = DEBUG_DIRECTORY_LAYOUT,
) -> Dict[DebugDirectoryKey, StandardField]:
    """
    Decode data per a static (key, description, offset, width) layout.
    Entries whose bytes are not available are left out, never zero-filled.
    Insertion order follows the layout table.
    """
    fields: Dict[DebugDirectoryKey, StandardField] = {}
    for key, description, off, width in layout:
        value = _read_uint(data, off, width)
        if value is None:
            continue
        fields[key] = StandardField(
            key=key,
            description=description,
            value=int(value),
            offset=file_offset + off,
            size=width,
        )
    return fields
