from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class PhysicalLocation:
    """Byte range in the raw file."""

    offset: int
    size: int


class OutOfBoundsError(IndexError):
    """Requested virtual range is not backed by the section's raw bytes."""

    def __init__(self, start: int, end: int, section: "MappedSection") -> None:
        self.start = start
        self.end = end
        self.section_name = section.name
        super().__init__(
            f"range [0x{start:x}, 0x{end:x}) outside section {section.name!r} "
            f"[0x{section.virtual_address:x}, 0x{section.virtual_end:x})"
        )


@dataclass(frozen=True)
class MappedSection:
    """
    One PE section, addressed by virtual address.
    `data` holds the section's raw bytes as they are stored in the file.
    """

    name: str
    virtual_address: int
    raw_ptr: int
    data: bytes

    @property
    def virtual_end(self) -> int:
        return self.virtual_address + len(self.data)

    def contains(self, va: int, size: int = 1) -> bool:
        return self.virtual_address <= va and va + size <= self.virtual_end

    def va_to_offset(self, va: int) -> int:
        return self.raw_ptr + (va - self.virtual_address)

    def slice(self, start: int, end: int) -> bytes:
        if end < start or not self.contains(start, end - start):
            raise OutOfBoundsError(start, end, self)
        lo = start - self.virtual_address
        return self.data[lo : lo + (end - start)]


def find_section(rva: int, *, sections: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Return the section header dict whose virtual span holds rva.
    Deterministic: first match in section order.
    """
    if rva <= 0:
        return None
    for s in sections:
        va = int(s.get("virtual_address", 0) or 0)
        vs = int(s.get("virtual_size", 0) or 0)
        raw_size = int(s.get("raw_size", 0) or 0)
        span = max(vs, raw_size)
        if span <= 0:
            continue
        if va <= rva < va + span:
            return s
    return None


def map_section(data: bytes, section: Dict[str, Any]) -> MappedSection:
    raw_ptr = int(section.get("raw_ptr", 0) or 0)
    raw_size = int(section.get("raw_size", 0) or 0)
    if raw_ptr >= len(data):
        raw = b""
    else:
        raw = data[raw_ptr : min(len(data), raw_ptr + raw_size)]
    return MappedSection(
        name=str(section.get("name", "")),
        virtual_address=int(section.get("virtual_address", 0) or 0),
        raw_ptr=raw_ptr,
        data=bytes(raw),
    )
