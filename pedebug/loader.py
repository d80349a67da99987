from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

from pedebug.config import Limits
from pedebug.debug_section import DebugSection, parse_debug_section
from pedebug.fields import DEBUG_DIR_ENTRY_SIZE
from pedebug.mapping import OutOfBoundsError, find_section, map_section

logger = logging.getLogger(__name__)

IMAGE_DOS_SIGNATURE = b"MZ"
IMAGE_NT_SIGNATURE = b"PE\x00\x00"

PE32_MAGIC = 0x10B
PE32P_MAGIC = 0x20B

# Data directory indices
DIR_DEBUG = 6


@dataclass(frozen=True)
class DebugLoadResult:
    present: bool
    sections: List[DebugSection]
    errors: List[Dict[str, Any]]


def _err(code: str, message: str, **extra: Any) -> Dict[str, Any]:
    d = {"code": code, "message": message}
    d.update(extra)
    return d


def _u16(data: bytes, off: int) -> Optional[int]:
    if off < 0 or off + 2 > len(data):
        return None
    return struct.unpack_from("<H", data, off)[0]


def _u32(data: bytes, off: int) -> Optional[int]:
    if off < 0 or off + 4 > len(data):
        return None
    return struct.unpack_from("<I", data, off)[0]


def _safe_ascii(b: bytes) -> str:
    return b.split(b"\x00", 1)[0].decode("ascii", errors="replace")


def _parse_headers(
    data: bytes, *, max_sections: int
) -> Tuple[bool, Optional[Tuple[int, int]], List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Returns (present, (debug_rva, debug_size) or None, sections, errors).
    """
    errors: List[Dict[str, Any]] = []

    if len(data) < 64 or data[:2] != IMAGE_DOS_SIGNATURE:
        return False, None, [], []

    e_lfanew = _u32(data, 0x3C)
    if e_lfanew is None or e_lfanew >= len(data):
        return True, None, [], [_err("E_PE_E_LFANEW_OOB", "e_lfanew points outside file.", e_lfanew=e_lfanew)]

    if data[e_lfanew : e_lfanew + 4] != IMAGE_NT_SIGNATURE:
        return True, None, [], [_err("E_PE_BAD_NT_SIGNATURE", "Missing PE\\0\\0 signature.", e_lfanew=e_lfanew)]

    coff_off = e_lfanew + 4
    if coff_off + 20 > len(data):
        return True, None, [], [_err("E_PE_COFF_TRUNCATED", "COFF header truncated.", coff_off=coff_off)]

    number_of_sections = _u16(data, coff_off + 2) or 0
    size_of_optional_header = _u16(data, coff_off + 16) or 0

    opt_off = coff_off + 20
    if opt_off + size_of_optional_header > len(data):
        errors.append(
            _err(
                "E_PE_OPT_TRUNCATED",
                "Optional header truncated or size exceeds file.",
                opt_off=opt_off,
                size_of_optional_header=size_of_optional_header,
            )
        )
        size_of_optional_header = max(0, min(size_of_optional_header, len(data) - opt_off))

    opt_magic = _u16(data, opt_off)
    if opt_magic not in (PE32_MAGIC, PE32P_MAGIC):
        errors.append(_err("E_PE_OPT_BAD_MAGIC", "Optional header magic not PE32/PE32+.", opt_magic=opt_magic))
    is_pe32_plus = opt_magic == PE32P_MAGIC

    num_rva_off = opt_off + (0x6C if is_pe32_plus else 0x5C)
    dd_off = opt_off + (0x70 if is_pe32_plus else 0x60)
    num_rva_and_sizes = _u32(data, num_rva_off) or 0
    dd_end = opt_off + size_of_optional_header

    debug_dir: Optional[Tuple[int, int]] = None
    if num_rva_and_sizes >= DIR_DEBUG + 1 and dd_off + (DIR_DEBUG + 1) * 8 <= dd_end:
        rva = _u32(data, dd_off + DIR_DEBUG * 8) or 0
        size = _u32(data, dd_off + DIR_DEBUG * 8 + 4) or 0
        if rva and size:
            debug_dir = (int(rva), int(size))

    sect_off = opt_off + size_of_optional_header
    if number_of_sections > max_sections:
        errors.append(
            _err(
                "E_PE_SECTION_COUNT_CLAMPED",
                f"Section count too large; clamped to max_sections={max_sections}.",
                number_of_sections=number_of_sections,
                max_sections=max_sections,
            )
        )
        number_of_sections = max_sections

    sections: List[Dict[str, Any]] = []
    for i in range(number_of_sections):
        sh_off = sect_off + i * 40
        if sh_off + 40 > len(data):
            errors.append(_err("E_PE_SECTION_HEADER_TRUNCATED", "Section header truncated.", section_index=i, sh_off=sh_off))
            break
        sections.append(
            {
                "name": _safe_ascii(data[sh_off : sh_off + 8]),
                "virtual_size": int(_u32(data, sh_off + 8) or 0),
                "virtual_address": int(_u32(data, sh_off + 12) or 0),
                "raw_size": int(_u32(data, sh_off + 16) or 0),
                "raw_ptr": int(_u32(data, sh_off + 20) or 0),
            }
        )

    return True, debug_dir, sections, errors


def parse_debug_bytes(data: bytes, fh: Optional[BinaryIO] = None, *, limits: Limits = Limits()) -> DebugLoadResult:
    """
    Decode every IMAGE_DEBUG_DIRECTORY entry of a PE image held in data.
    fh is used for CodeView lookups; defaults to a view over data.
    """
    present, debug_dir, sections, errors = _parse_headers(data, max_sections=limits.max_sections)
    if not present:
        return DebugLoadResult(present=False, sections=[], errors=[])
    if debug_dir is None:
        return DebugLoadResult(present=True, sections=[], errors=errors)

    debug_rva, debug_size = debug_dir
    sh = find_section(debug_rva, sections=sections)
    if sh is None:
        errors.append(_err("E_DEBUG_RVA_UNMAPPABLE", "Debug directory RVA could not be mapped to a section.", debug_rva=debug_rva))
        return DebugLoadResult(present=True, sections=[], errors=errors)
    mapped = map_section(data, sh)

    count = debug_size // DEBUG_DIR_ENTRY_SIZE
    if count > limits.max_debug_entries:
        errors.append(
            _err(
                "E_DEBUG_ENTRY_COUNT_CLAMPED",
                f"Debug entry count too large; clamped to max_debug_entries={limits.max_debug_entries}.",
                entry_count=count,
                max_debug_entries=limits.max_debug_entries,
            )
        )
        count = limits.max_debug_entries

    if fh is None:
        fh = io.BytesIO(data)

    out: List[DebugSection] = []
    for i in range(count):
        va = debug_rva + i * DEBUG_DIR_ENTRY_SIZE
        offset = mapped.va_to_offset(va)
        try:
            out.append(
                parse_debug_section(
                    mapped,
                    offset,
                    va,
                    fh,
                    on_diagnostic=errors.append,
                    max_path_len=limits.max_codeview_path_len,
                )
            )
        except OutOfBoundsError as e:
            logger.debug("debug entry %d skipped: %s", i, e)
            errors.append(_err("E_DEBUG_ENTRY_OOB", "Debug directory entry outside section data.", entry_index=i, va=va))

    return DebugLoadResult(present=True, sections=out, errors=errors)


def load_debug_sections(path: Path, *, limits: Limits = Limits()) -> DebugLoadResult:
    size = path.stat().st_size
    if size > limits.max_file_size_bytes:
        return DebugLoadResult(
            present=False,
            sections=[],
            errors=[_err("E_INPUT_TOO_LARGE", "File exceeds max_file_size_bytes.", file_size=size)],
        )
    with path.open("rb") as fh:
        data = fh.read()
        return parse_debug_bytes(data, fh, limits=limits)
