from __future__ import annotations

import struct
import uuid
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple

from pedebug.mapping import PhysicalLocation

RSDS_SIGNATURE = b"RSDS"  # PDB 7.0
NB10_SIGNATURE = b"NB10"  # PDB 2.0

RSDS_HEADER_SIZE = 24  # signature, GUID, age
NB10_HEADER_SIZE = 16  # signature, offset, timestamp signature, age


@dataclass(frozen=True)
class CodeViewInfo:
    cv_signature: str
    age: int
    pdb_file_name: str
    offset: int
    header_size: int
    path_size: int  # including the terminating NUL
    guid: Optional[str] = None  # RSDS only
    signature: Optional[int] = None  # NB10 only

    def get_physical_locations(self) -> List[PhysicalLocation]:
        return [
            PhysicalLocation(self.offset, self.header_size),
            PhysicalLocation(self.offset + self.header_size, self.path_size),
        ]

    def get_info(self) -> str:
        lines = [
            "Codeview",
            "--------",
            "",
            f"Signature: {self.cv_signature}",
        ]
        if self.guid is not None:
            lines.append(f"GUID: {self.guid}")
        if self.signature is not None:
            lines.append(f"Timestamp signature: 0x{self.signature:08x}")
        lines.append(f"Age: {self.age}")
        lines.append(f"File path: {self.pdb_file_name}")
        return "\n".join(lines) + "\n"


def format_guid(raw: bytes) -> str:
    return "{" + str(uuid.UUID(bytes_le=raw)).upper() + "}"


def _read_at(fh: BinaryIO, off: int, size: int) -> bytes:
    fh.seek(off)
    return fh.read(size)


def _read_c_string(fh: BinaryIO, off: int, *, max_len: int) -> Tuple[Optional[str], int]:
    chunk = _read_at(fh, off, max_len)
    nul = chunk.find(b"\x00")
    if nul == -1:
        return None, 0
    return chunk[:nul].decode("utf-8", errors="replace"), nul + 1


def parse_codeview(ptr: int, fh: BinaryIO, *, max_path_len: int = 512) -> Optional[CodeViewInfo]:
    """
    Decode the CodeView record at file offset ptr.
    Returns None when there is no recognizable record there.
    """
    if ptr <= 0:
        return None

    sig = _read_at(fh, ptr, 4)
    if sig == RSDS_SIGNATURE:
        header = _read_at(fh, ptr, RSDS_HEADER_SIZE)
        if len(header) < RSDS_HEADER_SIZE:
            return None
        guid_raw = header[4:20]
        age = struct.unpack_from("<I", header, 20)[0]
        path, path_size = _read_c_string(fh, ptr + RSDS_HEADER_SIZE, max_len=max_path_len)
        if path is None:
            return None
        return CodeViewInfo(
            cv_signature="RSDS",
            age=int(age),
            pdb_file_name=path,
            offset=ptr,
            header_size=RSDS_HEADER_SIZE,
            path_size=path_size,
            guid=format_guid(guid_raw),
        )

    if sig == NB10_SIGNATURE:
        header = _read_at(fh, ptr, NB10_HEADER_SIZE)
        if len(header) < NB10_HEADER_SIZE:
            return None
        _, _, signature, age = struct.unpack_from("<4sIII", header, 0)
        path, path_size = _read_c_string(fh, ptr + NB10_HEADER_SIZE, max_len=max_path_len)
        if path is None:
            return None
        return CodeViewInfo(
            cv_signature="NB10",
            age=int(age),
            pdb_file_name=path,
            offset=ptr,
            header_size=NB10_HEADER_SIZE,
            path_size=path_size,
            signature=int(signature),
        )

    return None
