from __future__ import annotations

import io
import struct
import uuid

from pedebug.codeview import format_guid, parse_codeview
from pedebug.mapping import PhysicalLocation


def _blob_with(rec: bytes, at: int = 0x40, total: int = 0x200) -> io.BytesIO:
    blob = bytearray(b"\x00" * total)
    blob[at : at + len(rec)] = rec
    return io.BytesIO(bytes(blob))


def test_parse_rsds_record():
    guid = uuid.UUID("00112233-4455-6677-8899-aabbccddeeff")
    rec = b"RSDS" + guid.bytes_le + struct.pack("<I", 2) + b"notepad.pdb\x00"
    cv = parse_codeview(0x40, _blob_with(rec))

    assert cv is not None
    assert cv.cv_signature == "RSDS"
    assert cv.guid == "{00112233-4455-6677-8899-AABBCCDDEEFF}"
    assert cv.age == 2
    assert cv.pdb_file_name == "notepad.pdb"
    assert cv.signature is None
    assert cv.get_physical_locations() == [PhysicalLocation(0x40, 24), PhysicalLocation(0x58, 12)]
    info = cv.get_info()
    assert "Codeview" in info
    assert "File path: notepad.pdb" in info


def test_parse_nb10_record():
    rec = b"NB10" + struct.pack("<III", 0, 0x3A2B1C0D, 5) + b"old.pdb\x00"
    cv = parse_codeview(0x40, _blob_with(rec))

    assert cv is not None
    assert cv.cv_signature == "NB10"
    assert cv.signature == 0x3A2B1C0D
    assert cv.age == 5
    assert cv.guid is None
    assert cv.pdb_file_name == "old.pdb"
    assert cv.get_physical_locations()[0] == PhysicalLocation(0x40, 16)
    assert "Timestamp signature: 0x3a2b1c0d" in cv.get_info()


def test_absent_for_bad_signature_or_pointer():
    fh = _blob_with(b"XXXX" + b"\x00" * 40)
    assert parse_codeview(0x40, fh) is None
    assert parse_codeview(0, fh) is None
    assert parse_codeview(0x10000, fh) is None


def test_absent_for_truncated_record():
    rec = b"RSDS" + b"\x11" * 10
    assert parse_codeview(0x40, _blob_with(rec, total=0x40 + len(rec))) is None


def test_absent_for_unterminated_path():
    rec = b"RSDS" + b"\x00" * 20 + b"A" * 64
    assert parse_codeview(0x40, _blob_with(rec, total=0x40 + len(rec)), max_path_len=32) is None


def test_format_guid_uses_mixed_endian_layout():
    raw = bytes(range(16))
    assert format_guid(raw) == "{03020100-0504-0706-0809-0A0B0C0D0E0F}"
