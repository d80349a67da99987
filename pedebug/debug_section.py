from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, BinaryIO, Callable, Dict, List, Mapping, Optional

from pedebug.codeview import CodeViewInfo, parse_codeview
from pedebug.debug_types import DebugType, resolve_debug_type
from pedebug.fields import DEBUG_DIR_ENTRY_SIZE, DebugDirectoryKey, StandardField, decode_fields
from pedebug.mapping import MappedSection, PhysicalLocation

logger = logging.getLogger(__name__)

DiagnosticSink = Callable[[Dict[str, Any]], None]

NO_DESCRIPTION = "no description available"


class CodeViewUnavailableError(RuntimeError):
    """get_code_view() was called on a section without a CodeView record."""


def _err(code: str, message: str, **extra: Any) -> Dict[str, Any]:
    d = {"code": code, "message": message}
    d.update(extra)
    return d


def _log_diagnostic(diag: Dict[str, Any]) -> None:
    logger.warning("%s: %s", diag.get("code"), diag.get("message"))


@dataclass(frozen=True)
class DebugSection:
    """
    One decoded IMAGE_DEBUG_DIRECTORY entry.
    Built once by parse_debug_section and never mutated afterwards.
    """

    directory_table: Mapping[DebugDirectoryKey, StandardField]
    type_description: str
    debug_type: DebugType
    offset: int
    code_view: Optional[CodeViewInfo] = None

    def get_offset(self) -> int:
        return self.offset

    def get_size(self) -> int:
        return DEBUG_DIR_ENTRY_SIZE

    def get_directory_table(self) -> Mapping[DebugDirectoryKey, StandardField]:
        return self.directory_table

    def get(self, key: DebugDirectoryKey) -> Optional[int]:
        """Value of the given field, or None if the entry does not hold it."""
        f = self.directory_table.get(key)
        return f.value if f is not None else None

    def get_time_date_stamp(self) -> datetime:
        """Time date stamp field as seconds since the Unix epoch, in UTC."""
        return datetime.fromtimestamp(self.get(DebugDirectoryKey.TIME_DATE_STAMP), tz=timezone.utc)

    def get_type_description(self) -> str:
        return self.type_description

    def get_debug_type(self) -> DebugType:
        return self.debug_type

    def has_code_view(self) -> bool:
        return self.code_view is not None

    def get_code_view(self) -> CodeViewInfo:
        if self.code_view is None:
            raise CodeViewUnavailableError("Code View structure not valid")
        return self.code_view

    def get_physical_locations(self) -> List[PhysicalLocation]:
        own = PhysicalLocation(self.offset, self.get_size())
        if self.code_view is not None:
            return list(self.code_view.get_physical_locations()) + [own]
        return [own]

    def is_empty(self) -> bool:
        return len(self.directory_table) == 0

    def get_info(self) -> str:
        lines: List[str] = []
        for f in self.directory_table.values():
            if f.key is DebugDirectoryKey.TYPE:
                lines.append(f"Type: {self.type_description}")
            elif f.key is DebugDirectoryKey.TIME_DATE_STAMP:
                lines.append(f"Time date stamp: {self.get_time_date_stamp().isoformat()}")
            else:
                lines.append(str(f))
        cv = self.code_view.get_info() if self.code_view is not None else ""
        return "-------------\nDebug Section\n-------------\n\n" + "\n".join(lines) + "\n" + cv + "\n"


def parse_debug_section(
    mapped: MappedSection,
    offset: int,
    virtual_address: int,
    fh: BinaryIO,
    *,
    on_diagnostic: Optional[DiagnosticSink] = None,
    max_path_len: int = 512,
) -> DebugSection:
    """
    Decode the 28-byte debug directory entry at virtual_address.

    An unrecognized type code is reported through on_diagnostic (default:
    this module's logger) and yields DebugType.UNKNOWN without a CodeView
    lookup. OutOfBoundsError from the mapped view is not caught here.
    """
    sink = on_diagnostic or _log_diagnostic

    raw = mapped.slice(virtual_address, virtual_address + DEBUG_DIR_ENTRY_SIZE)
    fields = decode_fields(raw, file_offset=offset)
    type_value = fields[DebugDirectoryKey.TYPE].value

    debug_type = resolve_debug_type(type_value)
    if debug_type is not None:
        ptr = fields[DebugDirectoryKey.POINTER_TO_RAW_DATA].value
        code_view = parse_codeview(ptr, fh, max_path_len=max_path_len)
        return DebugSection(
            directory_table=MappingProxyType(fields),
            type_description=debug_type.description,
            debug_type=debug_type,
            offset=offset,
            code_view=code_view,
        )

    sink(
        _err(
            "W_DEBUG_TYPE_UNKNOWN",
            "No debug type description found.",
            type_value=type_value,
            offset=offset,
        )
    )
    return DebugSection(
        directory_table=MappingProxyType(fields),
        type_description=f"{type_value} {NO_DESCRIPTION}",
        debug_type=DebugType.UNKNOWN,
        offset=offset,
        code_view=None,
    )
