from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from pedebug.debug_section import DebugSection
from pedebug.loader import DebugLoadResult


def utc_now_iso() -> str:
    """
    UTC timestamp in ISO-8601 with 'Z' suffix, seconds precision.
    Example: 2026-01-08T17:12:34Z
    """
    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


class PhysicalLocationModel(BaseModel):
    offset: int
    size: int


class CodeViewReport(BaseModel):
    cv_signature: str  # RSDS, NB10
    age: int
    pdb_file_name: str
    guid: Optional[str] = None
    signature: Optional[int] = None


class DebugEntryReport(BaseModel):
    offset: int
    size: int
    debug_type: str
    type_description: str
    fields: Dict[str, int] = Field(default_factory=dict)
    code_view: Optional[CodeViewReport] = None
    physical_locations: List[PhysicalLocationModel] = Field(default_factory=list)


class DebugReport(BaseModel):
    schema_version: str = "1.0"
    timestamp_utc: str = Field(default_factory=utc_now_iso)

    input_path: str
    present: bool
    entries: List[DebugEntryReport] = Field(default_factory=list)
    errors: List[Dict[str, Any]] = Field(default_factory=list)


def entry_report(section: DebugSection) -> DebugEntryReport:
    cv = None
    if section.has_code_view():
        c = section.get_code_view()
        cv = CodeViewReport(
            cv_signature=c.cv_signature,
            age=c.age,
            pdb_file_name=c.pdb_file_name,
            guid=c.guid,
            signature=c.signature,
        )
    return DebugEntryReport(
        offset=section.get_offset(),
        size=section.get_size(),
        debug_type=section.get_debug_type().name,
        type_description=section.get_type_description(),
        fields={k.value: f.value for k, f in section.get_directory_table().items()},
        code_view=cv,
        physical_locations=[PhysicalLocationModel(offset=p.offset, size=p.size) for p in section.get_physical_locations()],
    )


def build_report(input_path: str, result: DebugLoadResult) -> DebugReport:
    return DebugReport(
        input_path=input_path,
        present=result.present,
        entries=[entry_report(s) for s in result.sections],
        errors=result.errors,
    )
