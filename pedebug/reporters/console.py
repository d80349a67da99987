from __future__ import annotations
from rich.console import Console
from rich.table import Table
from typing import List

from pedebug.debug_section import DebugSection
from pedebug.debug_types import DebugType

console = Console()


def render_console(input_path: str, sections: List[DebugSection]) -> None:
    t = Table(title=f"Debug Directory: {input_path}")
    t.add_column("#")
    t.add_column("Offset")
    t.add_column("Type")
    t.add_column("PDB", overflow="fold")
    for i, s in enumerate(sections):
        pdb = s.get_code_view().pdb_file_name if s.has_code_view() else ""
        t.add_row(str(i), f"0x{s.get_offset():x}", s.get_debug_type().name, pdb)
    console.print(t)
    for s in sections:
        console.print(s.get_info(), markup=False, highlight=False)


def render_types() -> None:
    t = Table(title="Debug types")
    t.add_column("Code")
    t.add_column("Name")
    t.add_column("Description", overflow="fold")
    for dt in DebugType:
        t.add_row(str(dt.code), dt.name, dt.description)
    console.print(t)
