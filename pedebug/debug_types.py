from __future__ import annotations

import enum
from typing import Dict, Optional


class DebugType(enum.Enum):
    """IMAGE_DEBUG_TYPE_* categories with their canonical descriptions."""

    UNKNOWN = (0, "An unknown value that is ignored by all tools.")
    COFF = (
        1,
        "The COFF debug information (line numbers, symbol table, and string table). "
        "This type of debug information is also pointed to by fields in the file headers.",
    )
    CODEVIEW = (2, "The Visual C++ debug information.")
    FPO = (
        3,
        "The frame pointer omission (FPO) information. This information tells the debugger "
        "how to interpret nonstandard stack frames, which use the EBP register for a purpose "
        "other than as a frame pointer.",
    )
    MISC = (4, "The location of DBG file.")
    EXCEPTION = (5, "A copy of .pdata section.")
    FIXUP = (6, "Reserved.")
    OMAP_TO_SRC = (7, "The mapping from an RVA in image to an RVA in source image.")
    OMAP_FROM_SRC = (8, "The mapping from an RVA in source image to an RVA in image.")
    BORLAND = (9, "Reserved for Borland.")
    RESERVED10 = (10, "Reserved.")
    CLSID = (11, "Reserved.")
    VC_FEATURE = (12, "Visual C++ feature counts (pre-VC, C, C++, /GS, /sdl).")
    POGO = (13, "Profile guided optimization (POGO) information.")
    ILTCG = (14, "Incremental link-time code generation information.")
    MPX = (15, "Intel MPX information.")
    REPRO = (
        16,
        "PE determinism or reproducibility. The time date stamp fields hold a hash "
        "instead of a timestamp.",
    )
    EX_DLLCHARACTERISTICS = (20, "Extended DLL characteristics bits.")

    def __init__(self, code: int, description: str) -> None:
        self.code = code
        self.description = description

    @classmethod
    def for_value(cls, value: int) -> "DebugType":
        found = resolve_debug_type(value)
        if found is None:
            raise ValueError(f"no debug type for value {value}")
        return found


_BY_CODE: Dict[int, DebugType] = {t.code: t for t in DebugType}


def resolve_debug_type(value: int) -> Optional[DebugType]:
    """Return the category for value, or None when the code is not recognized."""
    return _BY_CODE.get(int(value))
