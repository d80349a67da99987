import pytest

from pedebug.debug_types import DebugType, resolve_debug_type


def test_resolve_known_codes():
    assert resolve_debug_type(2) is DebugType.CODEVIEW
    assert resolve_debug_type(1) is DebugType.COFF
    assert resolve_debug_type(16) is DebugType.REPRO
    assert resolve_debug_type(0) is DebugType.UNKNOWN


def test_resolve_unknown_codes_returns_none():
    assert resolve_debug_type(0xFFFF) is None
    assert resolve_debug_type(17) is None
    assert resolve_debug_type(2**64 - 1) is None


def test_for_value_raises_for_unknown():
    assert DebugType.for_value(3) is DebugType.FPO
    with pytest.raises(ValueError):
        DebugType.for_value(0xFFFF)


def test_codes_are_unique_and_described():
    codes = [t.code for t in DebugType]
    assert len(codes) == len(set(codes))
    assert all(t.description for t in DebugType)
    assert DebugType.CODEVIEW.description == "The Visual C++ debug information."
