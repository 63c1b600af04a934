import pytest

from shipwright.predicate import (
    CfgAll,
    CfgAny,
    CfgNot,
    Compiler,
    Os,
    generate_predicate,
)

WINDOWS = 'CMAKE_SYSTEM_NAME STREQUAL "Windows"'
LINUX = 'CMAKE_SYSTEM_NAME STREQUAL "Linux"'
MSVC = 'CMAKE_CXX_COMPILER_ID STREQUAL "MSVC"'


def test_option():
    assert generate_predicate(Os.windows) == WINDOWS
    assert generate_predicate(Compiler.msvc) == MSVC


@pytest.mark.parametrize(
    "option, expected",
    [
        (Os.macos, 'CMAKE_SYSTEM_NAME STREQUAL "Darwin"'),
        (Os.linux, LINUX),
        (Compiler.gcc, 'CMAKE_CXX_COMPILER_ID STREQUAL "GNU"'),
        (Compiler.clang, 'CMAKE_CXX_COMPILER_ID STREQUAL "Clang"'),
        (Compiler.apple_clang, 'CMAKE_CXX_COMPILER_ID STREQUAL "AppleClang"'),
    ],
)
def test_all_options(option, expected):
    assert generate_predicate(option) == expected


def test_not():
    assert generate_predicate(CfgNot(Os.windows)) == f"NOT ({WINDOWS})"
    assert generate_predicate(CfgNot(Compiler.msvc)) == f"NOT ({MSVC})"


def test_all():
    assert generate_predicate(CfgAll()) == ""
    assert generate_predicate(CfgAll([Os.windows])) == WINDOWS
    assert generate_predicate(CfgAll([Os.windows, Compiler.msvc])) == f"({WINDOWS} AND {MSVC})"


def test_any():
    assert generate_predicate(CfgAny()) == ""
    assert generate_predicate(CfgAny([Os.windows])) == WINDOWS
    assert generate_predicate(CfgAny([Os.windows, Os.linux])) == f"({WINDOWS} OR {LINUX})"


def test_nested():
    assert (
        generate_predicate(CfgAny([Os.windows, CfgNot(Os.linux)]))
        == f"({WINDOWS} OR NOT ({LINUX}))"
    )
    assert (
        generate_predicate(CfgAll([Os.windows, CfgNot(Os.linux)]))
        == f"({WINDOWS} AND NOT ({LINUX}))"
    )


def test_predicates_compare_by_value():
    assert CfgAll([Os.linux, Compiler.gcc]) == CfgAll((Os.linux, Compiler.gcc))
    assert CfgNot(Os.linux) == CfgNot(Os.linux)


def test_unsupported_predicate():
    with pytest.raises(TypeError):
        generate_predicate("linux")