"""Platform predicates and their rendering as CMake conditions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class Os(Enum):
    """Target operating system."""

    windows = "windows"
    macos = "macos"
    linux = "linux"


class Compiler(Enum):
    """Target C++ compiler."""

    gcc = "gcc"
    msvc = "msvc"
    clang = "clang"
    apple_clang = "apple-clang"


@dataclass(frozen=True)
class CfgAll:
    """True when every nested predicate holds."""

    predicates: tuple = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "predicates", tuple(self.predicates))


@dataclass(frozen=True)
class CfgAny:
    """True when at least one nested predicate holds."""

    predicates: tuple = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "predicates", tuple(self.predicates))


@dataclass(frozen=True)
class CfgNot:
    """Negation of a nested predicate."""

    predicate: "CfgPredicate"


CfgPredicate = Union[Os, Compiler, CfgAll, CfgAny, CfgNot]

# see the CMake wiki on writing platform checks
_OS_CONDITIONS = {
    Os.windows: 'CMAKE_SYSTEM_NAME STREQUAL "Windows"',
    Os.macos: 'CMAKE_SYSTEM_NAME STREQUAL "Darwin"',
    Os.linux: 'CMAKE_SYSTEM_NAME STREQUAL "Linux"',
}

# see CMAKE_<LANG>_COMPILER_ID in the CMake documentation
_COMPILER_CONDITIONS = {
    Compiler.gcc: 'CMAKE_CXX_COMPILER_ID STREQUAL "GNU"',
    Compiler.msvc: 'CMAKE_CXX_COMPILER_ID STREQUAL "MSVC"',
    Compiler.clang: 'CMAKE_CXX_COMPILER_ID STREQUAL "Clang"',
    Compiler.apple_clang: 'CMAKE_CXX_COMPILER_ID STREQUAL "AppleClang"',
}


def _join(predicates: tuple, operator: str) -> str:
    text = f" {operator} ".join(generate_predicate(p) for p in predicates)
    return f"({text})" if len(predicates) > 1 else text


def generate_predicate(cfg: CfgPredicate) -> str:
    """Render a predicate as a CMake ``if()`` condition."""
    match cfg:
        case Os():
            return _OS_CONDITIONS[cfg]
        case Compiler():
            return _COMPILER_CONDITIONS[cfg]
        case CfgAll(predicates=predicates):
            return _join(predicates, "AND")
        case CfgAny(predicates=predicates):
            return _join(predicates, "OR")
        case CfgNot(predicate=inner):
            return f"NOT ({generate_predicate(inner)})"
    raise TypeError(f"unsupported predicate: {cfg!r}")