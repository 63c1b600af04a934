"""CMake target descriptions: executables, libraries and their naming."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from pathlib import PurePath
from typing import Optional, Sequence, Union

PathType = Union[str, PathLike]


def _generic(path: PathType) -> str:
    return PurePath(path).as_posix()


def _sorted_paths(paths) -> list[str]:
    unique = {PurePath(p) for p in paths}
    return [p.as_posix() for p in sorted(unique)]


@dataclass(frozen=True)
class Dep:
    """A CMake package and the targets to link from it."""

    cmake_package: str
    cmake_targets: Sequence[str] = field(default_factory=tuple)


@dataclass
class CmakeBin:
    """An executable target."""

    name: str
    sources: Sequence[PathType]
    name_alias: Optional[str] = None
    include_dir: Optional[str] = None
    lib: Optional[str] = None
    deps: Sequence[Dep] = field(default_factory=tuple)
    definitions: Sequence[str] = field(default_factory=tuple)
    runtime_dir: Optional[str] = None
    need_install: bool = False

    def __post_init__(self) -> None:
        if not self.sources:
            raise ValueError("bin sources are empty")

    def build(self) -> str:
        """Return the CMake statements declaring this executable."""
        sources = "\n".join(_sorted_paths(self.sources))
        parts = ["\n# BIN\n", f"add_executable({self.name} {sources})\n"]

        if self.include_dir:
            parts.append(
                f"\ntarget_include_directories({self.name} PRIVATE "
                f"${{CMAKE_SOURCE_DIR}}/{self.include_dir})\n"
            )

        if self.lib:
            parts.append(f"\ntarget_link_libraries({self.name} PRIVATE {self.lib})\n")

        for dep in self.deps:
            targets = " ".join(dep.cmake_targets)
            parts.append(f"target_link_libraries({self.name} PRIVATE {targets})\n")

        if self.definitions:
            defs = " ".join(self.definitions)
            parts.append(f"\ntarget_compile_definitions({self.name} PRIVATE {defs})\n")

        if self.name_alias or self.runtime_dir:
            parts.append("\n")
            if self.name_alias:
                parts.append(
                    f'set_target_properties({self.name} PROPERTIES OUTPUT_NAME "{self.name_alias}")\n'
                )
            if self.runtime_dir:
                parts.append(
                    f"set_target_properties({self.name} PROPERTIES RUNTIME_OUTPUT_DIRECTORY "
                    f'"${{CMAKE_BINARY_DIR}}/{self.runtime_dir}")\n'
                )

        if self.need_install:
            parts.append(f"\ninstall(TARGETS {self.name})\n")

        return "".join(parts)


@dataclass
class CmakeLib:
    """A library target; without sources it is an interface library."""

    name: str
    name_alias: Optional[str] = None
    include_dirs: Sequence[PathType] = field(default_factory=tuple)
    sources: Sequence[PathType] = field(default_factory=tuple)
    deps: Sequence[Dep] = field(default_factory=tuple)
    definitions: Sequence[str] = field(default_factory=tuple)

    def target(self) -> str:
        """The CMake target name of the library."""
        return f"{self.name}_lib"

    def is_interface(self) -> bool:
        """Whether the library has no sources to compile."""
        return not self.sources

    def build(self) -> str:
        """Return the CMake statements declaring this library."""
        lib_name = self.target()
        parts = ["\n# LIB\n"]

        if self.is_interface():
            parts.append(f"add_library({lib_name} INTERFACE)\n")
        else:
            sources = "\n".join(sorted({_generic(p) for p in self.sources}))
            parts.append(f"add_library({lib_name} {sources})\n")

        if self.name_alias:
            parts.append(
                f'set_target_properties({lib_name} PROPERTIES OUTPUT_NAME "{self.name_alias}")\n'
            )

        lib_type = "INTERFACE" if self.is_interface() else "PUBLIC"
        includes = sorted({_generic(p) for p in self.include_dirs})
        if includes:
            parts.append("\n")
            parts.extend(
                f"target_include_directories({lib_name} {lib_type} {d})\n" for d in includes
            )
            parts.append("\n")

        for dep in self.deps:
            targets = " ".join(dep.cmake_targets)
            parts.append(f"target_link_libraries({lib_name} {lib_type} {targets})\n")

        if self.definitions:
            defs = " ".join(self.definitions)
            parts.append(f"\ntarget_compile_definitions({lib_name} {lib_type} {defs})\n")

        return "".join(parts)


@dataclass(frozen=True)
class NameTargetMapper:
    """Maps target names within a package to CMake target names."""

    package: str

    def binary(self, name: str) -> str:
        return f"{name}_bin"

    def test(self, name: str) -> str:
        return f"{self.package}_{name}_test"

    def example(self, name: str) -> str:
        return f"{self.package}_{name}_example"

    def bench(self, name: str) -> str:
        return f"{self.package}_{name}_bench"