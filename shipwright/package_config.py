"""CMake package configuration files for source dependencies."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional, Union

from .generator import DeclaredDependency, ResolvedDependency, resolve_deps
from .targets import CmakeLib

PathType = Union[str, PathLike]

MANIFEST_FILE = "shipwright.toml"
DEFAULT_CMAKE_DEPS_DIR = "${CMAKE_SOURCE_DIR}/deps"

_SOURCE_SUFFIXES = (".cpp",)
_TEST_SUFFIX = "_test"


@dataclass
class ConfigOptions:
    """Where dependencies live and where their CMake configs are written."""

    deps_dir: PathType
    out_dir: Optional[PathType] = None
    cmake_deps_dir: str = DEFAULT_CMAKE_DEPS_DIR
    post_process: Optional[Callable[[str], str]] = None


@dataclass
class _PackageManifest:
    is_workspace: bool = False
    dependencies: list = field(default_factory=list)


# The manifest reader only understands what a dependency's configuration
# needs: table headers and the entries of the [dependencies] table.
_HEADER = re.compile(r"^\[\s*([^\[\]]+?)\s*\]\s*(?:#.*)?$")
_KEY_VALUE = re.compile(r"""^("[^"]*"|'[^']*'|[A-Za-z0-9_\-]+)\s*=\s*(.*)$""")
_COMPONENTS = re.compile(r"\bcomponents\s*=\s*\[([^\]]*)\]")
_QUOTED = re.compile(r""""([^"]*)"|'([^']*)'""")


def _read_manifest(path: Path) -> _PackageManifest:
    manifest = _PackageManifest()
    table: Optional[str] = None

    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        header = _HEADER.match(line)
        if header:
            table = header.group(1)
            if table == "workspace":
                manifest.is_workspace = True
            continue

        if table != "dependencies":
            continue

        entry = _KEY_VALUE.match(line)
        if entry is None:
            continue

        key, value = entry.groups()
        components: tuple = ()
        if value.lstrip().startswith("{"):
            found = _COMPONENTS.search(value)
            if found:
                components = tuple(a or b for a, b in _QUOTED.findall(found.group(1)))
        manifest.dependencies.append(DeclaredDependency(key.strip("\"'"), components))

    return manifest


def _lib_target(package_dir: Path, package: str) -> Optional[CmakeLib]:
    lib_dir = package_dir / "lib"
    sources = []
    if lib_dir.is_dir():
        sources = sorted(
            path
            for path in lib_dir.rglob("*")
            if path.is_file()
            and path.suffix in _SOURCE_SUFFIXES
            and not path.stem.endswith(_TEST_SUFFIX)
        )

    include_dir = package_dir / "include"
    if not sources and not include_dir.is_dir():
        return None

    return CmakeLib(name=package, include_dirs=(include_dir,), sources=tuple(sources))


def _as_list(deps) -> list:
    if isinstance(deps, Mapping):
        return list(deps.values())
    return list(deps)


def _header_only_config(dep: ResolvedDependency, cmake_deps_dir: str) -> str:
    return (
        "# header only lib config generated by shipwright\n"
        f"add_library({dep.cmake_target} INTERFACE IMPORTED)\n"
        f"target_include_directories({dep.cmake_target} INTERFACE "
        f"{cmake_deps_dir}/{dep.package}/include)\n"
    )


def config_packages(
    cppship_deps: Union[Mapping[str, ResolvedDependency], Iterable[ResolvedDependency]],
    all_deps: Union[Mapping[str, ResolvedDependency], Iterable[ResolvedDependency]],
    options: ConfigOptions,
) -> None:
    """Write a ``<package>-config.cmake`` file for every source dependency."""
    deps_dir = Path(options.deps_dir)
    out_dir = Path(options.out_dir) if options.out_dir is not None else deps_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    known = {dep.package: dep for dep in _as_list(all_deps)}

    for dep in _as_list(cppship_deps):
        package_dir = deps_dir / dep.package
        manifest_path = package_dir / MANIFEST_FILE
        config_file = out_dir / f"{dep.package}-config.cmake"

        if not manifest_path.exists():
            config_file.write_text(
                _header_only_config(dep, options.cmake_deps_dir), encoding="utf-8", newline=""
            )
            continue

        manifest = _read_manifest(manifest_path)
        if manifest.is_workspace:
            raise ValueError(f"workspace {dep.package} cannot be a dependency")

        lib = _lib_target(package_dir, dep.package)
        if lib is None:
            raise ValueError(f"package {dep.package} have no lib target")
        lib.deps = resolve_deps(manifest.dependencies, known)

        content = lib.build() + f"\nadd_library({dep.cmake_target} ALIAS {lib.target()})\n"
        if options.post_process is not None:
            content = options.post_process(content)

        config_file.write_text(content, encoding="utf-8", newline="")