"""CMakeLists generation for packages and workspaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from os import PathLike
from pathlib import PurePath
from typing import (
    Callable,
    Iterable,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
)

from .predicate import CfgPredicate, generate_predicate
from .targets import CmakeBin, CmakeLib, Dep, NameTargetMapper

PathType = Union[str, PathLike]

GROUP_LIBS = "ship_libs"
GROUP_BINARIES = "ship_binaries"
GROUP_EXAMPLES = "ship_examples"
GROUP_BENCHES = "ship_benches"
GROUP_TESTS = "ship_tests"

_GROUPS = (GROUP_LIBS, GROUP_BINARIES, GROUP_EXAMPLES, GROUP_BENCHES, GROUP_TESTS)


class Profile(Enum):
    """Build profile, valued by its CMake configuration name."""

    debug = "Debug"
    release = "Release"


@dataclass
class ProfileConfig:
    """Compiler and linker settings of one profile."""

    cxxflags: Sequence[str] = field(default_factory=list)
    linkflags: Sequence[str] = field(default_factory=list)
    definitions: Sequence[str] = field(default_factory=list)
    ubsan: Optional[bool] = None
    tsan: Optional[bool] = None
    asan: Optional[bool] = None
    leak: Optional[bool] = None


@dataclass
class ConditionalConfig:
    """Settings applied only when a platform predicate holds."""

    condition: CfgPredicate
    config: ProfileConfig


@dataclass
class ProfileOptions:
    """Unconditional settings plus platform-conditional ones."""

    config: ProfileConfig = field(default_factory=ProfileConfig)
    conditional_configs: Sequence[ConditionalConfig] = field(default_factory=list)


@dataclass
class Target:
    """A buildable unit found in a package layout."""

    name: str
    includes: Iterable[PathType] = field(default_factory=tuple)
    sources: Iterable[PathType] = field(default_factory=tuple)


@dataclass(frozen=True)
class DeclaredDependency:
    """A dependency as declared in a manifest."""

    package: str
    components: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class ResolvedDependency:
    """A dependency with its CMake package and targets known."""

    package: str
    cmake_package: str
    cmake_target: str
    components: Sequence[str] = field(default_factory=tuple)


class _LayoutLike(Protocol):
    lib: Optional[Target]
    binaries: Sequence[Target]
    benches: Sequence[Target]
    examples: Sequence[Target]
    tests: Sequence[Target]


class _ManifestLike(Protocol):
    name: str
    version: str
    cxx_std: object
    default_profile: ProfileOptions
    profiles: Mapping[Profile, ProfileOptions]


Injector = Callable[[_ManifestLike], str]


@dataclass
class GeneratorOptions:
    """Resolved dependencies and an optional dependency injector."""

    deps: Sequence[Dep] = field(default_factory=list)
    dev_deps: Sequence[Dep] = field(default_factory=list)
    injector: Optional[Injector] = None


def resolve_deps(
    declared_deps: Iterable[DeclaredDependency],
    resolved: Union[Mapping[str, ResolvedDependency], Iterable[ResolvedDependency]],
) -> list[Dep]:
    """Map declared dependencies to the CMake targets they require."""
    if not isinstance(resolved, Mapping):
        resolved = {dep.package: dep for dep in resolved}

    result = []
    for dep in declared_deps:
        try:
            resolved_dep = resolved[dep.package]
        except KeyError:
            raise LookupError(f"dependency {dep.package} is not resolved") from None

        if not dep.components:
            result.append(Dep(resolved_dep.cmake_package, (resolved_dep.cmake_target,)))
            continue

        available = set(resolved_dep.components)
        required = []
        for declared in dep.components:
            qualified = f"{resolved_dep.cmake_package}::{declared}"
            if qualified in available:
                required.append(qualified)
            elif declared in available:
                required.append(declared)
            else:
                raise ValueError(f"invalid component {declared} in manifest")

        result.append(Dep(resolved_dep.cmake_package, tuple(required)))

    return result


_SANITIZERS = (
    ("ubsan", "undefined"),
    ("tsan", "thread"),
    ("asan", "address"),
    ("leak", "leak"),
)


def _profile_lines(config: ProfileConfig, indent: str = "", profile: Optional[Profile] = None) -> str:
    def wrap(value: str) -> str:
        return f"$<$<CONFIG:{profile.value}>:{value}>" if profile else value

    lines = [f"{indent}add_compile_options({wrap(opt)})\n" for opt in config.cxxflags]
    for opt in config.linkflags:
        # the unconditional form carries a trailing '>' in its output
        link = wrap(opt) if profile else f"{opt}>"
        lines.append(f"{indent}add_link_options({link})\n")
    lines.extend(f"{indent}add_compile_definitions({wrap(d)})\n" for d in config.definitions)

    for attr, kind in _SANITIZERS:
        if getattr(config, attr):
            flag = wrap(f"-fsanitize={kind}")
            lines.append(f"{indent}add_compile_options({flag})\n")
            lines.append(f"{indent}add_link_options({flag})\n")
            lines.append(f'{indent}message(STATUS "Enable {attr}")\n')

    return "".join(lines)


def _profile_block(options: ProfileOptions, profile: Optional[Profile] = None) -> str:
    parts = [_profile_lines(options.config, "", profile)]
    for conditional in options.conditional_configs:
        parts.append(f"if({generate_predicate(conditional.condition)})\n")
        parts.append(_profile_lines(conditional.config, "\t", profile))
        parts.append("endif()\n\n")
    return "".join(parts)


def _first_source(target: Target) -> str:
    return min(PurePath(p) for p in target.sources).as_posix()


class CmakeGenerator:
    """Generates the CMake configuration of one package."""

    def __init__(
        self,
        layout: _LayoutLike,
        manifest: _ManifestLike,
        options: Optional[GeneratorOptions] = None,
    ) -> None:
        options = options or GeneratorOptions()
        self._layout = layout
        self._manifest = manifest
        self._declared_deps = list(options.deps)
        self._declared_dev_deps = list(options.dev_deps)
        self._injector = options.injector
        self._name = manifest.name

    def build(self) -> str:
        """Return the complete CMake text for the package."""
        self._out: list[str] = []
        self._deps = list(self._declared_deps)
        self._dev_deps = list(self._declared_dev_deps)
        self._lib: Optional[str] = None
        self._binary_targets: set[str] = set()
        self._bench_targets: set[str] = set()
        self._example_targets: set[str] = set()
        self._test_targets: set[str] = set()

        self._emit_header()
        self._emit_dependency_injector()
        self._emit_package_finders()
        self._add_lib_sources()
        self._add_app_sources()
        self._emit_dev_package_finders()
        self._add_benches()
        self._add_examples()
        self._add_test_sources()
        self._emit_footer()

        return "".join(self._out)

    def _emit_header(self) -> None:
        manifest = self._manifest
        self._out.append("cmake_minimum_required(VERSION 3.17)\n")
        self._out.append(f"project({self._name} VERSION {manifest.version})\n\n")

        self._out.append("# cpp options\n")
        self._out.append(_profile_block(manifest.default_profile))

        self._out.append("\n# profile cpp options\n")
        for profile in (Profile.debug, Profile.release):
            options = manifest.profiles.get(profile) or ProfileOptions()
            self._out.append(_profile_block(options, profile))

        std = getattr(manifest.cxx_std, "value", manifest.cxx_std)
        self._out.append(
            "\n# cpp std\n"
            f"set(CMAKE_CXX_STANDARD {std})\n"
            "set(CMAKE_CXX_STANDARD_REQUIRED On)\n"
            "set(CMAKE_CXX_EXTENSIONS Off)\n"
        )

    def _emit_dependency_injector(self) -> None:
        if self._injector is not None:
            self._out.append(self._injector(self._manifest))
            return

        self._out.append(
            "\n# add conan generator folder\n"
            'list(PREPEND CMAKE_PREFIX_PATH "${CONAN_GENERATORS_FOLDER}")\n'
            'list(PREPEND CMAKE_PREFIX_PATH "${CPPSHIP_DEPS_DIR}")\n'
        )

    def _emit_package_finders(self) -> None:
        self._out.append("\n# Package finders\n")
        self._out.extend(f"find_package({dep.cmake_package} REQUIRED)\n" for dep in self._deps)
        if self._deps:
            self._out.append("\n")

        self._out.append(f"add_library({self._name}_deps INTERFACE)\n")
        for dep in self._deps:
            targets = " ".join(dep.cmake_targets)
            self._out.append(f"target_link_libraries({self._name}_deps INTERFACE {targets})\n")

        self._deps = [Dep("", (f"{self._name}_deps",))]

    def _add_lib_sources(self) -> None:
        target = self._layout.lib
        if target is None:
            return

        lib = CmakeLib(
            name=target.name,
            name_alias=target.name,
            include_dirs=tuple(target.includes),
            sources=tuple(target.sources),
            deps=self._deps,
        )
        self._out.append(lib.build())

        # a header-only lib counts as a binary target so that building binaries covers it
        self._lib = lib.target()
        self._binary_targets.add(self._lib)

    def _add_app_sources(self) -> None:
        binaries = self._layout.binaries
        if not binaries:
            return

        macro = self._name.upper().replace("-", "_")
        definitions = [f'{macro}_VERSION="${{PROJECT_VERSION}}"']

        mapper = NameTargetMapper(self._name)
        for binary in binaries:
            target = mapper.binary(binary.name)
            gen = CmakeBin(
                name=target,
                name_alias=binary.name,
                sources=tuple(binary.sources),
                lib=self._lib,
                deps=self._deps,
                definitions=definitions,
                need_install=True,
            )
            self._out.append(gen.build())
            self._binary_targets.add(target)

    def _emit_dev_package_finders(self) -> None:
        self._out.append("\n# Dev Package finders\n")
        self._out.extend(f"find_package({dep.cmake_package} REQUIRED)\n" for dep in self._dev_deps)
        if self._dev_deps:
            self._out.append("\n")

        self._out.append(f"add_library({self._name}_dev_deps INTERFACE)\n")
        for dep in [*self._deps, *self._dev_deps]:
            targets = " ".join(dep.cmake_targets)
            self._out.append(f"target_link_libraries({self._name}_dev_deps INTERFACE {targets})\n")

        self._dev_deps = [Dep("", (f"{self._name}_dev_deps",))]

    def _add_benches(self) -> None:
        benches = self._layout.benches
        if not benches:
            return

        self._out.append("# BENCH\nfind_package(benchmark REQUIRED)\n")

        mapper = NameTargetMapper(self._name)
        deps = [*self._dev_deps, Dep("benchmark", ("benchmark::benchmark",))]
        for bench in benches:
            target = mapper.bench(bench.name)
            gen = CmakeBin(
                name=target,
                sources=tuple(bench.sources),
                lib=self._lib,
                deps=deps,
                runtime_dir="benches",
            )
            self._out.append(gen.build())
            self._bench_targets.add(target)

    def _add_examples(self) -> None:
        mapper = NameTargetMapper(self._name)
        for example in self._layout.examples:
            target = mapper.example(example.name)
            gen = CmakeBin(
                name=target,
                sources=tuple(example.sources),
                lib=self._lib,
                deps=self._dev_deps,
                runtime_dir="examples",
            )
            self._out.append(gen.build())
            self._example_targets.add(target)

    def _add_test_sources(self) -> None:
        tests = self._layout.tests
        if not tests:
            return

        self._out.append("\n# Tests\nfind_package(GTest REQUIRED)\n")

        mapper = NameTargetMapper(self._name)
        for test in tests:
            target = mapper.test(test.name)
            self._out.append(
                "\n"
                f"add_executable({target} {_first_source(test)})\n"
                f"target_link_libraries({target} PRIVATE GTest::gtest_main)\n"
                f"set_target_properties({target} PROPERTIES RUNTIME_OUTPUT_DIRECTORY "
                '"${CMAKE_BINARY_DIR}/tests")\n'
            )
            if self._lib:
                self._out.append(f"target_link_libraries({target} PRIVATE {self._lib})\n")
            for dep in self._dev_deps:
                targets = " ".join(dep.cmake_targets)
                self._out.append(f"target_link_libraries({target} PRIVATE {targets})\n")

            self._out.append(f"add_test(NAME {target} COMMAND {target})\n")
            self._out.append(f"set_tests_properties({target} PROPERTIES LABELS {self._name})\n")
            self._test_targets.add(target)

    def _emit_footer(self) -> None:
        members = {
            GROUP_LIBS: self._lib or "",
            GROUP_BINARIES: " ".join(sorted(self._binary_targets)),
            GROUP_EXAMPLES: " ".join(sorted(self._example_targets)),
            GROUP_BENCHES: " ".join(sorted(self._bench_targets)),
            GROUP_TESTS: " ".join(sorted(self._test_targets)),
        }
        self._out.append("\n# Groups\n")
        self._out.extend(
            f"add_custom_target({self._name}_{group} DEPENDS {members[group]})\n" for group in _GROUPS
        )


class SimpleGenerator:
    """Generates a standalone project for a single package."""

    def __init__(
        self,
        layout: _LayoutLike,
        manifest: _ManifestLike,
        options: Optional[GeneratorOptions] = None,
    ) -> None:
        self._layout = layout
        self._manifest = manifest
        self._options = options or GeneratorOptions()

    def build(self) -> str:
        """Return the package configuration followed by project-level groups."""
        name = self._manifest.name
        parts = [
            CmakeGenerator(self._layout, self._manifest, self._options).build(),
            "# Footer"
            "\n    include(CTest)\n"
            "    enable_testing()\n"
            "\n"
            "    if(CMAKE_EXPORT_COMPILE_COMMANDS)\n"
            "        set(CMAKE_CXX_STANDARD_INCLUDE_DIRECTORIES ${CMAKE_CXX_IMPLICIT_INCLUDE_DIRECTORIES})\n"
            "    endif()\n"
            "\n",
            "\n# Groups\n",
        ]
        parts.extend(f"add_custom_target({group} DEPENDS {name}_{group})\n" for group in _GROUPS)
        return "".join(parts)


class WorkspaceGenerator:
    """Generates a project that includes the configuration of every package."""

    def __init__(self, package_handler: Callable[[str, str], str]) -> None:
        self._package_handler = package_handler
        self._includes: list[str] = []
        self._packages: list[str] = []

    def add(
        self,
        layout: _LayoutLike,
        manifest: _ManifestLike,
        deps: Sequence[Dep] = (),
        dev_deps: Sequence[Dep] = (),
    ) -> None:
        """Generate a package's configuration and include it in the workspace."""
        gen = CmakeGenerator(layout, manifest, GeneratorOptions(deps=list(deps), dev_deps=list(dev_deps)))
        config_path = self._package_handler(manifest.name, gen.build())
        self._includes.append(f"include({config_path})\n")
        self._packages.append(manifest.name)

    def build(self) -> str:
        """Return the workspace CMake text."""
        parts = [
            "cmake_minimum_required(VERSION 3.17)\n",
            "project(shipwright_workspace VERSION 1.0)\n\n",
            *self._includes,
            "\n# Footer"
            "\ninclude(CTest)\n"
            "enable_testing()\n"
            "\n"
            "if(CMAKE_EXPORT_COMPILE_COMMANDS)\n"
            "    set(CMAKE_CXX_STANDARD_INCLUDE_DIRECTORIES ${CMAKE_CXX_IMPLICIT_INCLUDE_DIRECTORIES})\n"
            "endif()\n"
            "\n",
            "\n# Groups\n",
        ]
        for group in _GROUPS:
            members = " ".join(f"{package}_{group}" for package in self._packages)
            parts.append(f"add_custom_target({group} DEPENDS {members})\n")
        return "".join(parts)