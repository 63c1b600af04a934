"""Build orchestration: conan files, cmake build and ctest commands."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from os import PathLike
from typing import Callable, Collection, Iterable, Mapping, Optional, Union

from .generator import (
    GROUP_BENCHES,
    GROUP_BINARIES,
    GROUP_EXAMPLES,
    GROUP_LIBS,
    GROUP_TESTS,
    Profile,
)

PathType = Union[str, PathLike]
Runner = Callable[[str], int]

_log = logging.getLogger(__name__)

_TEST_REQUIRES = ("gtest/1.16.0", "benchmark/1.7.1")


class InvalidCmdOption(ValueError):
    """A command line option has an invalid value."""

    def __init__(self, option: str, message: str) -> None:
        super().__init__(message)
        self.option = option
        self.message = message


class BuildGroup(Enum):
    """A group of targets, valued by its CMake group name."""

    binaries = GROUP_BINARIES
    benches = GROUP_BENCHES
    tests = GROUP_TESTS
    examples = GROUP_EXAMPLES
    lib = GROUP_LIBS


@dataclass
class BuildOptions:
    """What to build and how."""

    profile: Profile = Profile.debug
    max_concurrency: int = field(default_factory=lambda: os.cpu_count() or 1)
    package: Optional[str] = None
    cmake_target: Optional[str] = None
    groups: Collection[BuildGroup] = field(default_factory=frozenset)
    dry_run: bool = False


@dataclass(frozen=True)
class ConanRequirement:
    """A conan package requirement with its options."""

    package: str
    version: str
    options: Mapping[str, str] = field(default_factory=dict)


@dataclass
class TestOptions:
    """Which tests to run."""

    __test__ = False

    profile: Profile = Profile.debug
    name: Optional[str] = None
    name_regex: Optional[str] = None
    package: Optional[str] = None
    rerun_failed: bool = False


def generate_conanfile(
    dependencies: Iterable[ConanRequirement], dev_dependencies: Iterable[ConanRequirement]
) -> str:
    """Return the text of a conanfile.txt for the given requirements."""
    dependencies = list(dependencies)
    dev_dependencies = list(dev_dependencies)

    lines = ["[requires]"]
    lines.extend(f"{dep.package}/{dep.version}" for dep in dependencies)
    lines.extend(["", "[test_requires]", *_TEST_REQUIRES])
    lines.extend(f"{dep.package}/{dep.version}" for dep in dev_dependencies)
    lines.extend(["", "[generators]", "CMakeDeps"])

    all_deps = dependencies + dev_dependencies
    if all_deps:
        lines.extend(["", "[options]"])
        for dep in all_deps:
            lines.extend(
                f"{dep.package}/*:{key}={value}" for key, value in sorted(dep.options.items())
            )

    return "\n".join(lines) + "\n"


def rewrite_conan_profile(source: str, profile: Profile) -> tuple[str, bool]:
    """Adapt a default conan profile to a build profile.

    Returns the rewritten text and whether it already names a compiler.
    """
    lines = source.split("\n")
    if source.endswith("\n"):
        lines.pop()

    output = []
    compiler_detected = False
    for line in lines:
        if line.startswith("build_type"):
            line = f"build_type={profile.value}"
        elif line.startswith("compiler.cppstd"):
            line = "compiler.cppstd=20"
        elif line.startswith("compiler="):
            compiler_detected = True

        if "=" in line:
            _log.info("profile %s", line)
        output.append(line + "\n")

    return "".join(output), compiler_detected


def _group_target(group: BuildGroup, package: Optional[str]) -> str:
    return group.value if package is None else f"{package}_{group.value}"


def cmake_build_command(
    profile_dir: PathType,
    options: BuildOptions,
    active_package: Optional[str] = None,
    packages: Optional[Collection[str]] = None,
) -> str:
    """Return the ``cmake --build`` command line for the given options."""
    if options.package is not None and packages is not None and options.package not in packages:
        raise InvalidCmdOption("package", "invalid package specified by --package")

    command = (
        f"cmake --build {os.fspath(profile_dir)} -j {options.max_concurrency} "
        f"--config {options.profile.value}"
    )

    if options.cmake_target:
        targets = [options.cmake_target]
    else:
        package = options.package if options.package is not None else active_package
        groups = [group for group in BuildGroup if group in options.groups] or [BuildGroup.binaries]
        targets = [_group_target(group, package) for group in groups]

    return command + "".join(f" --target {target}" for target in targets)


def _run_shell(command: str) -> int:
    return subprocess.run(command, shell=True, check=False).returncode


def cmake_build(
    profile_dir: PathType,
    options: BuildOptions,
    active_package: Optional[str] = None,
    packages: Optional[Collection[str]] = None,
    runner: Optional[Runner] = None,
) -> int:
    """Run the cmake build and return its exit status."""
    command = cmake_build_command(profile_dir, options, active_package, packages)
    _log.info("build %s", command)
    return (runner or _run_shell)(command)


def ctest_command(options: TestOptions, cmake_target: Optional[str] = None) -> str:
    """Return the ctest command line selecting the requested tests."""
    if options.name and options.name_regex:
        raise ValueError("testname and -R should not be specified both")

    command = "ctest --output-on-failure"
    if options.rerun_failed:
        command += " --rerun-failed"
    elif cmake_target:
        command += f" -R '^{cmake_target}$'"
    elif options.name_regex:
        command += f" -R {options.name_regex}"
        if options.package:
            command += f" -L '^{options.package}$'"
    elif options.package:
        command += f" -L '^{options.package}$'"

    return command