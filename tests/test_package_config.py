from pathlib import Path

import pytest

from shipwright.generator import ResolvedDependency
from shipwright.package_config import MANIFEST_FILE, ConfigOptions, config_packages

PACKAGE = "test_pack"

MANIFEST = """[package]
name = "test_pack"
version = "0.1.0"

[dependencies]
fmt = "9.1.0"
"""


def _read(path: Path) -> str:
    return path.read_bytes().decode("utf-8")


@pytest.fixture
def deps_dir(tmp_path):
    directory = tmp_path / "deps"
    (directory / PACKAGE / "include").mkdir(parents=True)
    return directory


def _own_deps():
    return [ResolvedDependency(PACKAGE, PACKAGE, f"cppship::{PACKAGE}")]


def _all_deps():
    return [*_own_deps(), ResolvedDependency("fmt", "fmt", "fmt::fmt")]


def _replacer(deps_dir):
    return lambda text: text.replace(deps_dir.as_posix(), "${CMAKE_BINARY_DIR}/deps")


def test_header_only(deps_dir):
    deps = _own_deps()
    config_packages(deps, deps, ConfigOptions(deps_dir=deps_dir, post_process=_replacer(deps_dir)))

    config = deps_dir / f"{PACKAGE}-config.cmake"
    assert config.exists()
    assert _read(config) == (
        "# header only lib config generated by shipwright\n"
        "add_library(cppship::test_pack INTERFACE IMPORTED)\n"
        "target_include_directories(cppship::test_pack INTERFACE ${CMAKE_SOURCE_DIR}/deps/test_pack/include)\n"
    )


def test_header_only_custom_cmake_deps_dir(deps_dir, tmp_path):
    out_dir = tmp_path / "cmake"
    deps = _own_deps()
    config_packages(
        deps, deps, ConfigOptions(deps_dir=deps_dir, out_dir=out_dir, cmake_deps_dir="/opt/deps")
    )

    text = _read(out_dir / f"{PACKAGE}-config.cmake")
    assert "INTERFACE /opt/deps/test_pack/include)" in text
    assert not (deps_dir / f"{PACKAGE}-config.cmake").exists()


def test_package_header_only(deps_dir):
    (deps_dir / PACKAGE / MANIFEST_FILE).write_text(MANIFEST)

    config_packages(
        _own_deps(), _all_deps(), ConfigOptions(deps_dir=deps_dir, post_process=_replacer(deps_dir))
    )

    assert _read(deps_dir / f"{PACKAGE}-config.cmake") == """
# LIB
add_library(test_pack_lib INTERFACE)

target_include_directories(test_pack_lib INTERFACE ${CMAKE_BINARY_DIR}/deps/test_pack/include)

target_link_libraries(test_pack_lib INTERFACE fmt::fmt)

add_library(cppship::test_pack ALIAS test_pack_lib)
"""


def test_package_lib(deps_dir):
    package_dir = deps_dir / PACKAGE
    lib_dir = package_dir / "lib"
    lib_dir.mkdir()
    (package_dir / MANIFEST_FILE).write_text(MANIFEST)
    for name in ("a.cpp", "b.cpp", "a_test.cpp"):
        (lib_dir / name).touch()

    config_packages(
        _own_deps(), _all_deps(), ConfigOptions(deps_dir=deps_dir, post_process=_replacer(deps_dir))
    )

    assert _read(deps_dir / f"{PACKAGE}-config.cmake") == """
# LIB
add_library(test_pack_lib ${CMAKE_BINARY_DIR}/deps/test_pack/lib/a.cpp
${CMAKE_BINARY_DIR}/deps/test_pack/lib/b.cpp)

target_include_directories(test_pack_lib PUBLIC ${CMAKE_BINARY_DIR}/deps/test_pack/include)

target_link_libraries(test_pack_lib PUBLIC fmt::fmt)

add_library(cppship::test_pack ALIAS test_pack_lib)
"""


def test_components_are_linked(deps_dir):
    (deps_dir / PACKAGE / MANIFEST_FILE).write_text(
        """[package]
name = "test_pack"
version = "0.1.0"

[dependencies]
boost = { version = "1.81.0", components = ["headers"] }
"""
    )
    all_deps = [
        *_own_deps(),
        ResolvedDependency("boost", "Boost", "boost::boost", ("Boost::headers",)),
    ]

    config_packages(_own_deps(), all_deps, ConfigOptions(deps_dir=deps_dir))

    text = _read(deps_dir / f"{PACKAGE}-config.cmake")
    assert "target_link_libraries(test_pack_lib INTERFACE Boost::headers)\n" in text


def test_workspace_cannot_be_dependency(deps_dir):
    (deps_dir / PACKAGE / MANIFEST_FILE).write_text('[workspace]\nmembers = ["a"]\n')

    with pytest.raises(ValueError, match="workspace"):
        config_packages(_own_deps(), _all_deps(), ConfigOptions(deps_dir=deps_dir))


def test_package_without_lib(tmp_path):
    deps_dir = tmp_path / "deps"
    (deps_dir / PACKAGE / "src").mkdir(parents=True)
    (deps_dir / PACKAGE / MANIFEST_FILE).write_text(MANIFEST)

    with pytest.raises(ValueError, match="have no lib target"):
        config_packages(_own_deps(), _all_deps(), ConfigOptions(deps_dir=deps_dir))


def test_unresolved_dependency(deps_dir):
    (deps_dir / PACKAGE / MANIFEST_FILE).write_text(MANIFEST)

    with pytest.raises(LookupError):
        config_packages(_own_deps(), _own_deps(), ConfigOptions(deps_dir=deps_dir))