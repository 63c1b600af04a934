# shipwright

shipwright writes CMake build scripts for C++ packages. It also builds the command lines that
configure, build and test such a package with Conan, CMake and CTest.

It is a library. It has no command-line entry point.

## Modules

- `shipwright.predicate`: platform and compiler conditions. It provides the enums `Os` (`windows`,
  `macos`, `linux`) and `Compiler` (`gcc`, `msvc`, `clang`, `apple_clang`), and the combinators
  `CfgAll`, `CfgAny` and `CfgNot`. `generate_predicate` turns a condition into a CMake `if()`
  expression.
- `shipwright.targets`: `CmakeBin` and `CmakeLib` return the CMake text for an executable or a
  library from `build()`. A `CmakeLib` with no sources is an `INTERFACE` library. A `CmakeBin` with
  no sources raises `ValueError`. `Dep` names a CMake package and the targets to link from it.
  `NameTargetMapper` gives binaries, tests, examples and benches their target names.
- `shipwright.generator`: `CmakeGenerator` writes the CMake text for one package. It covers the
  profile options (`Profile`, `ProfileConfig`, `ConditionalConfig`, `ProfileOptions`), the library,
  binaries, benches, examples, tests and target groups. `SimpleGenerator` adds a project-level
  footer for a standalone package. `WorkspaceGenerator` passes the configuration of each added
  package to a handler that you supply and writes a top-level file that includes them all.
  `resolve_deps` matches `DeclaredDependency` entries against `ResolvedDependency` entries and
  returns `Dep` objects. It raises `LookupError` for a dependency that was not resolved and
  `ValueError` for an unknown component.
- `shipwright.package_config`: `config_packages` writes a `<package>-config.cmake` file for each
  dependency fetched from source.
  - A package directory without a `shipwright.toml` gets an imported header-only target.
  - Otherwise its `lib/` sources (files named `*_test.cpp` are left out) and its `include/`
    directory become a library. An alias named after the dependency's CMake target points to that
    library.
  - `ConfigOptions` sets the directories and an optional `post_process` function, which takes the
    generated text and returns the text to write.
- `shipwright.build`:
  - `generate_conanfile` returns the text of a `conanfile.txt` for a list of `ConanRequirement`s.
  - `rewrite_conan_profile` adapts a default Conan profile to a build profile.
  - `cmake_build_command` returns the `cmake --build` command line. `cmake_build` runs it through a
    shell, or through a runner you pass in, and returns the exit status.
  - `ctest_command` returns the `ctest` command line for a `TestOptions`.
  - An unknown `--package` raises `InvalidCmdOption`.

## Example

```python
from shipwright.predicate import CfgAll, CfgNot, Compiler, Os, generate_predicate
from shipwright.targets import CmakeBin, Dep

print(generate_predicate(CfgAll([Os.windows, CfgNot(Compiler.msvc)])))
# (CMAKE_SYSTEM_NAME STREQUAL "Windows" AND NOT (CMAKE_CXX_COMPILER_ID STREQUAL "MSVC"))

print(CmakeBin(
    name="app_bin",
    sources=["src/main.cpp"],
    deps=[Dep("fmt", ["fmt::fmt"])],
    need_install=True,
).build())
```

## What it does not do

shipwright does not do the following:

- It does not discover a package's layout on disk.
- It does not parse full package manifests.
- It does not resolve or download dependencies.
- It does not run Conan or CMake configuration steps.

The generators take layout and manifest objects that you build yourself, with the attributes they
read. Only `cmake_build` runs a command.

## Running the tests

```
pip install -e .[test]
pytest
```