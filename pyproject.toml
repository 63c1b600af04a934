[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shipwright"
version = "0.8.2"
description = "Generate CMake build scripts and Conan, CMake and CTest commands for C++ packages"
requires-python = ">=3.10"
dependencies = []
keywords = ["cmake", "c++", "build", "conan", "ctest", "codegen"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Programming Language :: C++",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["shipwright"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
