"""Generate CMake build scripts and Conan, CMake and CTest commands for C++ packages."""

__version__ = "0.8.2"

__all__ = ["__version__"]