"""Port resolution engine for a C/C++ library package manager."""

__version__ = "0.1.0"
