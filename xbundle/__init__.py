"""Readers and writers for PRI files, MSIX package XML parts, and Maven coordinates and version ranges."""

__version__ = "0.1.0"