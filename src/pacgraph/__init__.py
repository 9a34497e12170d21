"""Dependency graph and build order resolution for AUR packages."""

__version__ = "0.1.0"
