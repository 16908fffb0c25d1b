"""Integrity checker for spec-first agent/command frameworks."""

__version__ = "1.0.0"
