"""
drctl — decision record CLI

File: src/drctl/__init__.py
Last updated: 2026-10-19

Purpose
- Package root. Defines public package-level metadata and import boundaries.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
