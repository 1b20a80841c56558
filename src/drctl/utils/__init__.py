"""Shared helpers with no drctl-specific dependencies."""

from drctl.utils.fs import atomic_write, is_within, posix_relative

__all__ = ["atomic_write", "is_within", "posix_relative"]
