"""Core components for entry log storage."""

from recentlog.core import log

__all__ = ["log"]
