"""Command-line interface for recentlog."""
