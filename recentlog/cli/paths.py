"""Path helpers used when recording and printing entries."""

import os
from pathlib import Path
from typing import Optional, Union


def canonicalize(path: Union[str, Path]) -> Optional[Path]:
    """
    Resolve a path to an existing file or directory.

    Args:
        path: Path as given by the user

    Returns:
        Absolute path with symlinks resolved, or None if the path does not
        exist or is neither a file nor a directory
    """
    try:
        resolved = Path(path).expanduser().resolve(strict=True)
    except (OSError, RuntimeError):
        return None

    if not (resolved.is_file() or resolved.is_dir()):
        return None

    return resolved


def home_directory() -> Path:
    """Return the canonical home directory."""
    home = Path.home()
    try:
        return home.resolve(strict=True)
    except OSError:
        return home


def shorten(entry: str, home: Optional[Path] = None) -> str:
    """
    Display an entry relative to the home directory when it lives under it.

    Args:
        entry: Absolute path
        home: Home directory, defaults to the canonical home of the user

    Returns:
        "~" for the home directory itself, "~/..." below it, otherwise the
        entry unchanged
    """
    home = home if home is not None else home_directory()

    try:
        relative = Path(entry).relative_to(home)
    except ValueError:
        return entry

    if relative == Path("."):
        return "~"
    return f"~/{relative}"


def to_entry(path: Union[str, Path]) -> bytes:
    """Encode a path as raw entry bytes."""
    return os.fsencode(path)
