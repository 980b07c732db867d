# bisca_advisor/paths.py
from __future__ import annotations

from pathlib import Path

from .config import load_settings


def results_dir() -> Path:
    """Directory for session snapshots and exported round histories."""
    return load_settings().results_dir


def ensure_results_dir() -> Path:
    """Create the results directory if it does not exist and return it."""
    path = results_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_results_path(path_like: str | Path) -> Path:
    """
    Resolve a user-specified path into the results directory.

    Absolute paths are returned unchanged. Relative paths are anchored inside
    the results directory so exports and snapshots land in one place.
    """
    path = Path(path_like)
    if path.is_absolute():
        return path
    return ensure_results_dir() / path
