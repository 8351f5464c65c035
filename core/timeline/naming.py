"""Filesystem-safe naming for track folders and event media paths.

Pure functions — the folders themselves are created by the sidecar writer
in ``tools/timeline/sidecar.py``.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import PurePosixPath

from core.timeline.timing import ensure_utc

MAX_FOLDER_NAME_LENGTH = 100
TRACKS_DIR = "tracks"

# Characters rejected by at least one mainstream filesystem
_RESERVED_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE = re.compile(r"\s+")
_LEADING_DOTS = re.compile(r"^\.+")

_FALLBACK_NAME = "untitled"


def sanitize_file_name(name: str) -> str:
    """
    Make ``name`` usable as a single path component.

    Reserved characters become ``-``, whitespace runs become ``_``, leading
    dots are stripped and the result is capped at 100 characters. A name
    that sanitizes to nothing becomes ``untitled``.

    Example:
        >>> sanitize_file_name("..Q3 launch: part 1/2")
        'Q3_launch-_part_1-2'
    """
    cleaned = _RESERVED_CHARS.sub("-", name)
    cleaned = _WHITESPACE.sub("_", cleaned)
    cleaned = _LEADING_DOTS.sub("", cleaned)
    cleaned = cleaned[:MAX_FOLDER_NAME_LENGTH]
    return cleaned or _FALLBACK_NAME


def event_folder_leaf(event_name: str) -> str:
    """Lower-cased, hyphenated folder stem for an event."""
    return sanitize_file_name(event_name).lower().replace("_", "-")


def track_folder(track_name: str) -> PurePosixPath:
    """Relative folder of a track: ``tracks/{sanitized name}``."""
    return PurePosixPath(TRACKS_DIR, sanitize_file_name(track_name))


def build_media_path(track_name: str, event_name: str, created_at: datetime) -> str:
    """
    Relative media folder for a new event.

    Shape: ``tracks/{sanitized-track}/{event-leaf}-{YYYY-MM-DD}`` where the
    date is the UTC creation date.
    """
    date_str = ensure_utc(created_at).date().isoformat()
    leaf = f"{event_folder_leaf(event_name)}-{date_str}"
    return str(track_folder(track_name) / leaf)
