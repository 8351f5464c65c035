"""
Best-effort filesystem companions for tracks and events.

Each track gets ``tracks/{folder}/.track-info.json`` and each event gets
``{mediaPath}/info.json`` under the workspace root. Failures are logged at
WARNING and reported as ``False``; they never fail the operation that
triggered them.
"""

import json
import logging
from pathlib import Path
from typing import Any

from core.timeline.naming import track_folder
from core.timeline.timing import to_iso
from core.timeline.types import ScheduledEvent, Track

logger = logging.getLogger(__name__)

TRACK_INFO_FILE = ".track-info.json"
EVENT_INFO_FILE = "info.json"


def _write_json(folder: Path, file_name: str, payload: dict[str, Any]) -> None:
    folder.mkdir(parents=True, exist_ok=True)
    (folder / file_name).write_text(json.dumps(payload, indent=2), encoding="utf-8")


def write_track_sidecar(workspace: Path, track: Track) -> bool:
    """
    Create the track folder and its ``.track-info.json``.

    Returns:
        True when both were written, False if anything failed
    """
    relative = track_folder(track.name)
    folder = workspace / relative
    info = {
        "id": track.id,
        "name": track.name,
        "type": track.type,
        "order": track.order,
        "createdAt": to_iso(track.created_at),
        "folderName": relative.name,
    }
    try:
        _write_json(folder, TRACK_INFO_FILE, info)
    except Exception as e:
        logger.warning("Could not create track folder %s: %s", folder, e)
        return False

    logger.debug("Created track folder %s", folder)
    return True


def write_event_sidecar(workspace: Path, event: ScheduledEvent) -> bool:
    """
    Create the event media folder and its ``info.json``.

    Returns:
        True when both were written, False if anything failed
    """
    folder = workspace / event.media_path
    info = {
        "eventId": event.id,
        "eventName": event.name,
        "trackId": event.track_id,
        "createdAt": to_iso(event.created_at),
    }
    try:
        _write_json(folder, EVENT_INFO_FILE, info)
    except Exception as e:
        logger.warning("Could not create media folder %s: %s", folder, e)
        return False

    logger.debug("Created media folder %s", folder)
    return True
