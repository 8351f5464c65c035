"""SQLite-backed timeline store using the standard-library driver.

Local-first: the database file lives under the workspace
(``.timeline/workspace.db``) and never leaves the machine. The table layout
and column encodings match what the SQLAlchemy models write on SQLite, so
either backend can open a file created by the other:

    timestamps  TEXT, naive UTC ``YYYY-MM-DD HH:MM:SS.ffffff``
    booleans    INTEGER 0/1
    JSON        TEXT (``json.dumps``)

Schema (auto-created on first use): see ``_SCHEMA_SQL``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any

from core.timeline.errors import StorageError
from core.timeline.timing import parse_timestamp, to_storage
from core.timeline.types import ScheduledEvent, Track, TrackType
from db.store import TrackAlreadyExists, check_event_changes

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS timeline_tracks (
    seq         INTEGER PRIMARY KEY AUTOINCREMENT,
    id          VARCHAR(36) NOT NULL UNIQUE,
    name        VARCHAR(100) NOT NULL,
    type        VARCHAR(16) NOT NULL,
    "order"     INTEGER NOT NULL DEFAULT 0,
    created_at  DATETIME NOT NULL,
    updated_at  DATETIME NOT NULL,
    CONSTRAINT uq_timeline_track_name_type UNIQUE (name, type)
);
CREATE INDEX IF NOT EXISTS ix_timeline_tracks_order ON timeline_tracks ("order");

CREATE TABLE IF NOT EXISTS timeline_automations (
    id              VARCHAR(36) PRIMARY KEY,
    track_id        VARCHAR(36) NOT NULL REFERENCES timeline_tracks (id) ON DELETE CASCADE,
    name            VARCHAR(200) NOT NULL,
    description     TEXT,
    "trigger"       JSON NOT NULL DEFAULT '{}',
    actions         JSON NOT NULL DEFAULT '{}',
    enabled         BOOLEAN NOT NULL DEFAULT 1,
    check_prompt    TEXT,
    check_interval  VARCHAR(64),
    do_prompt       TEXT,
    agent           VARCHAR(128),
    platform        VARCHAR(32),
    state_folder    VARCHAR(512),
    end_condition   JSON,
    stats           JSON NOT NULL DEFAULT '{}',
    last_run        DATETIME,
    next_run        DATETIME,
    created_at      DATETIME NOT NULL,
    updated_at      DATETIME NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_timeline_automations_track_id ON timeline_automations (track_id);
CREATE INDEX IF NOT EXISTS ix_timeline_automations_enabled ON timeline_automations (enabled);

CREATE TABLE IF NOT EXISTS timeline_events (
    id                 VARCHAR(36) PRIMARY KEY,
    track_id           VARCHAR(36) NOT NULL REFERENCES timeline_tracks (id) ON DELETE CASCADE,
    name               VARCHAR(200) NOT NULL,
    platform           VARCHAR(32) NOT NULL,
    prompt             TEXT NOT NULL,
    scheduled_time     DATETIME NOT NULL,
    generation_time    DATETIME NOT NULL,
    post_time          DATETIME,
    agent              VARCHAR(128) NOT NULL,
    content_generated  BOOLEAN NOT NULL DEFAULT 0,
    approved           BOOLEAN NOT NULL DEFAULT 0,
    posted             BOOLEAN NOT NULL DEFAULT 0,
    approval_via       VARCHAR(64) NOT NULL DEFAULT 'manual',
    mcp_tools          JSON NOT NULL DEFAULT '[]',
    metadata           JSON NOT NULL DEFAULT '{}',
    automation_id      VARCHAR(36) REFERENCES timeline_automations (id) ON DELETE SET NULL,
    event_type         VARCHAR(32) NOT NULL DEFAULT 'scheduled',
    state_folder       VARCHAR(512),
    media_path         VARCHAR(512) NOT NULL,
    created_at         DATETIME NOT NULL,
    updated_at         DATETIME NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_timeline_events_track_id ON timeline_events (track_id);
CREATE INDEX IF NOT EXISTS ix_timeline_events_platform ON timeline_events (platform);
CREATE INDEX IF NOT EXISTS ix_timeline_events_posted ON timeline_events (posted);
CREATE INDEX IF NOT EXISTS ix_timeline_events_scheduled_time ON timeline_events (scheduled_time);
CREATE INDEX IF NOT EXISTS ix_timeline_events_generation_time ON timeline_events (generation_time);
CREATE INDEX IF NOT EXISTS ix_timeline_events_media_path ON timeline_events (media_path);
CREATE INDEX IF NOT EXISTS ix_timeline_events_type_time ON timeline_events (event_type, scheduled_time);
"""

_BOOL_FIELDS = frozenset({"approved", "content_generated"})
_TIME_FIELDS = frozenset({"scheduled_time", "generation_time", "updated_at"})


def _row_to_track(row: sqlite3.Row) -> Track:
    return Track(
        id=row["id"],
        name=row["name"],
        type=row["type"],
        order=row["order"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


def _row_to_event(row: sqlite3.Row) -> ScheduledEvent:
    return ScheduledEvent(
        id=row["id"],
        track_id=row["track_id"],
        name=row["name"],
        prompt=row["prompt"],
        platform=row["platform"],
        scheduled_time=parse_timestamp(row["scheduled_time"]),
        generation_time=parse_timestamp(row["generation_time"]),
        agent=row["agent"],
        media_path=row["media_path"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
        content_generated=bool(row["content_generated"]),
        approved=bool(row["approved"]),
        posted=bool(row["posted"]),
        event_type=row["event_type"],
        metadata=json.loads(row["metadata"] or "{}"),
        approval_via=row["approval_via"],
        mcp_tools=tuple(json.loads(row["mcp_tools"] or "[]")),
    )


class SqliteTimelineStore:
    """stdlib ``sqlite3`` implementation of ``TimelineStore``.

    One connection per call, WAL journal, foreign keys on. Suitable for the
    single-process MCP server.

    Args:
        db_path: Path to the SQLite database file. Created on first use.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            with closing(self._connect()) as conn, conn:
                yield conn
        except sqlite3.IntegrityError:
            raise
        except (sqlite3.Error, OSError) as exc:
            logger.error("Storage failure: %s", exc)
            raise StorageError(f"Storage failure: {exc}") from exc

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            conn.executescript(_SCHEMA_SQL)

    # ------------------------------------------------------------------ #
    # Tracks                                                               #
    # ------------------------------------------------------------------ #

    def find_track(self, name: str, track_type: TrackType) -> Track | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM timeline_tracks WHERE name = ? AND type = ? LIMIT 1",
                (name, track_type),
            ).fetchone()
        return _row_to_track(row) if row else None

    def get_track(self, track_id: str) -> Track | None:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM timeline_tracks WHERE id = ?", (track_id,)).fetchone()
        return _row_to_track(row) if row else None

    def max_track_order(self) -> int | None:
        with self._transaction() as conn:
            row = conn.execute('SELECT MAX("order") FROM timeline_tracks').fetchone()
        return row[0]

    def insert_track(self, track: Track) -> None:
        try:
            with self._transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO timeline_tracks (id, name, type, "order", created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        track.id,
                        track.name,
                        track.type,
                        track.order,
                        to_storage(track.created_at),
                        to_storage(track.updated_at),
                    ),
                )
        except sqlite3.IntegrityError:
            raise TrackAlreadyExists(track.name, track.type) from None

    def list_tracks(self, track_type: TrackType, limit: int, offset: int) -> list[Track]:
        with self._transaction() as conn:
            rows = conn.execute(
                """
                SELECT * FROM timeline_tracks
                WHERE type = ?
                ORDER BY "order" ASC, seq ASC
                LIMIT ? OFFSET ?
                """,
                (track_type, limit, offset),
            ).fetchall()
        return [_row_to_track(row) for row in rows]

    def count_tracks(self, track_type: TrackType) -> int:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM timeline_tracks WHERE type = ?", (track_type,)
            ).fetchone()
        return int(row[0])

    def delete_track(self, track_id: str) -> int:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM timeline_events WHERE track_id = ?", (track_id,)
            ).fetchone()
            conn.execute("DELETE FROM timeline_tracks WHERE id = ?", (track_id,))
        return int(row[0])

    # ------------------------------------------------------------------ #
    # Events                                                               #
    # ------------------------------------------------------------------ #

    def insert_event(self, event: ScheduledEvent) -> None:
        try:
            with self._transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO timeline_events
                        (id, track_id, name, platform, prompt, scheduled_time,
                         generation_time, agent, content_generated, approved, posted,
                         approval_via, mcp_tools, metadata, event_type, media_path,
                         created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        event.id,
                        event.track_id,
                        event.name,
                        event.platform,
                        event.prompt,
                        to_storage(event.scheduled_time),
                        to_storage(event.generation_time),
                        event.agent,
                        int(event.content_generated),
                        int(event.approved),
                        int(event.posted),
                        event.approval_via,
                        json.dumps(list(event.mcp_tools)),
                        json.dumps(event.metadata),
                        event.event_type,
                        event.media_path,
                        to_storage(event.created_at),
                        to_storage(event.updated_at),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise StorageError(f"Could not insert event {event.id}: {exc}") from exc

    def get_event(self, event_id: str) -> ScheduledEvent | None:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM timeline_events WHERE id = ?", (event_id,)).fetchone()
        return _row_to_event(row) if row else None

    def list_events(
        self,
        *,
        event_type: str = "scheduled",
        track_id: str | None = None,
        platform: str | None = None,
    ) -> list[tuple[ScheduledEvent, str]]:
        clauses = ["e.event_type = ?"]
        args: list[Any] = [event_type]
        if track_id is not None:
            clauses.append("e.track_id = ?")
            args.append(track_id)
        if platform is not None:
            clauses.append("e.platform = ?")
            args.append(platform)

        sql = (
            "SELECT e.*, t.name AS track_name FROM timeline_events e "
            "JOIN timeline_tracks t ON t.id = e.track_id "
            f"WHERE {' AND '.join(clauses)} "
            "ORDER BY e.scheduled_time ASC, e.created_at ASC"
        )
        with self._transaction() as conn:
            rows = conn.execute(sql, args).fetchall()
        return [(_row_to_event(row), row["track_name"]) for row in rows]

    def update_event(self, event_id: str, changes: Mapping[str, Any]) -> ScheduledEvent | None:
        check_event_changes(changes)
        columns = []
        args: list[Any] = []
        for field_name, value in changes.items():
            if field_name in _TIME_FIELDS:
                value = to_storage(value)
            elif field_name in _BOOL_FIELDS:
                value = int(value)
            columns.append(f"{field_name} = ?")
            args.append(value)

        with self._transaction() as conn:
            if columns:
                cur = conn.execute(
                    f"UPDATE timeline_events SET {', '.join(columns)} WHERE id = ?",
                    (*args, event_id),
                )
                if cur.rowcount == 0:
                    return None
            row = conn.execute("SELECT * FROM timeline_events WHERE id = ?", (event_id,)).fetchone()
        return _row_to_event(row) if row else None

    def delete_event(self, event_id: str) -> bool:
        with self._transaction() as conn:
            cur = conn.execute("DELETE FROM timeline_events WHERE id = ?", (event_id,))
        return cur.rowcount > 0

    def close(self) -> None:
        # Connections are per call; nothing is held open between operations
        logger.debug("SqliteTimelineStore closed (%s)", self._db_path)
