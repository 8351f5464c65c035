"""
SQLAlchemy-backed timeline store.

Works against any SQLAlchemy URL. The default deployment is an embedded
SQLite file under the workspace; a PostgreSQL URL (``postgresql+psycopg://``)
gives the server-database variant with the same schema.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.timeline.errors import StorageError
from core.timeline.timing import ensure_utc
from core.timeline.types import ScheduledEvent, Track, TrackType
from db.models import Base, EventRecord, TrackRecord
from db.session import make_engine, make_session_factory, session_scope
from db.store import TrackAlreadyExists, check_event_changes

logger = logging.getLogger(__name__)


def _track_from_record(rec: TrackRecord) -> Track:
    return Track(
        id=rec.id,
        name=rec.name,
        type=rec.type,  # type: ignore[arg-type]
        order=rec.order,
        created_at=ensure_utc(rec.created_at),
        updated_at=ensure_utc(rec.updated_at),
    )


def _event_from_record(rec: EventRecord) -> ScheduledEvent:
    return ScheduledEvent(
        id=rec.id,
        track_id=rec.track_id,
        name=rec.name,
        prompt=rec.prompt,
        platform=rec.platform,  # type: ignore[arg-type]
        scheduled_time=ensure_utc(rec.scheduled_time),
        generation_time=ensure_utc(rec.generation_time),
        agent=rec.agent,
        media_path=rec.media_path,
        created_at=ensure_utc(rec.created_at),
        updated_at=ensure_utc(rec.updated_at),
        content_generated=bool(rec.content_generated),
        approved=bool(rec.approved),
        posted=bool(rec.posted),
        event_type=rec.event_type,  # type: ignore[arg-type]
        metadata=dict(rec.metadata_ or {}),
        approval_via=rec.approval_via,
        mcp_tools=tuple(rec.mcp_tools or ()),
    )


class SqlAlchemyTimelineStore:
    """``TimelineStore`` on top of a SQLAlchemy engine.

    The schema is created on construction (``create_all`` is a no-op for
    tables that already exist).

    Args:
        engine: Engine from ``db.session.make_engine``
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = make_session_factory(engine)
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not initialize timeline schema: {exc}") from exc

    @classmethod
    def from_url(
        cls, url: str, *, pool_size: int = 5, max_overflow: int = 10
    ) -> SqlAlchemyTimelineStore:
        return cls(make_engine(url, pool_size=pool_size, max_overflow=max_overflow))

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with session_scope(self._sessions) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Storage failure: %s", exc)
            raise StorageError(f"Storage failure: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Tracks                                                               #
    # ------------------------------------------------------------------ #

    def find_track(self, name: str, track_type: TrackType) -> Track | None:
        with self._session() as session:
            rec = session.scalars(
                select(TrackRecord)
                .where(TrackRecord.name == name, TrackRecord.type == track_type)
                .limit(1)
            ).first()
            return _track_from_record(rec) if rec else None

    def get_track(self, track_id: str) -> Track | None:
        with self._session() as session:
            rec = session.scalars(select(TrackRecord).where(TrackRecord.id == track_id)).first()
            return _track_from_record(rec) if rec else None

    def max_track_order(self) -> int | None:
        with self._session() as session:
            return session.scalar(select(func.max(TrackRecord.order)))

    def insert_track(self, track: Track) -> None:
        with self._session() as session:
            session.add(
                TrackRecord(
                    id=track.id,
                    name=track.name,
                    type=track.type,
                    order=track.order,
                    created_at=track.created_at,
                    updated_at=track.updated_at,
                )
            )
            try:
                session.flush()
            except IntegrityError:
                session.rollback()
                raise TrackAlreadyExists(track.name, track.type) from None

    def list_tracks(self, track_type: TrackType, limit: int, offset: int) -> list[Track]:
        with self._session() as session:
            rows = session.scalars(
                select(TrackRecord)
                .where(TrackRecord.type == track_type)
                .order_by(TrackRecord.order.asc(), TrackRecord.seq.asc())
                .limit(limit)
                .offset(offset)
            ).all()
            return [_track_from_record(rec) for rec in rows]

    def count_tracks(self, track_type: TrackType) -> int:
        with self._session() as session:
            return session.scalar(
                select(func.count()).select_from(TrackRecord).where(TrackRecord.type == track_type)
            ) or 0

    def delete_track(self, track_id: str) -> int:
        with self._session() as session:
            event_count = session.scalar(
                select(func.count())
                .select_from(EventRecord)
                .where(EventRecord.track_id == track_id)
            ) or 0
            # Bulk delete so the database ON DELETE CASCADE removes the events
            session.execute(delete(TrackRecord).where(TrackRecord.id == track_id))
            return event_count

    # ------------------------------------------------------------------ #
    # Events                                                               #
    # ------------------------------------------------------------------ #

    def insert_event(self, event: ScheduledEvent) -> None:
        with self._session() as session:
            session.add(
                EventRecord(
                    id=event.id,
                    track_id=event.track_id,
                    name=event.name,
                    platform=event.platform,
                    prompt=event.prompt,
                    scheduled_time=event.scheduled_time,
                    generation_time=event.generation_time,
                    agent=event.agent,
                    content_generated=event.content_generated,
                    approved=event.approved,
                    posted=event.posted,
                    approval_via=event.approval_via,
                    mcp_tools=list(event.mcp_tools),
                    metadata_=dict(event.metadata),
                    event_type=event.event_type,
                    media_path=event.media_path,
                    created_at=event.created_at,
                    updated_at=event.updated_at,
                )
            )

    def get_event(self, event_id: str) -> ScheduledEvent | None:
        with self._session() as session:
            rec = session.get(EventRecord, event_id)
            return _event_from_record(rec) if rec else None

    def list_events(
        self,
        *,
        event_type: str = "scheduled",
        track_id: str | None = None,
        platform: str | None = None,
    ) -> list[tuple[ScheduledEvent, str]]:
        stmt = (
            select(EventRecord, TrackRecord.name)
            .join(TrackRecord, EventRecord.track_id == TrackRecord.id)
            .where(EventRecord.event_type == event_type)
        )
        if track_id is not None:
            stmt = stmt.where(EventRecord.track_id == track_id)
        if platform is not None:
            stmt = stmt.where(EventRecord.platform == platform)
        stmt = stmt.order_by(EventRecord.scheduled_time.asc(), EventRecord.created_at.asc())

        with self._session() as session:
            return [(_event_from_record(rec), name) for rec, name in session.execute(stmt).all()]

    def update_event(self, event_id: str, changes: Mapping[str, Any]) -> ScheduledEvent | None:
        check_event_changes(changes)
        with self._session() as session:
            rec = session.get(EventRecord, event_id)
            if rec is None:
                return None
            for field_name, value in changes.items():
                setattr(rec, field_name, value)
            session.flush()
            return _event_from_record(rec)

    def delete_event(self, event_id: str) -> bool:
        with self._session() as session:
            result = session.execute(delete(EventRecord).where(EventRecord.id == event_id))
            return bool(result.rowcount)

    def close(self) -> None:
        self._engine.dispose()
