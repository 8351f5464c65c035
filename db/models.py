"""
SQLAlchemy ORM models for the content timeline.

Three tables:
    timeline_tracks       named, ordered groupings; UNIQUE(name, type)
    timeline_events       scheduled content rows, FK -> tracks ON DELETE CASCADE
    timeline_automations  automation configs (schema only, never executed here)

Deleting a track relies on the database cascade to remove its events, so
SQLite connections must run with ``PRAGMA foreign_keys=ON`` (see
``db.session.make_engine``).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class TrackRecord(Base):
    """Persisted track.

    ``seq`` is a surrogate autoincrement key that records insertion order;
    ``id`` is the public UUID referenced by events and automations.
    """

    __tablename__ = "timeline_tracks"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True)
    name: Mapped[str] = mapped_column(String(100))
    type: Mapped[str] = mapped_column(String(16))
    order: Mapped[int] = mapped_column(Integer, default=0, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    events: Mapped[list["EventRecord"]] = relationship(
        back_populates="track", passive_deletes=True
    )

    __table_args__ = (UniqueConstraint("name", "type", name="uq_timeline_track_name_type"),)


class AutomationRecord(Base):
    """Automation trigger/action configuration owned by a track."""

    __tablename__ = "timeline_automations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    track_id: Mapped[str] = mapped_column(
        ForeignKey("timeline_tracks.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    trigger: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    actions: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    check_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    check_interval: Mapped[str | None] = mapped_column(String(64), nullable=True)
    do_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    agent: Mapped[str | None] = mapped_column(String(128), nullable=True)
    platform: Mapped[str | None] = mapped_column(String(32), nullable=True)
    state_folder: Mapped[str | None] = mapped_column(String(512), nullable=True)
    end_condition: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    stats: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    last_run: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    next_run: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class EventRecord(Base):
    """Persisted scheduled event."""

    __tablename__ = "timeline_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    track_id: Mapped[str] = mapped_column(
        ForeignKey("timeline_tracks.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    platform: Mapped[str] = mapped_column(String(32), index=True)
    prompt: Mapped[str] = mapped_column(Text)

    scheduled_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    generation_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    post_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    agent: Mapped[str] = mapped_column(String(128))
    content_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    approved: Mapped[bool] = mapped_column(Boolean, default=False)
    posted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    approval_via: Mapped[str] = mapped_column(String(64), default="manual")
    mcp_tools: Mapped[list[str]] = mapped_column(JSON, default=list)
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict)

    automation_id: Mapped[str | None] = mapped_column(
        ForeignKey("timeline_automations.id", ondelete="SET NULL"), nullable=True
    )
    event_type: Mapped[str] = mapped_column(String(32), default="scheduled", index=True)

    state_folder: Mapped[str | None] = mapped_column(String(512), nullable=True)
    media_path: Mapped[str] = mapped_column(String(512), index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    track: Mapped["TrackRecord"] = relationship(back_populates="events")

    __table_args__ = (Index("ix_timeline_events_type_time", "event_type", "scheduled_time"),)
