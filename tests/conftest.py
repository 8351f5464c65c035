"""
Shared fixtures for the test suite.

Centralizes reusable test infrastructure so individual test files
don't need to repeat store/clock/context boilerplate.
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from db.factory import open_store
from db.store import TimelineStore
from tools.context import TimelineContext
from tools.registry import ToolRegistry, build_registry

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FROZEN_NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)
"""Fixed "now" for every operation in the suite."""


# ---------------------------------------------------------------------------
# Frozen clock
# ---------------------------------------------------------------------------


class FrozenClock:
    """Deterministic clock — returns ``now`` until advanced."""

    def __init__(self, now: datetime = FROZEN_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)

    def iso_in(self, **kwargs: float) -> str:
        """ISO-8601 string ``kwargs`` after the current time."""
        return (self.now + timedelta(**kwargs)).isoformat()


# ---------------------------------------------------------------------------
# Store / context fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture(params=["sqlalchemy", "sqlite"])
def store(request: pytest.FixtureRequest, workspace: Path) -> TimelineStore:
    """A fresh store in ``workspace``, once per backend."""
    backend = open_store(request.param, workspace=workspace)
    yield backend
    backend.close()


@pytest.fixture()
def context(store: TimelineStore, workspace: Path, clock: FrozenClock) -> TimelineContext:
    return TimelineContext(store=store, workspace=workspace, clock=clock)


@pytest.fixture()
def registry(context: TimelineContext) -> ToolRegistry:
    return build_registry(context)
