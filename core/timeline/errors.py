"""Timeline error taxonomy.

Every failure the host can see has a stable ``kind`` so it never has to
parse message text:

    validation       malformed or out-of-range input, nothing was written
    duplicate_track  explicit track creation hit an existing (name, type)
    not_found        referenced track/event id does not exist
    storage          the backing store failed unexpectedly
    internal         anything else

Filesystem sidecar failures are deliberately absent: they are logged and
swallowed by the sidecar writer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic import ValidationError as PydanticValidationError

    from core.timeline.types import Track


class TimelineError(Exception):
    """Base class for errors reported to the MCP host."""

    kind = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def details(self) -> tuple[str, ...]:
        return ()

    def payload(self) -> dict[str, Any]:
        """Extra top-level fields merged into the error response."""
        return {}


class ValidationError(TimelineError):
    """Input rejected before any mutation.

    Attributes:
        problems: One ``"field: reason"`` string per failed constraint.
    """

    kind = "validation"

    def __init__(self, problems: list[str] | tuple[str, ...]) -> None:
        self.problems = tuple(problems)
        super().__init__("Validation error: " + "; ".join(self.problems))

    @property
    def details(self) -> tuple[str, ...]:
        return self.problems

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> ValidationError:
        """Itemize a pydantic ``ValidationError`` as ``field: message`` lines."""
        problems = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()))
            msg = err.get("msg", "invalid value")
            # pydantic prefixes custom ValueErrors; the field name is enough context
            msg = msg.removeprefix("Value error, ")
            problems.append(f"{loc}: {msg}" if loc else msg)
        return cls(problems)


class DuplicateTrack(TimelineError):
    """A track with the same (name, type) already exists."""

    kind = "duplicate_track"

    def __init__(self, existing: Track) -> None:
        self.existing = existing
        super().__init__(f'Track "{existing.name}" with type "{existing.type}" already exists')

    def payload(self) -> dict[str, Any]:
        from core.timeline.timing import to_iso

        return {
            "existingTrack": {
                "id": self.existing.id,
                "name": self.existing.name,
                "type": self.existing.type,
                "order": self.existing.order,
                "createdAt": to_iso(self.existing.created_at),
            }
        }


class NotFound(TimelineError):
    """A track or event id required by the operation does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} {entity_id} not found")


class StorageError(TimelineError):
    """The storage backend failed for a reason unrelated to the input."""

    kind = "storage"
