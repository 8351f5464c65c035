"""
Tool base class and common types.

Every timeline operation inherits from TimelineTool and implements
execute(). The base class owns the parts that must be identical across
operations: parameter validation through the operation's pydantic model,
and the mapping of raised errors onto a structured ToolResult.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.timeline.errors import TimelineError, ValidationError
from db.store import TimelineStore
from tools.context import TimelineContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """
    Result from tool execution.

    Attributes:
        success: Whether execution succeeded
        data: Result data (JSON-friendly dict)
        error: Human-readable error message if success=False
        error_kind: Stable error category if success=False
            (validation | duplicate_track | not_found | storage | internal)
        details: Itemized problems, one per failed constraint
        metadata: Optional metadata (side-effect outcomes, counts, etc.)
    """

    success: bool
    data: Any = None
    error: str | None = None
    error_kind: str | None = None
    details: tuple[str, ...] = ()
    metadata: dict[str, Any] | None = None

    @classmethod
    def failure(cls, exc: TimelineError) -> "ToolResult":
        """Build a failed result from a TimelineError."""
        return cls(
            success=False,
            data=exc.payload() or None,
            error=exc.message,
            error_kind=exc.kind,
            details=exc.details,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Self-describing response object for the MCP host.

        Success: ``{"success": true, **data}``
        Failure: ``{"success": false, "error": {kind, message, details}, **payload}``
        """
        if self.success:
            body: dict[str, Any] = {"success": True}
            body.update(self.data or {})
            return body

        body = {
            "success": False,
            "error": {
                "kind": self.error_kind or "internal",
                "message": self.error,
                "details": list(self.details),
            },
        }
        body.update(self.data or {})
        return body


class TimelineTool(ABC):
    """
    Abstract base class for all timeline operations.

    Subclasses must define:
        - name: Unique tool identifier
        - description: Description shown to the assistant
        - params_model: Pydantic model validating the keyword arguments
        - execute(): Core operation logic, receiving the validated model

    Subclasses raise TimelineError subclasses for expected failures;
    __call__ turns them into a failed ToolResult.

    Example:
        class RemoveScheduledEvent(TimelineTool):
            params_model = RemoveScheduledEventParams

            @property
            def name(self) -> str:
                return "remove_scheduled_event"

            def execute(self, params) -> ToolResult:
                self.store.delete_event(params.event_id)
                return ToolResult(success=True, data={...})
    """

    params_model: ClassVar[type[BaseModel]]

    def __init__(self, context: TimelineContext) -> None:
        self._context = context

    @property
    def context(self) -> TimelineContext:
        return self._context

    @property
    def store(self) -> TimelineStore:
        return self._context.store

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool identifier (lowercase, underscores)."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """
        Description for the assistant's tool selection.

        Be specific about when to call the tool and what it changes.
        """
        pass

    def validate_inputs(self, **kwargs: Any) -> BaseModel:
        """
        Validate keyword arguments against ``params_model``.

        ``None`` values are treated as omitted so that optional MCP
        arguments fall back to their defaults.

        Raises:
            ValidationError: Itemized list of failed constraints
        """
        raw = {key: value for key, value in kwargs.items() if value is not None}
        try:
            return self.params_model.model_validate(raw, context={"now": self._context.now()})
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

    @abstractmethod
    def execute(self, params: Any) -> ToolResult:
        """
        Execute the operation with validated parameters.

        Args:
            params: Instance of ``params_model``

        Returns:
            ToolResult with success status and data
        """
        pass

    def __call__(self, **kwargs: Any) -> ToolResult:
        """
        Validate then execute — the main entry point.

        Never raises: expected failures become typed ToolResults, anything
        else becomes an ``internal`` failure.
        """
        try:
            params = self.validate_inputs(**kwargs)
            return self.execute(params)
        except TimelineError as exc:
            logger.info("%s rejected (%s): %s", self.name, exc.kind, exc.message)
            return ToolResult.failure(exc)
        except Exception as e:
            logger.exception("%s failed unexpectedly", self.name)
            return ToolResult(
                success=False,
                error=f"Tool execution failed: {str(e)}",
                error_kind="internal",
            )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize tool for API/LLM consumption.

        Returns dict with name, description and the JSON schema of the
        parameters (camelCase aliases).
        """
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.params_model.model_json_schema(by_alias=True),
        }
