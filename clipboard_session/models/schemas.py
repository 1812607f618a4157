"""Data models for the clipboard session core."""

from datetime import datetime, timezone
from typing import Any, List, Optional
from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC instant."""
    return datetime.now(timezone.utc).isoformat()


class ClipboardEntry(BaseModel):
    """One captured clipboard payload with metadata."""

    id: int
    content: str
    timestamp: str = Field(default_factory=utc_timestamp)
    content_type: str = "text"


class JsonValidationResult(BaseModel):
    """Outcome of validating a piece of text as JSON."""

    is_valid: bool
    error_message: Optional[str] = None
    formatted_content: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    parsed_value: Any = None


class DeleteResult(BaseModel):
    """Response for delete and clear operations."""

    success: bool
    message: str = ""


class SearchState(BaseModel):
    """Search query and the JSON tree narrowed by it.

    ``matched`` is False when the query matched nothing (or there is no
    parsed value to search); ``filtered_value`` is then None.
    """

    query: str = ""
    filtered_value: Any = None
    matched: bool = False


class SessionSnapshot(BaseModel):
    """Derived state published to the presentation layer."""

    entries: List[ClipboardEntry] = Field(default_factory=list)
    selected_index: int = -1
    is_editing: bool = False
    validation: Optional[JsonValidationResult] = None
    search: SearchState = Field(default_factory=SearchState)
