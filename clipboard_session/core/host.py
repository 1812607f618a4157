"""Host collaborator: capture, persistence and JSON processing.

``ClipboardHost`` is the asynchronous request/event boundary the session
talks to. ``LocalClipboardHost`` is an in-process implementation keeping
history in memory and processing JSON with the standard library.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional

import pyperclip

from clipboard_session.models.schemas import (
    ClipboardEntry,
    DeleteResult,
    JsonValidationResult,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

CLIPBOARD_UPDATE = "clipboard-update"
CLIPBOARD_HISTORY = "clipboard-history"


class HostError(Exception):
    """A collaborator call was rejected."""


def classify_content(content: str) -> str:
    """Tag content as json, url, multiline or text."""
    stripped = content.lstrip()
    if stripped.startswith("{") or stripped.startswith("["):
        return "json"
    if content.startswith("http://") or content.startswith("https://"):
        return "url"
    if len(content.splitlines()) > 1:
        return "multiline"
    return "text"


class ClipboardHost:
    """Base collaborator with event subscription.

    Subclasses implement the request methods; push events are delivered
    to subscribers through ``_emit``.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Register ``callback`` for ``event``; returns an unsubscribe function."""
        callbacks = self._subscribers.setdefault(event, [])
        callbacks.append(callback)

        def unsubscribe():
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def _emit(self, event: str, payload: Any):
        for callback in list(self._subscribers.get(event, [])):
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error delivering {event} event: {e}")

    async def fetch_history(self, limit: int = 20) -> List[ClipboardEntry]:
        raise NotImplementedError

    async def copy_to_clipboard(self, text: str):
        raise NotImplementedError

    async def delete_entry(self, entry_id: int) -> DeleteResult:
        raise NotImplementedError

    async def clear_all(self) -> DeleteResult:
        raise NotImplementedError

    async def confirm(self, message: str) -> bool:
        raise NotImplementedError

    async def validate_json(self, text: str) -> JsonValidationResult:
        raise NotImplementedError

    async def format_json(self, text: str) -> str:
        raise NotImplementedError

    async def minify_json(self, text: str) -> str:
        raise NotImplementedError

    async def add_sample_entries(self):
        raise NotImplementedError


class LocalClipboardHost(ClipboardHost):
    """In-memory collaborator used by the MCP server and the tests."""

    def __init__(self, confirm_handler: Optional[Callable[[str], bool]] = None):
        super().__init__()
        self.history: List[ClipboardEntry] = []  # newest first
        self.confirm_handler = confirm_handler
        self._next_id = 1

    def capture(self, content: str) -> Optional[ClipboardEntry]:
        """Record a new clipboard capture and announce it to subscribers.

        Content identical to the most recent entry is not stored again.
        """
        entry = None
        if not self.history or self.history[0].content != content:
            entry = ClipboardEntry(
                id=self._next_id,
                content=content,
                timestamp=utc_timestamp(),
                content_type=classify_content(content),
            )
            self._next_id += 1
            self.history.insert(0, entry)

        self._emit(CLIPBOARD_UPDATE, content)
        return entry

    def replay_history(self, limit: int = 20):
        """Emit stored entries one by one as history events."""
        for entry in self.history[:limit]:
            self._emit(CLIPBOARD_HISTORY, entry.model_copy())

    async def fetch_history(self, limit: int = 20) -> List[ClipboardEntry]:
        return [entry.model_copy() for entry in self.history[:limit]]

    async def copy_to_clipboard(self, text: str):
        try:
            await asyncio.to_thread(pyperclip.copy, text)
        except pyperclip.PyperclipException as e:
            raise HostError(f"Failed to copy to clipboard: {e}") from e

    async def delete_entry(self, entry_id: int) -> DeleteResult:
        self.history = [entry for entry in self.history if entry.id != entry_id]
        logger.info(f"Deleted clipboard entry with ID: {entry_id}")
        return DeleteResult(
            success=True, message=f"Successfully deleted entry with ID {entry_id}"
        )

    async def clear_all(self) -> DeleteResult:
        self.history.clear()
        logger.info("Cleared all clipboard entries")
        return DeleteResult(success=True, message="All clipboard entries cleared")

    async def confirm(self, message: str) -> bool:
        if self.confirm_handler is None:
            return True
        return bool(self.confirm_handler(message))

    async def validate_json(self, text: str) -> JsonValidationResult:
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            return JsonValidationResult(
                is_valid=False,
                error_message=f"JSON Parse Error: {e.msg} at line {e.lineno} column {e.colno}",
                line=e.lineno,
                column=e.colno,
            )

        return JsonValidationResult(
            is_valid=True,
            formatted_content=json.dumps(parsed, indent=2, ensure_ascii=False),
            parsed_value=parsed,
        )

    async def format_json(self, text: str) -> str:
        return json.dumps(self._parse(text), indent=2, ensure_ascii=False)

    async def minify_json(self, text: str) -> str:
        return json.dumps(self._parse(text), separators=(",", ":"), ensure_ascii=False)

    async def add_sample_entries(self):
        for sample in SAMPLE_ENTRIES:
            self._emit(CLIPBOARD_UPDATE, sample)

    def _parse(self, text: str) -> Any:
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise HostError(f"Invalid JSON: {e}") from e


SAMPLE_ENTRIES = [
    "Hello, this is a sample clipboard entry!",
    "const greet = (name: string) => {\n  console.log(`Hello, ${name}!`);\n};",
    "https://github.com/tauri-apps/tauri",
    json.dumps(
        {
            "user": {
                "id": 12345,
                "username": "john_doe",
                "email": "john@example.com",
                "profile": {
                    "firstName": "John",
                    "lastName": "Doe",
                    "age": 28,
                    "isActive": True,
                    "preferences": {
                        "theme": "dark",
                        "notifications": {"email": True, "push": False, "sms": True},
                    },
                },
                "roles": ["user", "moderator"],
                "lastLogin": "2024-01-15T10:30:00Z",
                "metadata": None,
            }
        },
        indent=2,
    ),
    json.dumps(
        {
            "apiResponse": {
                "status": "success",
                "data": [
                    {
                        "id": 1,
                        "title": "Sample Product",
                        "price": 29.99,
                        "currency": "USD",
                        "inStock": True,
                        "tags": ["electronics", "gadget", "popular"],
                        "dimensions": {
                            "width": 10.5,
                            "height": 5.2,
                            "depth": 2.1,
                            "unit": "cm",
                        },
                    },
                    {
                        "id": 2,
                        "title": "Another Product",
                        "price": 15.5,
                        "currency": "USD",
                        "inStock": False,
                        "tags": ["accessory", "limited"],
                        "dimensions": {
                            "width": 8.0,
                            "height": 3.5,
                            "depth": 1.5,
                            "unit": "cm",
                        },
                    },
                ],
                "pagination": {
                    "page": 1,
                    "totalPages": 5,
                    "totalItems": 50,
                    "hasNext": True,
                },
            }
        },
        indent=2,
    ),
    json.dumps(
        {
            "config": {
                "appName": "Clipboard Manager",
                "version": "2.0.0",
                "environment": "production",
                "features": {
                    "jsonViewer": True,
                    "searchEnabled": True,
                    "autoValidation": True,
                    "exportFormats": ["json", "csv", "xml"],
                },
                "database": {
                    "host": "localhost",
                    "port": 5432,
                    "name": "clipman_db",
                    "ssl": False,
                },
                "logging": {
                    "level": "info",
                    "outputs": ["console", "file"],
                    "maxFileSize": "10MB",
                },
            }
        },
        indent=2,
    ),
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Sed do eiusmod "
    "tempor incididunt ut labore et dolore magna aliqua.",
]
