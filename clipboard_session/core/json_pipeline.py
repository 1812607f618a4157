"""Validate/format/minify orchestration against the host collaborator."""

import json
import logging
from typing import Optional

from clipboard_session.models.schemas import JsonValidationResult
from .config import DEFAULT_MINIFIED_RATIO

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Failed to validate JSON"


def is_json_shaped(text: str) -> bool:
    """Cheap bracket check used to skip validation of plain text."""
    trimmed = text.strip()
    return (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    )


def is_minified(text: str, ratio: float = DEFAULT_MINIFIED_RATIO) -> bool:
    """Guess whether ``text`` is compact JSON.

    Compares the raw length against a pretty-printed re-serialization.
    Unparseable text is never considered minified.
    """
    try:
        pretty = json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except (ValueError, TypeError):
        return False
    return len(text) < len(pretty) * ratio


class JsonPipelineAdapter:
    """Runs JSON operations through the host and feeds results to the store."""

    def __init__(self, host, store, minified_ratio: float = DEFAULT_MINIFIED_RATIO):
        self.host = host
        self.store = store
        self.minified_ratio = minified_ratio

    is_json_shaped = staticmethod(is_json_shaped)

    def is_minified(self, text: str) -> bool:
        return is_minified(text, self.minified_ratio)

    async def validate(self, text: str) -> JsonValidationResult:
        """Validate ``text``; always returns a renderable result."""
        try:
            result = await self.host.validate_json(text)
            if isinstance(result, dict):
                result = JsonValidationResult.model_validate(result)
            return result
        except Exception as e:
            logger.error(f"JSON validation error: {e}")
            return JsonValidationResult(
                is_valid=False, error_message=VALIDATION_FAILED_MESSAGE
            )

    async def format(self, text: str) -> Optional[str]:
        """Pretty-print ``text`` and write it into the selected entry."""
        try:
            formatted = await self.host.format_json(text)
        except Exception as e:
            logger.error(f"Failed to format JSON: {e}")
            return None

        self.store.edit(formatted)
        return formatted

    async def minify(self, text: str) -> Optional[str]:
        """Compact ``text`` and write it into the selected entry."""
        try:
            minified = await self.host.minify_json(text)
        except Exception as e:
            logger.error(f"Failed to minify JSON: {e}")
            return None

        self.store.edit(minified)
        return minified
