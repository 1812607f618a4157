"""Ordered clipboard entry list with selection tracking."""

import itertools
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Union

from clipboard_session.models.schemas import (
    ClipboardEntry,
    DeleteResult,
    JsonValidationResult,
    SearchState,
    utc_timestamp,
)
from .editing_lock import EditingLock
from .host import classify_content
from .json_filter import NO_MATCH, filter_json
from .json_pipeline import is_json_shaped

logger = logging.getLogger(__name__)

CLEAR_CONFIRM_MESSAGE = "Are you sure you want to clear all clipboard entries?"

Validator = Callable[[str], Awaitable[JsonValidationResult]]


def _as_delete_result(result) -> DeleteResult:
    if isinstance(result, dict):
        return DeleteResult.model_validate(result)
    return result


class EntryListStore:
    """Owns the entry list, the selection and the caches derived from it.

    ``selected_index`` is always a valid index or -1. Validation and search
    state belong to the selected entry only and are dropped whenever that
    entry changes or goes away.
    """

    def __init__(
        self,
        host,
        lock: EditingLock,
        validator: Optional[Validator] = None,
        auto_validate: bool = True,
    ):
        self.host = host
        self.lock = lock
        self.validator = validator
        self.auto_validate = auto_validate

        self.entries: List[ClipboardEntry] = []
        self.selected_index = -1
        self.validation: Optional[JsonValidationResult] = None
        self.search = SearchState()

        # Host ids are positive; placeholders count down from -1
        self._placeholder_ids = itertools.count(-1, -1)

    @property
    def selected_entry(self) -> Optional[ClipboardEntry]:
        if 0 <= self.selected_index < len(self.entries):
            return self.entries[self.selected_index]
        return None

    def ingest_live_update(self, raw_text: str) -> bool:
        """Prepend a live capture unless the user is editing.

        Returns True when the entry was admitted.
        """
        if self.lock.is_editing:
            logger.debug("Dropped live clipboard update while editing")
            return False

        entry = ClipboardEntry(
            id=next(self._placeholder_ids),
            content=raw_text,
            timestamp=utc_timestamp(),
            content_type=classify_content(raw_text),
        )
        self.entries.insert(0, entry)

        if self.selected_index == -1:
            self.selected_index = 0
        else:
            self.selected_index += 1
        return True

    def ingest_historical_batch(
        self, entries: Iterable[Union[ClipboardEntry, dict]]
    ) -> int:
        """Append entries whose id is not already present; returns the count added."""
        was_empty = not self.entries
        known_ids = {entry.id for entry in self.entries}
        added = 0

        for item in entries:
            entry = (
                item.model_copy()
                if isinstance(item, ClipboardEntry)
                else ClipboardEntry.model_validate(item)
            )
            if entry.id in known_ids:
                continue
            known_ids.add(entry.id)
            self.entries.append(entry)
            added += 1

        if was_empty and added and self.selected_index == -1:
            self.selected_index = 0
        return added

    async def select(self, index: int) -> bool:
        """Select the entry at ``index``; out-of-range indices are ignored."""
        if not 0 <= index < len(self.entries):
            return False

        if index != self.selected_index:
            self.validation = None
            self._refresh_search()
        self.selected_index = index

        if self.auto_validate:
            await self.revalidate()
        return True

    def edit(self, new_content: str) -> bool:
        """Write ``new_content`` into the selected entry and hold the editing lock."""
        entry = self.selected_entry
        if entry is None:
            return False

        self.lock.touch()
        entry.content = new_content
        self.validation = None
        self._refresh_search()
        return True

    async def revalidate(self) -> Optional[JsonValidationResult]:
        """Validate the selected entry if it looks like JSON."""
        entry = self.selected_entry
        if entry is None or self.validator is None or not is_json_shaped(entry.content):
            self.validation = None
        else:
            self.validation = await self.validator(entry.content)

        self._refresh_search()
        return self.validation

    def set_query(self, query: str) -> SearchState:
        self.search = SearchState(query=query.lower())
        self._refresh_search()
        return self.search

    async def delete_at(self, index: int) -> Optional[DeleteResult]:
        """Delete the entry at ``index`` through the host.

        On success the selection is re-derived so it keeps pointing at the
        same logical entry, or is cleared when that entry was deleted.
        """
        if not 0 <= index < len(self.entries):
            return None

        entry = self.entries[index]
        try:
            result = _as_delete_result(await self.host.delete_entry(entry.id))
        except Exception as e:
            logger.error(f"Failed to delete entry {entry.id}: {e}")
            return DeleteResult(success=False, message=str(e))

        if not result.success:
            logger.warning(f"Delete rejected for entry {entry.id}: {result.message}")
            return result

        # The list may have changed while the request was in flight
        position = next(
            (i for i, candidate in enumerate(self.entries) if candidate is entry), None
        )
        if position is None:
            return result

        del self.entries[position]
        if position == self.selected_index:
            self.selected_index = -1
            self.validation = None
            self.search = SearchState()
        elif position < self.selected_index:
            self.selected_index -= 1

        logger.info(f"Removed entry {entry.id} from session")
        return result

    async def clear_all(self) -> DeleteResult:
        """Empty the list after host confirmation."""
        try:
            confirmed = await self.host.confirm(CLEAR_CONFIRM_MESSAGE)
        except Exception as e:
            logger.error(f"Clear confirmation failed: {e}")
            confirmed = False

        if not confirmed:
            return DeleteResult(success=False, message="Clear cancelled")

        try:
            result = _as_delete_result(await self.host.clear_all())
        except Exception as e:
            logger.error(f"Failed to clear entries: {e}")
            return DeleteResult(success=False, message=str(e))

        if not result.success:
            logger.warning(f"Clear rejected: {result.message}")
            return result

        self.entries.clear()
        self.selected_index = -1
        self.lock.close()
        self.validation = None
        self.search = SearchState()
        logger.info("Cleared all entries from session")
        return result

    def _refresh_search(self):
        parsed: Any = None
        has_value = self.validation is not None and self.validation.is_valid
        if has_value:
            parsed = self.validation.parsed_value

        query = self.search.query
        if not has_value:
            self.search = SearchState(query=query)
            return

        filtered = filter_json(parsed, query)
        if filtered is NO_MATCH:
            self.search = SearchState(query=query)
        else:
            self.search = SearchState(query=query, filtered_value=filtered, matched=True)
