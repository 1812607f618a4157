"""SessionController - wires host events and user actions to the session core.

Views register observers and receive a single ``state_changed`` event
carrying a ``SessionSnapshot`` after each logical action.
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional, Set

from clipboard_session.models.schemas import (
    ClipboardEntry,
    DeleteResult,
    JsonValidationResult,
    SearchState,
    SessionSnapshot,
)
from .config import SessionConfig, load_config
from .editing_lock import EditingLock
from .entry_store import EntryListStore
from .host import CLIPBOARD_HISTORY, CLIPBOARD_UPDATE
from .json_pipeline import JsonPipelineAdapter

logger = logging.getLogger(__name__)

STATE_CHANGED = "state_changed"


class SessionController:
    """
    Top-level coordinator for one clipboard session.

    Observer events:
        state_changed (SessionSnapshot) - entries, selection, lock,
            validation or search state changed
    """

    def __init__(
        self,
        host,
        config: Optional[SessionConfig] = None,
        scheduler: Optional[Any] = None,
    ):
        self.host = host
        self.config = config or load_config()
        self.lock = EditingLock(
            timeout_ms=self.config.edit_timeout_ms,
            scheduler=scheduler,
            on_release=self._on_lock_released,
        )
        self.store = EntryListStore(
            host, self.lock, auto_validate=self.config.auto_validate
        )
        self.pipeline = JsonPipelineAdapter(
            host, self.store, minified_ratio=self.config.minified_ratio
        )
        self.store.validator = self.pipeline.validate

        self._observers: List[Callable[[str, Any], None]] = []
        self._unsubscribers: List[Callable[[], None]] = []
        self._pending: Set[asyncio.Task] = set()

    def add_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for state change events."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Unregister a previously registered callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, event: str, data: Any) -> None:
        for observer in self._observers:
            try:
                observer(event, data)
            except Exception as e:
                logger.error(f"Error notifying observer: {e}")

    def _publish(self) -> SessionSnapshot:
        snapshot = self.snapshot()
        self._notify(STATE_CHANGED, snapshot)
        return snapshot

    def snapshot(self) -> SessionSnapshot:
        """Copy of the derived state the presentation layer renders."""
        return SessionSnapshot(
            entries=[entry.model_copy() for entry in self.store.entries],
            selected_index=self.store.selected_index,
            is_editing=self.lock.is_editing,
            validation=self.store.validation,
            search=self.store.search,
        )

    # --- Lifecycle ---

    async def start(self) -> SessionSnapshot:
        """Subscribe to host events and load the initial history."""
        if not self._unsubscribers:
            self._unsubscribers = [
                self.host.subscribe(CLIPBOARD_UPDATE, self._on_clipboard_update),
                self.host.subscribe(CLIPBOARD_HISTORY, self._on_clipboard_history),
            ]

        try:
            history = await self.host.fetch_history(self.config.history_limit)
        except Exception as e:
            logger.error(f"Failed to load clipboard history: {e}")
        else:
            self.store.ingest_historical_batch(history)
            if self.config.auto_validate:
                await self.store.revalidate()

        return self._publish()

    def close(self) -> None:
        """Cancel the editing timer and detach from the host."""
        self.lock.close()
        for task in self._pending:
            task.cancel()
        self._pending.clear()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    # --- Host events ---

    def _on_clipboard_update(self, text: str) -> None:
        had_selection = self.store.selected_index != -1
        if self.store.ingest_live_update(text):
            self._publish()
            if not had_selection:
                self._schedule_revalidate()

    def _on_clipboard_history(self, entry: Any) -> None:
        had_selection = self.store.selected_index != -1
        if self.store.ingest_historical_batch([entry]):
            self._publish()
            if not had_selection:
                self._schedule_revalidate()

    def _schedule_revalidate(self) -> None:
        """Validate an entry that was selected by an incoming event."""
        if not self.config.auto_validate:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, auto-selected entry left unvalidated")
            return

        task = loop.create_task(self._revalidate_and_publish())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _revalidate_and_publish(self) -> None:
        await self.store.revalidate()
        self._publish()

    async def settle(self) -> None:
        """Wait for background validation started by host events."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_lock_released(self, reason: str) -> None:
        self._publish()

    # --- User actions ---

    @property
    def selected_entry(self) -> Optional[ClipboardEntry]:
        return self.store.selected_entry

    async def select(self, index: int) -> bool:
        if not await self.store.select(index):
            return False
        self._publish()
        return True

    def edit(self, content: str) -> bool:
        if not self.store.edit(content):
            return False
        self._publish()
        return True

    async def save(self) -> SessionSnapshot:
        """Commit the current edit: release the lock and re-validate."""
        self.lock.release(notify=False)

        await self.store.revalidate()
        return self._publish()

    async def validate(self) -> Optional[JsonValidationResult]:
        """Validate the selected entry regardless of the auto-validate setting."""
        result = await self.store.revalidate()
        self._publish()
        return result

    async def delete(self, index: int) -> Optional[DeleteResult]:
        result = await self.store.delete_at(index)
        if result is not None and result.success:
            self._publish()
        return result

    async def clear(self) -> DeleteResult:
        result = await self.store.clear_all()
        if result.success:
            self._publish()
        return result

    async def format(self) -> Optional[str]:
        entry = self.selected_entry
        if entry is None:
            return None
        formatted = await self.pipeline.format(entry.content)
        if formatted is not None:
            self._publish()
        return formatted

    async def minify(self) -> Optional[str]:
        entry = self.selected_entry
        if entry is None:
            return None
        minified = await self.pipeline.minify(entry.content)
        if minified is not None:
            self._publish()
        return minified

    async def toggle_format(self) -> Optional[str]:
        """Format minified content, minify anything else."""
        entry = self.selected_entry
        if entry is None:
            return None
        if self.pipeline.is_minified(entry.content):
            return await self.format()
        return await self.minify()

    def search(self, query: str) -> SearchState:
        state = self.store.set_query(query)
        self._publish()
        return state

    async def copy(self, text: str) -> bool:
        try:
            await self.host.copy_to_clipboard(text)
        except Exception as e:
            logger.error(f"Failed to copy to clipboard: {e}")
            return False
        return True

    async def copy_selected(self) -> bool:
        entry = self.selected_entry
        if entry is None:
            return False
        return await self.copy(entry.content)

    async def seed_samples(self) -> bool:
        try:
            await self.host.add_sample_entries()
        except Exception as e:
            logger.error(f"Failed to add sample entries: {e}")
            return False
        return True
