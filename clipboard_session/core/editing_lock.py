"""Editing lock that holds off external clipboard updates during edits."""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

from .config import DEFAULT_EDIT_TIMEOUT_MS

logger = logging.getLogger(__name__)


class LockState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"


class EditingLock:
    """Two-state machine (idle/editing) with a single inactivity timer.

    Every ``touch`` moves the lock to EDITING and restarts the timer. The
    lock drops back to IDLE when the timer fires, on ``release`` (explicit
    save) or on ``close`` (teardown). At most one timer is live at a time.

    ``scheduler`` is anything with an asyncio-style ``call_later``; it
    defaults to the running event loop.
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_EDIT_TIMEOUT_MS,
        scheduler: Optional[Any] = None,
        on_release: Optional[Callable[[str], None]] = None,
    ):
        self.timeout_ms = timeout_ms
        self.on_release = on_release
        self._scheduler = scheduler
        self._state = LockState.IDLE
        self._timer = None

    @property
    def state(self) -> LockState:
        return self._state

    @property
    def is_editing(self) -> bool:
        return self._state is LockState.EDITING

    def touch(self):
        """Record an edit: enter EDITING and restart the inactivity window."""
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._cancel_timer()
        if self._state is LockState.IDLE:
            logger.debug("Editing lock acquired")
        self._state = LockState.EDITING
        self._timer = scheduler.call_later(self.timeout_ms / 1000, self._expire)

    def release(self, notify: bool = True):
        """Explicit save: leave EDITING immediately."""
        self._exit("save", notify)

    def close(self):
        """Teardown: cancel any pending timer without notifying."""
        self._cancel_timer()
        self._state = LockState.IDLE

    def _expire(self):
        self._timer = None
        self._exit("timeout")

    def _exit(self, reason: str, notify: bool = True):
        self._cancel_timer()
        if self._state is LockState.IDLE:
            return

        self._state = LockState.IDLE
        logger.debug(f"Editing lock released ({reason})")

        if notify and self.on_release:
            try:
                self.on_release(reason)
            except Exception as e:
                logger.error(f"Editing lock release callback failed: {e}")

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
