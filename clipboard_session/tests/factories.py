"""Test doubles and builders shared by the test suites."""

from clipboard_session.models.schemas import ClipboardEntry


class FakeTimer:
    """Timer handle recorded by FakeScheduler."""

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Deterministic stand-in for the event loop's call_later."""

    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire(self):
        for timer in self.live:
            timer.fired = True
            timer.callback()


def make_entry(entry_id, content="text", content_type="text"):
    return ClipboardEntry(
        id=entry_id,
        content=content,
        timestamp="2024-01-15T10:30:00+00:00",
        content_type=content_type,
    )
