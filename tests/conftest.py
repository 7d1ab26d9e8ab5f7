import pytest


class _Handle:
    def __init__(self, deadline: float, callback):
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by advance() instead of a real clock."""

    def __init__(self):
        self.now = 0.0
        self.handles: list[_Handle] = []

    def call_later(self, delay, callback):
        handle = _Handle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[_Handle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float):
        target = self.now + seconds
        while True:
            due = [h for h in self.live if h.deadline <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.deadline)
            self.handles.remove(handle)
            self.now = handle.deadline
            handle.callback()
        self.now = target


@pytest.fixture
def scheduler():
    return ManualScheduler()
