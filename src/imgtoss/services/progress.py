"""In-memory progress sink that remembers the latest update per object."""

from __future__ import annotations

import threading

from ..domain import ProgressSink, UploadProgress


class ProgressRegistry:
    """Progress sink keeping the most recent :class:`UploadProgress` per id.

    Pass an instance wherever a ``progress_sink`` is accepted. Subscribers are
    called synchronously with every update after it has been stored.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest: dict[str, UploadProgress] = {}
        self._subscribers: list[ProgressSink] = []

    def __call__(self, update: UploadProgress) -> None:
        with self._lock:
            self._latest[update.image_id] = update
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            subscriber(update)

    def subscribe(self, sink: ProgressSink) -> None:
        with self._lock:
            self._subscribers.append(sink)

    def unsubscribe(self, sink: ProgressSink) -> None:
        with self._lock:
            if sink in self._subscribers:
                self._subscribers.remove(sink)

    def get(self, image_id: str) -> UploadProgress | None:
        with self._lock:
            return self._latest.get(image_id)

    def all(self) -> dict[str, UploadProgress]:
        with self._lock:
            return dict(self._latest)

    def remove(self, image_id: str) -> UploadProgress | None:
        with self._lock:
            return self._latest.pop(image_id, None)

    def clear(self) -> None:
        with self._lock:
            self._latest.clear()


__all__ = ["ProgressRegistry"]
