from __future__ import annotations

import collections
import collections.abc
import threading


class WorkQueue:
    """Unbounded FIFO of paths shared by one producer and many workers.

    One lock guards the deque and the ``closed`` flag, and the single
    Condition waits on that same lock.  ``pop`` re-checks "closed or
    non-empty" under the lock before every wait, so a ``push`` or ``close``
    racing with a consumer can never slip in between the check and the wait.

    Closing does not discard pending tasks: consumers keep receiving them
    until the deque is empty and only then get the ``None`` exit sentinel.
    """

    __slots__ = ("_deque", "_lock", "_not_empty", "_closed")

    def __init__(self) -> None:
        self._deque: collections.deque[str] = collections.deque()
        self._lock = threading.Lock()
        # Condition wraps _lock: `with self._not_empty` also acquires _lock.
        self._not_empty = threading.Condition(self._lock)
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._deque)

    def push(self, task: str) -> None:
        with self._lock:
            if self._closed:
                msg = "push() on a closed WorkQueue"
                raise RuntimeError(msg)
            self._deque.append(task)
            self._not_empty.notify(1)

    def push_many(self, tasks: collections.abc.Iterable[str]) -> None:
        with self._lock:
            if self._closed:
                msg = "push_many() on a closed WorkQueue"
                raise RuntimeError(msg)
            prev = len(self._deque)
            self._deque.extend(tasks)
            added = len(self._deque) - prev
            if added:
                self._not_empty.notify(added)

    def pop(self) -> str | None:
        """Block until a task is available.  Returns None once closed and drained."""
        with self._not_empty:
            while not self._deque:
                if self._closed:
                    return None
                self._not_empty.wait()
            return self._deque.popleft()

    def close(self) -> None:
        # Every idle consumer has to wake up and observe shutdown, hence notify_all.
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()
