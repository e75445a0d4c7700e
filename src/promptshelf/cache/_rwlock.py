"""Reader/writer lock for the metadata cache."""

import threading
from collections.abc import Iterator  # noqa: TC003 - needed at runtime for signatures
from contextlib import contextmanager


class ReadWriteLock:
    """A lock that admits many readers or one writer.

    Writers are preferred: new readers wait while a writer is queued.
    """

    __slots__ = ("_condition", "_readers", "_writer", "_writers_waiting")

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock for reading."""
        with self._condition:
            while self._writer or self._writers_waiting:
                _ = self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if not self._readers:
                    self._condition.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock exclusively."""
        with self._condition:
            self._writers_waiting += 1
            while self._writer or self._readers:
                _ = self._condition.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._condition:
                self._writer = False
                self._condition.notify_all()
