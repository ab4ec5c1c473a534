from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """
    Shared/exclusive lock for ring topology.

    Any number of readers may hold the lock at once; a writer holds it
    alone. Waiting writers block new readers, so a steady stream of
    lookups cannot starve registration.

    Not reentrant: a thread holding the read side must not acquire
    either side again.
    """

    __slots__ = (
        "_condition",
        "_readers",
        "_writer_active",
        "_writers_waiting",
    )

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._condition:
            while self._writer_active or self._writers_waiting > 0:
                self._condition.wait()

            self._readers += 1

    def release_read(self) -> None:
        with self._condition:
            if self._readers <= 0:
                raise RuntimeError("release of unacquired read lock")

            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            self._writers_waiting += 1

            try:
                while self._writer_active or self._readers > 0:
                    self._condition.wait()

            finally:
                self._writers_waiting -= 1

            self._writer_active = True

    def release_write(self) -> None:
        with self._condition:
            if not self._writer_active:
                raise RuntimeError("release of unacquired write lock")

            self._writer_active = False
            self._condition.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield

        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield

        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer_active
