"""
Tests for the ring's reader/writer lock.

Covers:
1. Shared readers: many readers hold the lock at the same time
2. Exclusive writers: a writer excludes readers and other writers
3. Writer preference: a waiting writer blocks newly arriving readers
4. Misuse: releasing an unheld lock raises
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from boundring.ring import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    reader_count = 4
    barrier = threading.Barrier(reader_count, timeout=5)

    def read():
        with lock.read():
            # Every reader must be inside at once for the barrier to release.
            barrier.wait()

    with ThreadPoolExecutor(max_workers=reader_count) as executor:
        futures = [executor.submit(read) for _ in range(reader_count)]
        for future in futures:
            future.result(timeout=10)

    assert lock.readers == 0


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    events: list[str] = []
    writer_entered = threading.Event()

    def write():
        with lock.write():
            writer_entered.set()
            events.append("write-start")
            time.sleep(0.05)
            events.append("write-end")

    def read():
        writer_entered.wait(timeout=5)
        with lock.read():
            events.append("read")

    writer = threading.Thread(target=write)
    reader = threading.Thread(target=read)
    writer.start()
    reader.start()
    writer.join(timeout=5)
    reader.join(timeout=5)

    assert events == ["write-start", "write-end", "read"]
    assert lock.writer_active is False


def test_writers_are_mutually_exclusive():
    lock = ReadWriteLock()
    active = 0
    max_active = 0
    guard = threading.Lock()

    def write():
        nonlocal active, max_active
        with lock.write():
            with guard:
                active += 1
                max_active = max(max_active, active)

            time.sleep(0.005)

            with guard:
                active -= 1

    with ThreadPoolExecutor(max_workers=8) as executor:
        for future in [executor.submit(write) for _ in range(32)]:
            future.result(timeout=10)

    assert max_active == 1


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    events: list[str] = []

    lock.acquire_read()

    def write():
        with lock.write():
            events.append("write")

    def late_read():
        with lock.read():
            events.append("late-read")

    writer = threading.Thread(target=write)
    writer.start()

    deadline = time.monotonic() + 5
    while lock._writers_waiting == 0 and time.monotonic() < deadline:
        time.sleep(0.001)

    late_reader = threading.Thread(target=late_read)
    late_reader.start()
    time.sleep(0.05)

    assert events == []

    lock.release_read()

    writer.join(timeout=5)
    late_reader.join(timeout=5)

    assert events == ["write", "late-read"]


def test_release_without_acquire_raises():
    lock = ReadWriteLock()

    with pytest.raises(RuntimeError):
        lock.release_read()

    with pytest.raises(RuntimeError):
        lock.release_write()


def test_lock_released_when_body_raises():
    lock = ReadWriteLock()

    with pytest.raises(ValueError):
        with lock.write():
            raise ValueError("boom")

    with pytest.raises(ValueError):
        with lock.read():
            raise ValueError("boom")

    assert lock.readers == 0
    assert lock.writer_active is False
