from contextlib import contextmanager
import threading
from typing import Iterator
from typing import Optional


class ReadWriteLock(object):
    """A readers/writer lock.

    Any number of readers may hold the lock at the same time; a writer holds it alone.
    Waiting writers block new readers so a steady stream of readers cannot starve them.

    Every released write bumps :attr:`generation` and wakes the threads blocked in
    :meth:`wait_for_write`, so consumers can react to mutations without polling.
    """

    def __init__(self):
        # type: () -> None
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0
        self._generation = 0

    @property
    def generation(self):
        # type: () -> int
        with self._cond:
            return self._generation

    def acquire_read(self):
        # type: () -> None
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        # type: () -> None
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        # type: () -> None
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self):
        # type: () -> None
        with self._cond:
            self._writer = False
            self._generation += 1
            self._cond.notify_all()

    @contextmanager
    def read_locked(self):
        # type: () -> Iterator[None]
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        # type: () -> Iterator[None]
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    def wait_for_write(self, generation, timeout=None):
        # type: (int, Optional[float]) -> bool
        """Block until a write newer than ``generation`` is released or ``timeout`` seconds elapse.

        Returns whether a newer write was observed.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._generation != generation, timeout)
