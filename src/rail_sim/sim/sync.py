# sim/sync.py
import threading
from collections.abc import Iterator
from contextlib import contextmanager


class RWLock:
    """Many concurrent readers or a single writer. Not reentrant for writers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            # waiting writers go first so a steady stream of readers cannot starve them
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writing(self) -> bool:
        return self._writer


class RefreshSignal:
    """Edge-triggered, payload-free flag. Raised any number of times, consumed once."""

    def __init__(self):
        self._raised = False
        self._lock = threading.Lock()

    def set(self) -> None:
        with self._lock:
            self._raised = True

    def is_set(self) -> bool:
        return self._raised

    def consume(self) -> bool:
        with self._lock:
            raised, self._raised = self._raised, False
        return raised
