# sim/buffer.py
from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class RequestQueue(Generic[T]):
    """
    FIFO of requests produced by any number of handlers/tools and consumed by a
    single owner once per tick. Draining empties the queue, so nothing is applied twice.
    """

    def __init__(self):
        self._items: deque[T] = deque()
        self.sent = 0

    def send(self, item: T) -> None:
        self._items.append(item)
        self.sent += 1

    def drain(self) -> list[T]:
        items = list(self._items)
        self._items.clear()
        return items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))
