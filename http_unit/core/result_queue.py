"""FIFO buffer of successful response bodies."""

from collections import deque
from collections.abc import Iterable

from http_unit.core.errors import EmptyQueueError

__all__ = ["ResultQueue"]


class ResultQueue:
    """Ordered queue of response bodies, oldest first.

    Owned by one engine instance. Bodies are pushed in arrival order and
    every body is handed out by pop() exactly once.
    """

    def __init__(self, results: Iterable[str] = ()) -> None:
        self._queue: deque[str] = deque(results)

    def push(self, body: str) -> None:
        """Append a response body."""
        self._queue.append(body)

    def pop(self) -> str:
        """Remove and return the oldest body.

        Raises:
            EmptyQueueError: If no body is queued.
        """
        try:
            return self._queue.popleft()
        except IndexError:
            raise EmptyQueueError("Result queue is empty") from None

    def size(self) -> int:
        return len(self._queue)

    def snapshot(self) -> list[str]:
        """Return a copy of the queued bodies without consuming them."""
        return list(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return f"ResultQueue(size={len(self._queue)})"
