"""
Request deduplication for concurrent lookups.

Ensures at most one outstanding network call per request key: callers
that ask for a key already in flight await the existing operation
instead of starting another. Once an operation settles (result or
exception) its registry entry is removed, so the next call for the
same key starts fresh.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, TypeVar

from .enums import OperationState

T = TypeVar("T")


@dataclass
class InFlightOperation(Generic[T]):
    """A registered operation and its lifecycle state."""

    key: str
    task: "asyncio.Future[T]"
    state: OperationState = field(default=OperationState.PENDING)

    @property
    def is_pending(self) -> bool:
        return self.state is OperationState.PENDING and not self.task.done()


class RequestDeduplicator:
    """
    Registry of pending operations keyed by request key.

    Usage:
        pricing = await deduplicator.run("pricing:co.ke", lambda: client.get_pricing("co.ke"))
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, InFlightOperation] = {}
        self._started = 0

    @property
    def started_count(self) -> int:
        """How many operations have actually been started (not joined)."""
        return self._started

    def in_flight_keys(self) -> list[str]:
        return [key for key, op in self._in_flight.items() if op.is_pending]

    def is_in_flight(self, key: str) -> bool:
        op = self._in_flight.get(key)
        return op is not None and op.is_pending

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run factory() unless an operation for key is already pending.

        Args:
            key: Request key identifying equivalent operations
            factory: Zero-argument callable returning the awaitable to run

        Returns:
            The operation's result (shared by all concurrent callers)

        Raises:
            Whatever the operation raises, to every caller awaiting it
        """
        op = self._in_flight.get(key)
        if op is None or not op.is_pending:
            op = InFlightOperation(key=key, task=asyncio.ensure_future(factory()))
            self._in_flight[key] = op
            self._started += 1
            op.task.add_done_callback(lambda _task, op=op: self._settle(op))
        # A caller being cancelled must not cancel the shared operation.
        return await asyncio.shield(op.task)

    def _settle(self, op: InFlightOperation) -> None:
        op.state = OperationState.SETTLED
        if self._in_flight.get(op.key) is op:
            del self._in_flight[op.key]
        if not op.task.cancelled():
            # mark exception retrieved when every awaiting caller went away
            op.task.exception()
