from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from betonit.protocol.errors import SendError

logger = logging.getLogger(__name__)

# Status codes reported by transports (same numbering as the cast platform's common codes).
STATUS_SUCCESS = 0
STATUS_NETWORK_ERROR = 7
STATUS_INTERNAL_ERROR = 8
STATUS_ERROR = 13
STATUS_CANCELED = 16


@dataclass(frozen=True, slots=True)
class SendStatus:
    status_code: int = STATUS_SUCCESS
    reason: str = ""

    @property
    def is_success(self) -> bool:
        return self.status_code == STATUS_SUCCESS


@dataclass(frozen=True, slots=True)
class SendFailure:
    namespace: str
    message: str
    status_code: int
    reason: str


class Transport(Protocol):
    async def send(self, namespace: str, message: str) -> SendStatus:  # pragma: no cover
        ...


_PendingSend = asyncio.Future[Any] | concurrent.futures.Future[Any]


class SendTracker:
    """Hands messages to a transport and reports failed sends.

    Fire-and-forget: `send` returns before the transport finishes. Each
    completion callback captures its own message so concurrent failures are
    attributed correctly. Nothing is retried.

    `loop` is only needed when `send` is called from a thread that isn't
    running an event loop (e.g. a transport's receive thread).
    """

    def __init__(
        self,
        transport: Transport,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        on_failure: Callable[[SendFailure], None] | None = None,
    ) -> None:
        self._transport = transport
        self._loop = loop
        self._on_failure = on_failure
        self._lock = threading.Lock()
        self._pending: set[_PendingSend] = set()
        self._failed = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def failed_count(self) -> int:
        with self._lock:
            return self._failed

    def send(self, namespace: str, message: str) -> None:
        logger.debug("Sending message: (ns=%s) %s", namespace, message)
        try:
            coro = self._transport.send(namespace, message)
        except Exception as e:
            raise SendError(f"Transport rejected message: {e}") from e
        future = self._schedule(coro)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._result_callback(namespace, message))

    async def drain(self) -> None:
        """Wait until every send issued so far has completed."""

        with self._lock:
            pending = list(self._pending)
        if not pending:
            return
        waitables = [asyncio.wrap_future(f) if isinstance(f, concurrent.futures.Future) else f for f in pending]
        await asyncio.gather(*waitables, return_exceptions=True)

    def _schedule(self, coro: Any) -> _PendingSend:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and (self._loop is None or self._loop is running):
            return asyncio.ensure_future(coro)
        if self._loop is not None and not self._loop.is_closed():
            return asyncio.run_coroutine_threadsafe(coro, self._loop)

        if asyncio.iscoroutine(coro):
            coro.close()
        raise SendError("No event loop available to send on")

    def _result_callback(self, namespace: str, message: str) -> Callable[[_PendingSend], None]:
        def _on_result(future: _PendingSend) -> None:
            with self._lock:
                self._pending.discard(future)

            if future.cancelled():
                status = SendStatus(status_code=STATUS_CANCELED, reason="cancelled")
            elif future.exception() is not None:
                status = SendStatus(status_code=STATUS_ERROR, reason=repr(future.exception()))
            else:
                status = future.result()

            if status.is_success:
                return

            with self._lock:
                self._failed += 1
            logger.warning(
                "Failed to send message. statusCode: %s reason: %s message: %s",
                status.status_code,
                status.reason,
                message,
            )
            if self._on_failure is None:
                return
            try:
                self._on_failure(
                    SendFailure(namespace=namespace, message=message, status_code=status.status_code, reason=status.reason)
                )
            except Exception:
                logger.exception("Send failure hook raised for message: %s", message)

        return _on_result
