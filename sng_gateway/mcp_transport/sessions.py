"""Registry of streaming MCP sessions.

All registry mutation happens synchronously on the event loop, so a lookup
can never observe a half-removed session: once ``close`` returns, every
later ``route`` for that id raises ``SessionNotFoundError``, and so does a
``route`` that was still dispatching when the session closed.

Delivery order per session equals routing order. ``route`` reserves a
delivery slot (a future) before it starts dispatching, and the stream
consumer awaits slots strictly in FIFO order.
"""

import asyncio
import time
import uuid

import structlog

from .exceptions import SessionNotFoundError
from .schemas import MCPJSONRPCRequest, MCPJSONRPCResponse
from .service import MCPDispatcher

logger = structlog.get_logger(__name__)


class SessionClosed(Exception):
    """Raised to the stream consumer once its session has been closed."""
    pass


class Session:
    """One streaming connection and its ordered outbound delivery queue.

    Attributes:
        id: Server-generated session identifier.
        created_at: Unix timestamp of stream establishment.
    """

    def __init__(self, session_id: str):
        self.id = session_id
        self.created_at = time.time()
        # None is the close marker.
        self._deliveries: asyncio.Queue[asyncio.Future | None] = asyncio.Queue()
        self._head: asyncio.Future | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def reserve(self) -> asyncio.Future:
        """Append a delivery slot; its result is pushed when it reaches the head."""
        slot = asyncio.get_running_loop().create_future()
        self._deliveries.put_nowait(slot)
        return slot

    async def next_message(self, timeout: float | None = None) -> MCPJSONRPCResponse:
        """Wait for the next reply in routing order.

        Args:
            timeout: Seconds to wait before giving up with ``asyncio.TimeoutError``.
                A pending head slot is kept, so the next call resumes waiting on it.

        Raises:
            asyncio.TimeoutError: Nothing was ready within ``timeout``.
            SessionClosed: The session was closed.
        """
        while True:
            if self._closed:
                raise SessionClosed(self.id)
            if self._head is None:
                self._head = await asyncio.wait_for(self._deliveries.get(), timeout)
                if self._head is None:
                    raise SessionClosed(self.id)
            try:
                message = await asyncio.wait_for(asyncio.shield(self._head), timeout)
            except asyncio.CancelledError:
                if self._head.cancelled():
                    # Slot abandoned (its dispatch failed or the session closed).
                    self._head = None
                    continue
                raise
            self._head = None
            return message

    def close(self) -> None:
        """Cancel every undelivered slot and wake the consumer.

        Safe to call with no running event loop.
        """
        if self._closed:
            return
        self._closed = True
        pending = [self._head] if self._head is not None else []
        while not self._deliveries.empty():
            slot = self._deliveries.get_nowait()
            if slot is not None:
                pending.append(slot)
        for slot in pending:
            slot.cancel()
        # Wake a consumer blocked on an empty queue.
        self._deliveries.put_nowait(None)


class SessionManager:
    """Owns every open streaming session and routes calls into them."""

    def __init__(self, dispatcher: MCPDispatcher):
        self.dispatcher = dispatcher
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def open(self) -> Session:
        """Register a new session with a fresh identifier."""
        session_id = uuid.uuid4().hex
        while session_id in self._sessions:
            session_id = uuid.uuid4().hex
        session = Session(session_id)
        self._sessions[session_id] = session
        logger.info("session_opened", session_id=session_id, open_sessions=len(self._sessions))
        return session

    def close(self, session_id: str) -> None:
        """Deregister a session and discard its undelivered replies.

        Closing an unknown or already-closed session is a no-op.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.close()
        logger.info("session_closed", session_id=session_id, open_sessions=len(self._sessions))

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

    def lookup(self, session_id: str) -> Session:
        """Return the open session for ``session_id``.

        Raises:
            SessionNotFoundError: If no such session is open.
        """
        session = self._sessions.get(session_id)
        if session is None or session.closed:
            raise SessionNotFoundError(session_id)
        return session

    async def route(self, session_id: str, request: MCPJSONRPCRequest) -> None:
        """Dispatch ``request`` and push its reply over the session's stream.

        The delivery slot is reserved before the first suspension point, so
        replies leave in the order calls were routed. Notifications are
        dispatched without a reply.

        Raises:
            SessionNotFoundError: If the session is not open, or was closed
                while the call was being dispatched. The reply is discarded.
        """
        session = self.lookup(session_id)
        slot = None if request.is_notification else session.reserve()

        try:
            response = await self.dispatcher.dispatch(request, session_id=session_id)
        except BaseException:
            if slot is not None and not slot.done():
                slot.cancel()
            raise

        if session.closed:
            logger.info(
                "session_reply_discarded",
                session_id=session_id,
                method=request.method,
                request_id=request.id,
            )
            raise SessionNotFoundError(session_id)
        if slot is not None:
            slot.set_result(response)
