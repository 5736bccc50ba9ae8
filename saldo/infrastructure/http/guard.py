"""
SessionGuard - 401 handling for one ApiClient

Owns the only shared mutable state of the request pipeline: the
"invalidating" flag and the queue of requests waiting on it. Nothing else
reads or writes them.
"""
import asyncio
import logging
from typing import Callable, List, Optional

from saldo.infrastructure.http.errors import AuthExpiredError
from saldo.infrastructure.storage.token_storage import TokenStorage

logger = logging.getLogger(__name__)


class SessionGuard:
    """
    Serializes session invalidation

    Flow on 401 (request not opted out of auth):
    1. invalidation in progress -> queue the request, it is rejected with
       AuthExpiredError together with the others when invalidation ends
    2. otherwise -> set the busy flag (synchronously, before any await),
       clear storage if the request's token is still the stored one,
       notify listeners, reject the queue and the triggering request

    There is no refresh endpoint: invalidation is terminal.
    """

    def __init__(self, storage: TokenStorage):
        self._storage = storage
        self._invalidating = False
        self._pending: List[asyncio.Future] = []
        self._idle_waiters: List[asyncio.Future] = []
        self._listeners: List[Callable[[], None]] = []

    @property
    def invalidating(self) -> bool:
        return self._invalidating

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback fired once per completed invalidation"""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    async def wait_idle(self) -> None:
        """
        Block a new request until a running invalidation has finished,
        so it cannot go out with the token being discarded
        """
        if not self._invalidating:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._idle_waiters.append(waiter)
        await waiter

    async def handle_unauthorized(
        self,
        sent_token: Optional[str],
        error: Optional[AuthExpiredError] = None,
    ) -> None:
        """
        Process a 401. Always raises AuthExpiredError.

        Args:
            sent_token: token the failed request carried (None if none)
            error: classified 401 error to surface (keeps server message)
        """
        error = error or AuthExpiredError(status_code=401)

        if self._invalidating:
            waiter = asyncio.get_running_loop().create_future()
            self._pending.append(waiter)
            await waiter
            raise error

        if sent_token is None:
            # nothing to invalidate: the request went out anonymous
            raise error

        self._invalidating = True
        try:
            await self._invalidate(sent_token)
        finally:
            self._invalidating = False
            self._release()
        raise error

    async def _invalidate(self, sent_token: str) -> None:
        try:
            current = await asyncio.to_thread(self._storage.get)
        except Exception:
            logger.warning("Could not read stored token during invalidation", exc_info=True)
            current = sent_token

        if current != sent_token:
            # already cleared or replaced by a newer login
            logger.info("401 for a token that is no longer active, session left as is")
            return

        logger.warning("Session expired (401), clearing stored credentials")
        try:
            await asyncio.to_thread(self._storage.clear)
        except Exception:
            logger.exception("Could not clear stored credentials")

        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.exception("Session-expired listener failed")

    def _release(self) -> None:
        # queued 401s raise AuthExpiredError themselves once woken up
        waiters = self._pending + self._idle_waiters
        self._pending, self._idle_waiters = [], []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
