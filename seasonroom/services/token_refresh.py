"""Single-flight access token refresh."""
import asyncio
import logging
from typing import Awaitable, Callable, List

from seasonroom.core.exceptions import CrewApiError, SessionExpiredError
from seasonroom.schemas.common import TokenPair
from seasonroom.services.token_store import TokenStore

logger = logging.getLogger(__name__)

RefreshFunc = Callable[[str], Awaitable[TokenPair]]


class TokenRefreshCoordinator:
    """
    Makes concurrent callers share one refresh request.

    The first caller performs the refresh; callers arriving while it is in
    progress are queued and receive the same new access token. When there
    is no refresh token, or the refresh fails, every queued caller is
    rejected and the stored session is cleared.
    """

    def __init__(self, token_store: TokenStore, refresh_func: RefreshFunc):
        self.token_store = token_store
        self.refresh_func = refresh_func
        self._lock = asyncio.Lock()
        self._refreshing = False
        self._waiters: List[asyncio.Future] = []

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    async def refresh(self) -> str:
        """
        Obtain a fresh access token.

        Returns:
            The new access token

        Raises:
            SessionExpiredError: If the session cannot be refreshed
        """
        async with self._lock:
            if self._refreshing:
                waiter = asyncio.get_running_loop().create_future()
                self._waiters.append(waiter)
            else:
                self._refreshing = True
                waiter = None

        if waiter is not None:
            logger.debug("Token refresh already in progress, queueing request")
            return await waiter

        try:
            access_token = await self._refresh_tokens()
        except asyncio.CancelledError:
            logger.warning("Token refresh cancelled, rejecting queued requests")
            self._settle(error=SessionExpiredError("Token refresh was cancelled"))
            raise
        except Exception as e:
            self._settle(error=e)
            raise

        self._settle(access_token=access_token)
        return access_token

    async def _refresh_tokens(self) -> str:
        refresh_token = self.token_store.refresh_token
        if not refresh_token:
            self.token_store.clear()
            raise SessionExpiredError("No refresh token available")

        logger.info("Refreshing access token")
        try:
            tokens = await self.refresh_func(refresh_token)
        except CrewApiError as e:
            logger.warning(f"Token refresh failed: {e}")
            self.token_store.clear()
            raise SessionExpiredError(f"Token refresh failed: {e}") from e

        self.token_store.save(tokens)
        return tokens.access_token

    def _settle(self, access_token: str = None, error: Exception = None) -> None:
        # Must not await: it also runs while the leading task is being cancelled
        waiters, self._waiters = self._waiters, []
        self._refreshing = False

        for waiter in waiters:
            if waiter.done():
                continue
            if error is not None:
                waiter.set_exception(SessionExpiredError(str(error)))
            else:
                waiter.set_result(access_token)
