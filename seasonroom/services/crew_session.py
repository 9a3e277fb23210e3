"""The signed-in user's crew context.

The service runs on behalf of a single user, the way a browser keeps one
token pair in local storage: one process-wide :data:`crew_session` and one
token file back every HTTP caller. Run one instance per user.
"""
import logging
from typing import Optional

from seasonroom.core.clock import Clock, SystemClock
from seasonroom.core.config import settings
from seasonroom.core.exceptions import ReservationValidationError
from seasonroom.schemas.common import TokenPair
from seasonroom.schemas.crew import CrewDetail
from seasonroom.schemas.user import UserDetail
from seasonroom.services.availability_rules import AvailabilityRules, OpenRule
from seasonroom.services.crew_client import CrewApiClient, crew_client
from seasonroom.services.reservation_cache import ReservationCache
from seasonroom.services.reservation_commands import ReservationCommandFlow

logger = logging.getLogger(__name__)


class CrewSession:
    """
    Lazily loads the current user and their crew, and owns the
    reservation command flow built on top of them.
    """

    def __init__(self, client: CrewApiClient, clock: Clock):
        self.client = client
        self.clock = clock
        self.rules = AvailabilityRules(clock)
        self.cache = ReservationCache(client)
        self.user: Optional[UserDetail] = None
        self.crew: Optional[CrewDetail] = None
        self._flow: Optional[ReservationCommandFlow] = None

    def sign_in(self, tokens: TokenPair) -> None:
        self.client.token_store.save(tokens)
        self.reset()

    def sign_out(self) -> None:
        self.client.token_store.clear()
        self.reset()

    def reset(self) -> None:
        """Forget everything loaded for the previous session."""
        self.user = None
        self.crew = None
        self._flow = None
        self.cache.invalidate()

    async def get_user(self) -> UserDetail:
        if self.user is None:
            self.user = await self.client.get_current_user()
        return self.user

    async def get_crew(self) -> CrewDetail:
        if self.crew is None:
            user = await self.get_user()
            if user.crew is None:
                raise ReservationValidationError("You have not joined a crew yet")
            self.crew = await self.client.get_crew(user.crew.crew_id)
            logger.info(
                f"Loaded crew {self.crew.name} ({self.crew.crew_id}), opens "
                f"{self.crew.reservation_day} {self.crew.reservation_time}"
            )
        return self.crew

    async def get_flow(self) -> ReservationCommandFlow:
        if self._flow is None:
            crew = await self.get_crew()
            self._flow = ReservationCommandFlow(
                client=self.client,
                cache=self.cache,
                rules=self.rules,
                crew_id=crew.crew_id,
                open_rule=OpenRule.from_crew(crew),
            )
        return self._flow


# Singleton instance
crew_session = CrewSession(crew_client, SystemClock(settings.TIMEZONE))
