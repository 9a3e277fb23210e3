"""Reservation commands and the per-day state machine behind them.

    NONE --select--> SELECTED --submit--> SUBMITTING --ok--> RESERVED
    RESERVED --request_cancel--> CANCEL_CONFIRMING --confirm--> SUBMITTING --ok--> NONE

Selection is ephemeral and kept here; reservations come from the backend
and are re-read after every successful command. A failed command leaves
the day where it was before the command started.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from seasonroom.core.exceptions import (
    CrewApiError,
    InvalidTransitionError,
    ReservationValidationError,
)
from seasonroom.schemas.reservation import GuestInfo
from seasonroom.services.availability_rules import AvailabilityRules, OpenRule
from seasonroom.services.calendar_dates import format_iso_date, month_days
from seasonroom.services.crew_client import CrewApiClient
from seasonroom.services.reservation_cache import ReservationCache
from seasonroom.services.reservation_state import (
    NO_RESERVATION,
    Classification,
    DayReservationState,
    MonthReservations,
    classify,
)

logger = logging.getLogger(__name__)


class DayPhase(str, Enum):
    NONE = "none"
    SELECTED = "selected"
    SUBMITTING = "submitting"
    RESERVED = "reserved"
    CANCEL_CONFIRMING = "cancel_confirming"


@dataclass
class CommandResult:
    """Outcome of a command sent to the backend."""

    action: str  # create, cancel, teaching
    ok: bool
    dates: List[date] = field(default_factory=list)
    message: Optional[str] = None


PhaseListener = Callable[[date, DayPhase, DayPhase], None]

PHONE_PATTERN = re.compile(r"^01[016789]-?\d{3,4}-?\d{4}$")


def validate_guest_info(guest: GuestInfo) -> None:
    """Reject guest details the backend would refuse."""
    if not guest.name.strip():
        raise ReservationValidationError("Guest name is required")
    if not PHONE_PATTERN.match(guest.phone_number.strip()):
        raise ReservationValidationError(f"Invalid phone number '{guest.phone_number}'")


class ReservationCommandFlow:
    """Select, submit, cancel and teaching commands of one user in one crew."""

    def __init__(
        self,
        client: CrewApiClient,
        cache: ReservationCache,
        rules: AvailabilityRules,
        crew_id: int,
        open_rule: Optional[OpenRule],
    ):
        self.client = client
        self.cache = cache
        self.rules = rules
        self.crew_id = crew_id
        self.open_rule = open_rule

        self._months: Dict[Tuple[int, int], MonthReservations] = {}
        self._classified: Dict[Tuple[int, int], Classification] = {}
        self._selected: Set[date] = set()
        self._submitting: Set[date] = set()
        self._cancel_confirming: Set[date] = set()
        self._teaching_overrides: Dict[date, bool] = {}
        self._create_in_flight = False
        self._listeners: List[PhaseListener] = []
        self.last_error: Optional[str] = None

    # State

    def on_change(self, listener: PhaseListener) -> None:
        """Register a callback receiving (day, old_phase, new_phase)."""
        self._listeners.append(listener)

    @property
    def selected(self) -> List[date]:
        return sorted(self._selected)

    @property
    def usage_count(self) -> int:
        if not self._months:
            return 0
        # Every month response carries the same all-time count
        return next(iter(self._months.values())).usage_count

    def month(self, year: int, month: int) -> Optional[MonthReservations]:
        return self._months.get((year, month))

    def anomalies(self, year: int, month: int) -> List[date]:
        """Days the backend reported more than one active reservation for."""
        classification = self._classified.get((year, month))
        return list(classification.anomalies) if classification else []

    def is_month_loaded(self, day: date) -> bool:
        return (day.year, day.month) in self._months

    def reservation_of(self, day: date) -> DayReservationState:
        classification = self._classified.get((day.year, day.month))
        if classification is None:
            return NO_RESERVATION

        state = classification[day]
        if day in self._teaching_overrides:
            state = DayReservationState(
                status=state.status,
                teaching=self._teaching_overrides[day],
                reservation_id=state.reservation_id,
                waiting_order=state.waiting_order,
            )
        return state

    def phase(self, day: date) -> DayPhase:
        if day in self._submitting:
            return DayPhase.SUBMITTING
        if day in self._cancel_confirming:
            return DayPhase.CANCEL_CONFIRMING
        if self.reservation_of(day).is_reserved:
            return DayPhase.RESERVED
        if day in self._selected:
            return DayPhase.SELECTED
        return DayPhase.NONE

    def is_available(self, day: date) -> bool:
        return self.rules.is_available(day, self.open_rule)

    def is_selectable(self, day: date) -> bool:
        return self.phase(day) == DayPhase.NONE and self.is_available(day)

    def _snapshot(self, days: Iterable[date]) -> Dict[date, DayPhase]:
        return {day: self.phase(day) for day in days}

    def _notify(self, before: Dict[date, DayPhase]) -> None:
        for day, old_phase in before.items():
            new_phase = self.phase(day)
            if new_phase == old_phase:
                continue
            logger.debug(f"{format_iso_date(day)}: {old_phase.value} -> {new_phase.value}")
            for listener in self._listeners:
                listener(day, old_phase, new_phase)

    def _fail(self, action: str, dates: List[date], error: CrewApiError) -> CommandResult:
        self.last_error = error.message
        logger.error(f"Reservation {action} failed for {[format_iso_date(d) for d in dates]}: {error}")
        return CommandResult(action=action, ok=False, dates=dates, message=error.message)

    # Loading

    async def load_month(self, year: int, month: int) -> MonthReservations:
        entry = await self.cache.get_month(self.crew_id, year, month)
        classification = classify(month_days(year, month), entry.reservations)
        self._months[(year, month)] = entry
        self._classified[(year, month)] = classification

        in_month = [day for day in self._selected if (day.year, day.month) == (year, month)]
        reserved = [day for day in in_month if classification[day].is_reserved]
        if reserved:
            logger.info(f"Dropping already reserved days from selection: {[format_iso_date(d) for d in reserved]}")
            self._selected.difference_update(reserved)

        # Fresh data replaces optimistic teaching flags of days no longer in flight
        for day in [d for d in self._teaching_overrides if (d.year, d.month) == (year, month)]:
            if day not in self._submitting:
                del self._teaching_overrides[day]
        return entry

    async def refresh(self) -> None:
        """Re-read every loaded month from the backend."""
        self.cache.invalidate(self.crew_id)
        for year, month in list(self._months):
            await self.load_month(year, month)

    async def _refresh_after(self, action: str) -> bool:
        # The command already went through; a failed re-read only leaves stale data
        try:
            await self.refresh()
        except CrewApiError as e:
            self.last_error = e.message
            logger.warning(f"Refresh after {action} failed, calendar may be stale: {e}")
            return False
        self.last_error = None
        return True

    # Commands

    def select(self, day: date) -> DayPhase:
        """
        Toggle ``day`` in the selection.

        Raises:
            InvalidTransitionError: If the day is reserved or busy
            ReservationValidationError: If the day cannot be reserved now
        """
        current = self.phase(day)
        before = {day: current}

        if current == DayPhase.SELECTED:
            self._selected.discard(day)
        elif current == DayPhase.NONE:
            if not self.is_available(day):
                raise ReservationValidationError(f"{format_iso_date(day)} is not open for reservation")
            self._selected.add(day)
        else:
            raise InvalidTransitionError(f"Cannot select {format_iso_date(day)} while {current.value}")

        self._notify(before)
        return self.phase(day)

    def clear_selection(self) -> None:
        before = self._snapshot(self._selected)
        self._selected.clear()
        self._notify(before)

    async def submit(self, guest_info: Optional[GuestInfo] = None) -> CommandResult:
        """
        Reserve every selected day in one request.

        Returns:
            CommandResult; on failure the selection is kept

        Raises:
            InvalidTransitionError: If a submission is already in flight
            ReservationValidationError: If the selection is empty or stale
        """
        if self._create_in_flight:
            raise InvalidTransitionError("A reservation request is already in progress")

        dates = self.selected
        if not dates:
            raise ReservationValidationError("No dates selected")

        if guest_info is not None:
            validate_guest_info(guest_info)

        closed = [day for day in dates if not self.is_available(day)]
        if closed:
            raise ReservationValidationError(
                f"No longer open for reservation: {', '.join(format_iso_date(d) for d in closed)}"
            )

        before = self._snapshot(dates)
        self._create_in_flight = True
        self._submitting.update(dates)
        self._notify(before)

        before = self._snapshot(dates)
        try:
            await self.client.create_reservations(self.crew_id, dates, guest_info)
        except CrewApiError as e:
            return self._fail("create", dates, e)
        else:
            logger.info(f"Reserved {[format_iso_date(d) for d in dates]} in crew {self.crew_id}")
            self._selected.difference_update(dates)
            await self._refresh_after("create")
        finally:
            self._submitting.difference_update(dates)
            self._create_in_flight = False
            self._notify(before)

        return CommandResult(action="create", ok=True, dates=dates)

    def request_cancel(self, day: date) -> DayPhase:
        current = self.phase(day)
        if current != DayPhase.RESERVED:
            raise InvalidTransitionError(f"Cannot cancel {format_iso_date(day)} while {current.value}")

        self._cancel_confirming.add(day)
        self._notify({day: current})
        return self.phase(day)

    def abort_cancel(self, day: date) -> DayPhase:
        current = self.phase(day)
        if current != DayPhase.CANCEL_CONFIRMING:
            raise InvalidTransitionError(f"No pending cancellation for {format_iso_date(day)}")

        self._cancel_confirming.discard(day)
        self._notify({day: current})
        return self.phase(day)

    async def confirm_cancel(self, day: date) -> CommandResult:
        current = self.phase(day)
        if current != DayPhase.CANCEL_CONFIRMING:
            raise InvalidTransitionError(f"No pending cancellation for {format_iso_date(day)}")

        self._cancel_confirming.discard(day)
        self._submitting.add(day)
        self._notify({day: current})

        before = {day: DayPhase.SUBMITTING}
        try:
            await self.client.cancel_reservations(self.crew_id, [day])
        except CrewApiError as e:
            return self._fail("cancel", [day], e)
        else:
            logger.info(f"Cancelled {format_iso_date(day)} in crew {self.crew_id}")
            await self._refresh_after("cancel")
        finally:
            self._submitting.discard(day)
            self._notify(before)

        return CommandResult(action="cancel", ok=True, dates=[day])

    async def toggle_teaching(self, day: date) -> CommandResult:
        """
        Apply for, or withdraw from, teaching on a confirmed reservation.

        The teaching flag flips immediately. It is reverted if the backend
        rejects the change, and kept until the calendar could be re-read
        otherwise.
        """
        current = self.phase(day)
        state = self.reservation_of(day)
        if current != DayPhase.RESERVED or not state.is_confirmed:
            raise InvalidTransitionError(
                f"Teaching can only be changed on a confirmed reservation ({format_iso_date(day)})"
            )
        if state.reservation_id is None:
            raise ReservationValidationError(f"Reservation on {format_iso_date(day)} has no id")

        applying = not state.teaching
        self._teaching_overrides[day] = applying
        self._submitting.add(day)
        self._notify({day: current})

        before = {day: DayPhase.SUBMITTING}
        sent = False
        try:
            if applying:
                await self.client.apply_teaching(self.crew_id, state.reservation_id)
            else:
                await self.client.withdraw_teaching(self.crew_id, state.reservation_id)
            sent = True
        except CrewApiError as e:
            return self._fail("teaching", [day], e)
        else:
            if await self._refresh_after("teaching"):
                self._teaching_overrides.pop(day, None)
        finally:
            if not sent:
                self._teaching_overrides.pop(day, None)
            self._submitting.discard(day)
            self._notify(before)

        return CommandResult(action="teaching", ok=True, dates=[day])
