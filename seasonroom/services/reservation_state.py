"""Classification of calendar days against the user's reservations."""
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional

from seasonroom.schemas.reservation import MyReservation

logger = logging.getLogger(__name__)


class ReservationStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    NONE = "none"


@dataclass(frozen=True)
class DayReservationState:
    """Reservation state of one calendar day."""

    status: ReservationStatus = ReservationStatus.NONE
    teaching: bool = False
    reservation_id: Optional[int] = None
    waiting_order: Optional[int] = None

    @property
    def is_reserved(self) -> bool:
        return self.status != ReservationStatus.NONE

    @property
    def is_confirmed(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED


NO_RESERVATION = DayReservationState()


def normalize_status(status: Optional[str]) -> ReservationStatus:
    """Backend statuses ("confirmed", "CONFIRMED", "waiting", ...) to our three states."""
    if status is None:
        return ReservationStatus.NONE
    if status.strip().lower() == "confirmed":
        return ReservationStatus.CONFIRMED
    return ReservationStatus.PENDING


@dataclass
class Classification:
    """Result of :func:`classify`."""

    days: Dict[date, DayReservationState]
    anomalies: List[date] = field(default_factory=list)

    def __getitem__(self, day: date) -> DayReservationState:
        return self.days.get(day, NO_RESERVATION)


def classify(days: Iterable[date], reservations: Iterable[MyReservation]) -> Classification:
    """
    Classify each day as confirmed, pending or without reservation.

    At most one active reservation per day is expected. When the backend
    reports more, the first one wins and the day is recorded as a data
    integrity anomaly.

    Args:
        days: Days of the viewed month
        reservations: Reservations reported by the backend

    Returns:
        Classification with one state per requested day
    """
    by_date: Dict[date, MyReservation] = {}
    anomalies: List[date] = []

    for reservation in reservations:
        if reservation.date in by_date:
            if reservation.date not in anomalies:
                anomalies.append(reservation.date)
            logger.warning(
                f"Data integrity: duplicate reservation on {reservation.date} "
                f"(keeping {by_date[reservation.date].reservation_id}, "
                f"ignoring {reservation.reservation_id})"
            )
            continue
        by_date[reservation.date] = reservation

    result: Dict[date, DayReservationState] = {}
    for day in days:
        reservation = by_date.get(day)
        if reservation is None:
            result[day] = NO_RESERVATION
            continue
        result[day] = DayReservationState(
            status=normalize_status(reservation.status),
            teaching=reservation.teaching,
            reservation_id=reservation.reservation_id,
            waiting_order=reservation.waiting_order,
        )

    return Classification(days=result, anomalies=anomalies)


@dataclass
class MonthReservations:
    """The user's reservations for one viewed month, as reported by the backend."""

    crew_id: int
    year: int
    month: int
    reservations: List[MyReservation]
    usage_count: int = 0
