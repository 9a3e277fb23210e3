import logging
from datetime import date

from seasonroom.schemas.reservation import MyReservation
from seasonroom.services.calendar_dates import month_days
from seasonroom.services.reservation_state import (
    ReservationStatus,
    classify,
    normalize_status,
)


def reservation(day, status="confirmed", reservation_id=1, teaching=False):
    return MyReservation(date=day, status=status, reservation_id=reservation_id, teaching=teaching)


def test_single_confirmed_reservation():
    days = month_days(2025, 12)
    result = classify(days, [reservation(date(2025, 12, 14))])

    assert result[date(2025, 12, 14)].status == ReservationStatus.CONFIRMED
    others = [d for d in days if d != date(2025, 12, 14)]
    assert all(result[d].status == ReservationStatus.NONE for d in others)
    assert result.anomalies == []


def test_non_confirmed_statuses_are_pending():
    days = month_days(2025, 12)
    result = classify(
        days,
        [
            reservation(date(2025, 12, 1), status="waiting"),
            reservation(date(2025, 12, 2), status="WAITING"),
            reservation(date(2025, 12, 3), status="created"),
            reservation(date(2025, 12, 4), status="CONFIRMED", teaching=True),
        ],
    )

    assert result[date(2025, 12, 1)].status == ReservationStatus.PENDING
    assert result[date(2025, 12, 2)].status == ReservationStatus.PENDING
    assert result[date(2025, 12, 3)].status == ReservationStatus.PENDING
    assert result[date(2025, 12, 4)].status == ReservationStatus.CONFIRMED
    assert result[date(2025, 12, 4)].teaching is True


def test_reservations_outside_requested_days_are_ignored():
    result = classify(month_days(2025, 12), [reservation(date(2026, 1, 3))])
    assert date(2026, 1, 3) not in result.days
    assert result[date(2026, 1, 3)].status == ReservationStatus.NONE


def test_duplicate_reservation_first_wins_and_is_reported(caplog):
    day = date(2025, 12, 20)
    with caplog.at_level(logging.WARNING):
        result = classify(
            [day],
            [
                reservation(day, status="waiting", reservation_id=1),
                reservation(day, status="confirmed", reservation_id=2),
            ],
        )

    assert result[day].status == ReservationStatus.PENDING
    assert result[day].reservation_id == 1
    assert result.anomalies == [day]
    assert "duplicate reservation" in caplog.text


def test_normalize_status():
    assert normalize_status(None) == ReservationStatus.NONE
    assert normalize_status(" Confirmed ") == ReservationStatus.CONFIRMED
    assert normalize_status("waiting") == ReservationStatus.PENDING
