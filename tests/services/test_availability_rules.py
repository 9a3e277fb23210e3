from datetime import date, datetime, time, timedelta

import pytest

from seasonroom.core.clock import FixedClock
from seasonroom.schemas.crew import CrewDetail
from seasonroom.services.availability_rules import (
    AvailabilityRules,
    OpenRule,
    is_day_available,
    next_saturday,
    opening_instant,
    this_saturday,
)

FRIDAY_18 = OpenRule(weekday=5, time=time(18, 0))
TODAY = date(2025, 12, 10)  # Wednesday


def available_at(target: date, now: datetime, rule=FRIDAY_18) -> bool:
    return is_day_available(target, now.date(), rule, now)


def test_this_saturday_from_midweek():
    assert this_saturday(TODAY) == date(2025, 12, 13)
    assert next_saturday(TODAY) == date(2025, 12, 20)


def test_this_saturday_is_today_on_saturday():
    assert this_saturday(date(2025, 12, 13)) == date(2025, 12, 13)


def test_this_saturday_from_sunday_is_end_of_that_week():
    assert this_saturday(date(2025, 12, 14)) == date(2025, 12, 20)


def test_opening_instant_is_in_current_week():
    assert opening_instant(TODAY, FRIDAY_18) == datetime(2025, 12, 12, 18, 0)


def test_opening_instant_can_be_in_the_past():
    # On Saturday the week's Friday opening already happened
    assert opening_instant(date(2025, 12, 13), FRIDAY_18) == datetime(2025, 12, 12, 18, 0)
    # A Sunday opening rule projects onto the start of the week
    sunday_rule = OpenRule(weekday=0, time=time(9, 0))
    assert opening_instant(TODAY, sunday_rule) == datetime(2025, 12, 7, 9, 0)


def test_past_dates_are_never_available():
    now = datetime(2025, 12, 12, 19, 0)
    for offset in range(1, 40):
        assert not available_at(now.date() - timedelta(days=offset), now)


def test_current_week_is_always_available_regardless_of_rule():
    now = datetime(2025, 12, 10, 0, 0)
    for rule in (FRIDAY_18, None, OpenRule(weekday=6, time=time(23, 59))):
        for day in (10, 11, 12, 13):
            assert is_day_available(date(2025, 12, day), TODAY, rule, now)


def test_beyond_next_saturday_is_never_available():
    now = datetime(2025, 12, 13, 23, 59)
    for offset in range(1, 30):
        assert not available_at(date(2025, 12, 20) + timedelta(days=offset), now)


def test_end_to_end_friday_opening():
    target = date(2025, 12, 20)

    assert not available_at(target, datetime(2025, 12, 10, 10, 0))
    assert not available_at(target, datetime(2025, 12, 12, 17, 59))
    assert available_at(target, datetime(2025, 12, 12, 18, 0))
    assert available_at(target, datetime(2025, 12, 12, 18, 1))

    assert available_at(date(2025, 12, 13), datetime(2025, 12, 10, 10, 0))
    assert available_at(date(2025, 12, 13), datetime(2025, 12, 13, 23, 0))

    for now in (datetime(2025, 12, 10, 10, 0), datetime(2025, 12, 12, 18, 1), datetime(2025, 12, 13, 23, 59)):
        assert not available_at(date(2025, 12, 22), now)


def test_next_week_stays_open_once_opened():
    target = date(2025, 12, 19)
    now = datetime(2025, 12, 10, 0, 0)
    seen_open = False
    while now.date() <= date(2025, 12, 13):
        is_open = available_at(target, now)
        if seen_open:
            assert is_open
        seen_open = seen_open or is_open
        now += timedelta(minutes=30)
    assert seen_open


def test_next_week_closed_without_rule():
    now = datetime(2025, 12, 13, 12, 0)
    assert not is_day_available(date(2025, 12, 18), now.date(), None, now)


def test_parse_rule():
    rule = OpenRule.parse("friday", "18:00")
    assert rule == FRIDAY_18
    assert OpenRule.parse("MONDAY", "09:30:15") == OpenRule(weekday=1, time=time(9, 30, 15))


@pytest.mark.parametrize("day_name,time_str", [("FUNDAY", "18:00"), ("FRIDAY", "25:00"), ("FRIDAY", "")])
def test_parse_rule_rejects_garbage(day_name, time_str):
    with pytest.raises(ValueError):
        OpenRule.parse(day_name, time_str)


def test_rule_from_crew():
    crew = CrewDetail(crew_id=1, name="c", reservation_day="FRIDAY", reservation_time="18:00")
    assert OpenRule.from_crew(crew) == FRIDAY_18
    assert OpenRule.from_crew(None) is None
    assert OpenRule.from_crew(CrewDetail(crew_id=1, name="c")) is None
    assert OpenRule.from_crew(CrewDetail(crew_id=1, name="c", reservation_day="X", reservation_time="18:00")) is None


def test_rules_follow_the_clock():
    clock = FixedClock(datetime(2025, 12, 10, 10, 0))
    rules = AvailabilityRules(clock)

    assert not rules.is_available(date(2025, 12, 20), FRIDAY_18)
    clock.set(datetime(2025, 12, 12, 18, 1))
    assert rules.is_available(date(2025, 12, 20), FRIDAY_18)
    assert rules.horizon() == date(2025, 12, 20)
