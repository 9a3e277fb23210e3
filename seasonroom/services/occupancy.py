"""Crew-wide occupancy levels for the crew calendar."""
from enum import Enum

LOW_THRESHOLD = 0.4
HIGH_THRESHOLD = 0.8


class OccupancyLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


LEVEL_COLORS = {
    OccupancyLevel.LOW: "green",
    OccupancyLevel.MEDIUM: "yellow",
    OccupancyLevel.HIGH: "red",
}


def occupancy_ratio(booked_count: int, capacity: int, is_capacity_limited: bool = True) -> float:
    # Unlimited crews and a zero capacity both count as empty
    if not is_capacity_limited or capacity <= 0:
        return 0.0
    return booked_count / capacity


def bucket(booked_count: int, capacity: int, is_capacity_limited: bool = True) -> OccupancyLevel:
    """
    Map a day's headcount to an occupancy level.

    Args:
        booked_count: Number of reservations on the day
        capacity: Crew daily capacity
        is_capacity_limited: False when the crew has no daily limit

    Returns:
        LOW below 40% of capacity, MEDIUM below 80%, HIGH otherwise
    """
    ratio = occupancy_ratio(booked_count, capacity, is_capacity_limited)
    if ratio < LOW_THRESHOLD:
        return OccupancyLevel.LOW
    if ratio < HIGH_THRESHOLD:
        return OccupancyLevel.MEDIUM
    return OccupancyLevel.HIGH


def color_for(level: OccupancyLevel) -> str:
    return LEVEL_COLORS[level]
