"""
Availability generation - which start times are still open on a given day.

The generator is a pure function of its inputs: business hours for the day,
the slot grid, the service duration and a snapshot of the bookings. It never
touches storage, so the same inputs always yield the same slots.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from parlor_booking.core.exceptions import InvalidInputError
from parlor_booking.domain.entities import BookedInterval, TimeSlot
from parlor_booking.domain.time_utils import format_time, overlaps, parse_time

WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

DEFAULT_SLOT_GRANULARITY = 30


@dataclass(frozen=True)
class BusinessHours:
    """Opening window of a single day, as "HH:MM" strings."""

    start: str
    end: str

    def __post_init__(self):
        if parse_time(self.end) <= parse_time(self.start):
            raise InvalidInputError(
                f"Business hours must close after they open ({self.start}-{self.end})"
            )

    @property
    def start_minutes(self) -> int:
        return parse_time(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_time(self.end)


class BusinessSchedule:
    """Weekly opening hours; a day mapped to ``None`` is closed."""

    def __init__(self, days: Mapping[str, Optional[BusinessHours]]):
        unknown = set(days) - set(WEEKDAY_KEYS)
        if unknown:
            raise InvalidInputError(f"Unknown weekdays: {sorted(unknown)}")
        self._days: Dict[str, Optional[BusinessHours]] = {
            key: days.get(key) for key in WEEKDAY_KEYS
        }

    @classmethod
    def uniform(cls, hours: BusinessHours) -> "BusinessSchedule":
        return cls({key: hours for key in WEEKDAY_KEYS})

    def hours_for_weekday(self, weekday: int) -> Optional[BusinessHours]:
        return self._days[WEEKDAY_KEYS[weekday]]

    def hours_for(self, day: date) -> Optional[BusinessHours]:
        return self.hours_for_weekday(day.weekday())

    def describe(self) -> Dict[str, Optional[str]]:
        return {
            key: f"{hours.start}-{hours.end}" if hours else None
            for key, hours in self._days.items()
        }


def generate_slots(
    day: date,
    business_hours: Optional[BusinessHours],
    slot_granularity_minutes: int,
    service_duration: int,
    existing_bookings: Iterable[BookedInterval],
) -> Tuple[TimeSlot, ...]:
    """Return the open ``[start, start + duration)`` slots for ``day``.

    Candidate starts walk the business window in ``slot_granularity_minutes``
    steps. A candidate is kept when it ends no later than closing time and
    overlaps none of the non-cancelled bookings on the same date. A closed day,
    or a service longer than the whole window, yields an empty result.
    """
    if slot_granularity_minutes is None or slot_granularity_minutes <= 0:
        raise InvalidInputError("Slot granularity must be positive")
    if service_duration is None or service_duration <= 0:
        raise InvalidInputError("Service duration must be positive")
    if business_hours is None:
        return ()

    busy: List[Tuple[int, int]] = [
        (parse_time(booking.start_time), parse_time(booking.end_time))
        for booking in existing_bookings
        if booking.appointment_date == day and not booking.is_cancelled
    ]

    opening = business_hours.start_minutes
    closing = business_hours.end_minutes
    slots: List[TimeSlot] = []

    candidate = opening
    while candidate < closing:
        candidate_end = candidate + service_duration
        if candidate_end > closing:
            break
        if not any(
            overlaps(candidate, candidate_end, busy_start, busy_end)
            for busy_start, busy_end in busy
        ):
            slots.append(
                TimeSlot(
                    start_time=format_time(candidate),
                    end_time=format_time(candidate_end),
                )
            )
        candidate += slot_granularity_minutes

    return tuple(slots)


def generate_slots_for_schedule(
    day: date,
    schedule: BusinessSchedule,
    slot_granularity_minutes: int,
    service_duration: int,
    existing_bookings: Iterable[BookedInterval],
) -> Tuple[TimeSlot, ...]:
    """Resolve the day's opening hours from ``schedule`` and generate slots."""
    return generate_slots(
        day,
        schedule.hours_for(day),
        slot_granularity_minutes,
        service_duration,
        existing_bookings,
    )
