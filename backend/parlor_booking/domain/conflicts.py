"""Detection of scheduling conflicts between a proposed interval and bookings."""

from datetime import date
from typing import Iterable, List, Optional

from parlor_booking.domain.entities import BookedInterval
from parlor_booking.domain.time_utils import overlaps, parse_time


def find_conflicts(
    day: date,
    proposed_start: str,
    proposed_end: str,
    existing_bookings: Iterable[BookedInterval],
    exclude_id: Optional[int] = None,
) -> List[BookedInterval]:
    """Return the bookings that overlap ``[proposed_start, proposed_end)``.

    Only bookings on the same date count. Cancelled bookings and the booking
    whose id is ``exclude_id`` (the one being rescheduled) are ignored.
    Touching boundaries (end == start) are not conflicts.
    """
    start = parse_time(proposed_start)
    end = parse_time(proposed_end)

    return [
        booking
        for booking in existing_bookings
        if booking.appointment_date == day
        and not booking.is_cancelled
        and (exclude_id is None or booking.id != exclude_id)
        and overlaps(
            parse_time(booking.start_time), parse_time(booking.end_time), start, end
        )
    ]


def has_conflict(
    day: date,
    proposed_start: str,
    proposed_end: str,
    existing_bookings: Iterable[BookedInterval],
    exclude_id: Optional[int] = None,
) -> bool:
    """True if the proposed interval overlaps any remaining booking."""
    return bool(
        find_conflicts(day, proposed_start, proposed_end, existing_bookings, exclude_id)
    )
