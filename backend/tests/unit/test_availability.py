"""Unit tests for the availability slot generator."""

from datetime import date

import pytest

from parlor_booking.core.exceptions import InvalidInputError
from parlor_booking.domain.availability import (
    BusinessHours,
    BusinessSchedule,
    generate_slots,
    generate_slots_for_schedule,
)
from parlor_booking.domain.entities import STATUS_CANCELLED, TimeSlot
from tests.factories.repository_factories import booking

DAY = date(2024, 2, 15)
HOURS = BusinessHours("09:00", "19:00")


class TestGenerateSlots:
    def test_open_day_without_bookings(self):
        slots = generate_slots(DAY, HOURS, 30, 60, [])

        assert slots[0] == TimeSlot("09:00", "10:00")
        assert slots[-1] == TimeSlot("18:00", "19:00")
        assert len(slots) == 19

    def test_slots_are_ordered_and_on_the_grid(self):
        slots = generate_slots(DAY, HOURS, 30, 45, [])
        starts = [s.start_time for s in slots]

        assert starts == sorted(starts)
        assert all(s.start_time[-2:] in ("00", "30") for s in slots)
        assert slots[-1] == TimeSlot("18:00", "18:45")

    def test_booked_interval_removes_overlapping_candidates(self):
        slots = generate_slots(DAY, HOURS, 30, 60, [booking(1, "10:00", "11:30")])
        starts = {s.start_time for s in slots}

        assert {"09:30", "10:00", "10:30", "11:00"}.isdisjoint(starts)
        # Touching the booking on either side is fine
        assert "09:00" in starts
        assert "11:30" in starts

    def test_cancelled_bookings_are_ignored(self):
        cancelled = booking(1, "10:00", "11:30", status=STATUS_CANCELLED)

        assert generate_slots(DAY, HOURS, 30, 60, [cancelled]) == generate_slots(
            DAY, HOURS, 30, 60, []
        )

    def test_bookings_on_other_dates_are_ignored(self):
        other_day = booking(1, "10:00", "11:30", day=date(2024, 2, 16))

        assert len(generate_slots(DAY, HOURS, 30, 60, [other_day])) == 19

    def test_duration_longer_than_window_yields_nothing(self):
        assert generate_slots(DAY, HOURS, 30, 11 * 60, []) == ()

    def test_window_exactly_one_duration(self):
        assert generate_slots(DAY, HOURS, 30, 600, []) == (TimeSlot("09:00", "19:00"),)

    def test_closed_day_yields_nothing(self):
        assert generate_slots(DAY, None, 30, 60, []) == ()

    def test_fully_booked_day_yields_nothing(self):
        assert generate_slots(DAY, HOURS, 30, 60, [booking(1, "09:00", "19:00")]) == ()

    @pytest.mark.parametrize("granularity, duration", [(0, 60), (-15, 60), (30, 0)])
    def test_non_positive_inputs_are_rejected(self, granularity, duration):
        with pytest.raises(InvalidInputError):
            generate_slots(DAY, HOURS, granularity, duration, [])

    def test_same_inputs_give_same_result(self):
        bookings = [booking(1, "12:00", "13:00")]

        assert generate_slots(DAY, HOURS, 15, 90, bookings) == generate_slots(
            DAY, HOURS, 15, 90, bookings
        )


class TestBusinessSchedule:
    def test_closing_must_follow_opening(self):
        with pytest.raises(InvalidInputError):
            BusinessHours("19:00", "09:00")

    def test_closed_weekday_has_no_slots(self):
        schedule = BusinessSchedule(
            {
                "mon": HOURS,
                "tue": HOURS,
                "wed": HOURS,
                "thu": HOURS,
                "fri": HOURS,
                "sat": BusinessHours("09:00", "20:00"),
                "sun": None,
            }
        )
        sunday = date(2024, 2, 18)
        saturday = date(2024, 2, 17)

        assert generate_slots_for_schedule(sunday, schedule, 30, 60, []) == ()
        assert generate_slots_for_schedule(saturday, schedule, 30, 60, [])[-1] == (
            TimeSlot("19:00", "20:00")
        )

    def test_unknown_weekday_rejected(self):
        with pytest.raises(InvalidInputError):
            BusinessSchedule({"funday": HOURS})

    def test_describe(self):
        described = BusinessSchedule.uniform(HOURS).describe()

        assert described["mon"] == "09:00-19:00"
        assert len(described) == 7
