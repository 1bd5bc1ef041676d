"""
Appointment service - the booking orchestrator.

Composes the conflict checker with persistence so that every
check-then-write on a date happens inside that date's critical section:
the in-process date lock plus, on PostgreSQL, a transaction-scoped advisory
lock. Calendar sync runs only after the commit and can never undo a booking.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from parlor_booking.core import config
from parlor_booking.core.exceptions import (
    BookingError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from parlor_booking.domain.availability import (
    BusinessSchedule,
    generate_slots_for_schedule,
)
from parlor_booking.domain.conflicts import find_conflicts
from parlor_booking.domain.entities import (
    ACTIVE_STATUSES,
    APPOINTMENT_STATUSES,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_CONFIRMED,
    Appointment,
    Customer,
    Page,
    Service,
)
from parlor_booking.domain.interfaces import (
    IAppointmentRepository,
    ICalendarSync,
    ICustomerRepository,
    IServiceRepository,
)
from parlor_booking.domain.time_utils import (
    MINUTES_PER_DAY,
    format_time,
    parse_date,
    parse_time,
)
from parlor_booking.schemas.dtos import (
    AppointmentCreateRequest,
    AppointmentResponse,
    AppointmentUpdateRequest,
    AvailabilityResponse,
    BookingResult,
)
from parlor_booking.services.date_locks import DateLockRegistry, date_locks

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def validate_pagination(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidInputError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidInputError(f"limit must be between 1 and {MAX_PAGE_SIZE}")


class AppointmentService:
    """Application service for booking use-cases.

    All repositories are expected to share one database session, so the
    appointment repository's ``transaction()`` also covers customer writes.
    """

    def __init__(
        self,
        appointment_repo: IAppointmentRepository,
        customer_repo: ICustomerRepository,
        service_repo: IServiceRepository,
        calendar_sync: Optional[ICalendarSync] = None,
        locks: Optional[DateLockRegistry] = None,
        schedule: Optional[BusinessSchedule] = None,
        slot_granularity: Optional[int] = None,
    ):
        self.appointment_repo = appointment_repo
        self.customer_repo = customer_repo
        self.service_repo = service_repo
        self.calendar_sync = calendar_sync
        self.locks = locks or date_locks
        self.schedule = schedule or config.BUSINESS_SCHEDULE
        self.slot_granularity = slot_granularity or config.SLOT_GRANULARITY_MINUTES

    # Commands

    def create_appointment(self, request: AppointmentCreateRequest) -> BookingResult:
        """Book a service for a customer.

        Business Rules:
        - Customer is resolved by exact email and created when absent
        - Service must exist and be active
        - The interval must fit in one day and overlap no live booking
        """
        request.validate()
        day = request.day
        start_time = format_time(parse_time(request.start_time))

        service = self._get_bookable_service(request.service_id)
        end_time = self._end_time(start_time, service.duration)

        with self.locks.hold(day):
            with self.appointment_repo.transaction():
                self.appointment_repo.lock_date(day)
                self._ensure_free(day, start_time, end_time)
                customer = self._resolve_customer(request)
                created = self.appointment_repo.create(
                    Appointment(
                        customer_id=customer.id,
                        service_id=service.id,
                        appointment_date=day,
                        start_time=start_time,
                        end_time=end_time,
                        status=STATUS_CONFIRMED,
                        total_price=service.price,
                        special_requests=request.special_requests,
                    )
                )

        created.customer = created.customer or customer
        created.service = created.service or service
        logger.info(
            "Appointment booked",
            extra={
                "context": {
                    "appointment_id": created.id,
                    "customer_id": customer.id,
                    "service_id": service.id,
                    "date": day.isoformat(),
                    "start_time": start_time,
                    "end_time": end_time,
                }
            },
        )

        warnings = self._sync_created(created)
        return BookingResult(AppointmentResponse.from_domain(created), warnings)

    def update_appointment(
        self, appointment_id: int, request: AppointmentUpdateRequest
    ) -> BookingResult:
        """Reschedule an appointment and/or apply administrative edits."""
        request.validate()
        appointment = self._get_appointment(appointment_id)

        if (
            request.customer_id is not None
            and request.customer_id != appointment.customer_id
        ):
            raise InvalidInputError("customer_id cannot be changed")
        if (
            request.service_id is not None
            and request.service_id != appointment.service_id
        ):
            raise InvalidInputError("service_id cannot be changed")
        if request.status == STATUS_CANCELLED:
            raise InvalidInputError(
                "Use the cancel operation to cancel an appointment"
            )

        requested_day = (
            parse_date(request.appointment_date)
            if request.appointment_date is not None
            else None
        )
        requested_start = (
            format_time(parse_time(request.start_time))
            if request.start_time is not None
            else None
        )
        old_day = appointment.appointment_date
        new_day = requested_day or old_day

        with self.locks.hold(old_day, new_day):
            with self.appointment_repo.transaction():
                # Re-read inside the critical section
                appointment = self._get_appointment(appointment_id)
                if appointment.is_cancelled:
                    raise InvalidInputError("Cancelled appointments cannot be edited")
                if appointment.appointment_date != old_day:
                    raise ConflictError(
                        "Appointment was rescheduled by another request, try again"
                    )
                new_start = requested_start or appointment.start_time
                rescheduled = new_day != old_day or new_start != appointment.start_time
                if appointment.status == STATUS_COMPLETED and (
                    rescheduled or request.status in ACTIVE_STATUSES
                ):
                    raise InvalidInputError("Completed appointments cannot be changed")

                if rescheduled:
                    for day in sorted({old_day, new_day}):
                        self.appointment_repo.lock_date(day)
                    service = self.service_repo.get_by_id(appointment.service_id)
                    if not service:
                        raise NotFoundError("Service", appointment.service_id)
                    new_end = self._end_time(new_start, service.duration)
                    self._ensure_free(
                        new_day, new_start, new_end, exclude_id=appointment.id
                    )
                    appointment.appointment_date = new_day
                    appointment.start_time = new_start
                    appointment.end_time = new_end

                if request.status is not None:
                    appointment.status = request.status
                if request.special_requests is not None:
                    appointment.special_requests = request.special_requests
                if request.notes is not None:
                    appointment.notes = request.notes
                if request.payment_status is not None:
                    appointment.payment_status = request.payment_status

                updated = self.appointment_repo.update(appointment)

        logger.info(
            "Appointment updated",
            extra={
                "context": {
                    "appointment_id": appointment_id,
                    "rescheduled": rescheduled,
                    "date": updated.appointment_date.isoformat(),
                    "start_time": updated.start_time,
                }
            },
        )

        warnings: List[str] = []
        if rescheduled:
            warnings = self._sync_updated(updated)
        return BookingResult(AppointmentResponse.from_domain(updated), warnings)

    def cancel_appointment(
        self, appointment_id: int, cancelled_by: str = "system"
    ) -> BookingResult:
        """Cancel an appointment, freeing its slot.

        Cancelling twice is a no-op; completed appointments stay completed.
        """
        appointment = self._get_appointment(appointment_id)
        if appointment.is_cancelled:
            return BookingResult(AppointmentResponse.from_domain(appointment), [])

        with self.locks.hold(appointment.appointment_date):
            with self.appointment_repo.transaction():
                appointment = self._get_appointment(appointment_id)
                if appointment.is_cancelled:
                    return BookingResult(
                        AppointmentResponse.from_domain(appointment), []
                    )
                if appointment.status == STATUS_COMPLETED:
                    raise InvalidInputError(
                        "Completed appointments cannot be cancelled"
                    )

                appointment.status = STATUS_CANCELLED
                appointment.cancelled_at = datetime.now(config.APP_TZ)
                appointment.cancelled_by = cancelled_by or "system"
                cancelled = self.appointment_repo.update(appointment)

        logger.info(
            "Appointment cancelled",
            extra={
                "context": {
                    "appointment_id": appointment_id,
                    "cancelled_by": cancelled.cancelled_by,
                }
            },
        )

        warnings = self._sync_deleted(cancelled)
        return BookingResult(AppointmentResponse.from_domain(cancelled), warnings)

    def complete_appointment(self, appointment_id: int) -> AppointmentResponse:
        """Mark a pending or confirmed appointment as completed."""
        with self.appointment_repo.transaction():
            appointment = self._get_appointment(appointment_id)
            if appointment.status not in ACTIVE_STATUSES:
                raise InvalidInputError(
                    "Only pending or confirmed appointments can be completed"
                )
            appointment.status = STATUS_COMPLETED
            completed = self.appointment_repo.update(appointment)

        logger.info(
            "Appointment completed",
            extra={"context": {"appointment_id": appointment_id}},
        )
        return AppointmentResponse.from_domain(completed)

    # Queries

    def get_appointment(self, appointment_id: int) -> AppointmentResponse:
        return AppointmentResponse.from_domain(self._get_appointment(appointment_id))

    def list_appointments(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        day: Optional[date] = None,
    ) -> Page:
        validate_pagination(page, limit)
        if status is not None and status not in APPOINTMENT_STATUSES:
            raise InvalidInputError(f"Invalid status '{status}'")
        result = self.appointment_repo.list(
            page=page, limit=limit, status=status, day=day
        )
        result.items = [AppointmentResponse.from_domain(a) for a in result.items]
        return result

    def list_customer_appointments(
        self, customer_id: int, page: int = 1, limit: int = 10
    ) -> Page:
        """A customer's appointments, most recent date first."""
        validate_pagination(page, limit)
        if not self.customer_repo.get_by_id(customer_id):
            raise NotFoundError("Customer", customer_id)
        result = self.appointment_repo.list(
            page=page, limit=limit, customer_id=customer_id, newest_first=True
        )
        result.items = [AppointmentResponse.from_domain(a) for a in result.items]
        return result

    def get_availability(
        self, day: date, service_id: Optional[int]
    ) -> AvailabilityResponse:
        """Open slots for a service on a date, given the bookings stored now."""
        if service_id is None:
            raise InvalidInputError("service_id is required")
        day = parse_date(day)
        service = self._get_bookable_service(service_id)

        bookings = self.appointment_repo.find_bookings_by_date(day)
        slots = generate_slots_for_schedule(
            day, self.schedule, self.slot_granularity, service.duration, bookings
        )
        return AvailabilityResponse(
            date=day.isoformat(),
            service_id=service.id,
            service_name=service.name,
            duration=service.duration,
            slots=[slot.to_dict() for slot in slots],
        )

    # Helpers

    def _get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    def _get_bookable_service(self, service_id: int) -> Service:
        service = self.service_repo.get_by_id(service_id)
        if not service or not service.is_active:
            raise NotFoundError("Service", service_id)
        return service

    @staticmethod
    def _end_time(start_time: str, duration: int) -> str:
        end_minutes = parse_time(start_time) + int(duration)
        # Wall-clock times only; 24:00 and later would wrap to the next day
        if end_minutes >= MINUTES_PER_DAY:
            raise InvalidInputError("Appointment cannot extend past midnight")
        return format_time(end_minutes)

    def _ensure_free(
        self,
        day: date,
        start_time: str,
        end_time: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        bookings = self.appointment_repo.find_bookings_by_date(day)
        conflicts = find_conflicts(day, start_time, end_time, bookings, exclude_id)
        if conflicts:
            logger.info(
                "Booking rejected, time slot taken",
                extra={
                    "context": {
                        "date": day.isoformat(),
                        "start_time": start_time,
                        "end_time": end_time,
                        "conflicting_ids": [c.id for c in conflicts],
                    }
                },
            )
            raise ConflictError(
                "Time slot is already booked",
                {
                    "date": day.isoformat(),
                    "start_time": start_time,
                    "end_time": end_time,
                },
            )

    def _resolve_customer(self, request: AppointmentCreateRequest) -> Customer:
        customer = self.customer_repo.get_by_email(request.customer_email)
        if customer is None:
            customer = self.customer_repo.create(
                Customer(
                    name=request.customer_name,
                    email=request.customer_email,
                    phone=request.customer_phone,
                )
            )
            logger.info(
                "Customer created from booking",
                extra={"context": {"customer_id": customer.id}},
            )
        elif not customer.is_active:
            customer.is_active = True
            customer = self.customer_repo.update(customer)
            logger.info(
                "Inactive customer reactivated by booking",
                extra={"context": {"customer_id": customer.id}},
            )
        return customer

    def _calendar_enabled(self) -> bool:
        return self.calendar_sync is not None and self.calendar_sync.enabled

    def _sync_created(self, appointment: Appointment) -> List[str]:
        if not self._calendar_enabled():
            return []
        try:
            event_id = self.calendar_sync.create_event(appointment)
        except Exception as e:
            logger.error(
                "Calendar sync failed on create",
                extra={"context": {"appointment_id": appointment.id, "error": str(e)}},
                exc_info=True,
            )
            event_id = None
        if not event_id:
            return ["Appointment booked but the calendar event could not be created"]

        # Only the event id is written; the row may have changed meanwhile
        try:
            with self.appointment_repo.transaction():
                self.appointment_repo.set_calendar_event_id(appointment.id, event_id)
        except BookingError as e:
            logger.error(
                "Could not store calendar event id",
                extra={"context": {"appointment_id": appointment.id, "error": str(e)}},
            )
            return ["Calendar event created but its id could not be stored"]
        appointment.calendar_event_id = event_id
        return self._catch_up_event(appointment)

    def _catch_up_event(self, synced: Appointment) -> List[str]:
        """Apply a cancel or reschedule committed while the event was created."""
        current = self.appointment_repo.get_by_id(synced.id)
        if current is None:
            return []
        if current.is_cancelled:
            logger.info(
                "Appointment cancelled during calendar sync",
                extra={"context": {"appointment_id": current.id}},
            )
            return self._sync_deleted(current)
        if (current.appointment_date, current.start_time, current.end_time) != (
            synced.appointment_date,
            synced.start_time,
            synced.end_time,
        ):
            logger.info(
                "Appointment rescheduled during calendar sync",
                extra={"context": {"appointment_id": current.id}},
            )
            return self._sync_updated(current)
        return []

    def _sync_updated(self, appointment: Appointment) -> List[str]:
        if not self._calendar_enabled() or not appointment.calendar_event_id:
            return []
        try:
            updated = self.calendar_sync.update_event(appointment)
        except Exception as e:
            logger.error(
                "Calendar sync failed on update",
                extra={"context": {"appointment_id": appointment.id, "error": str(e)}},
                exc_info=True,
            )
            updated = False
        if not updated:
            return ["Appointment updated but the calendar event could not be updated"]
        return []

    def _sync_deleted(self, appointment: Appointment) -> List[str]:
        if not self._calendar_enabled() or not appointment.calendar_event_id:
            return []
        try:
            deleted = self.calendar_sync.delete_event(appointment)
        except Exception as e:
            logger.error(
                "Calendar sync failed on cancel",
                extra={"context": {"appointment_id": appointment.id, "error": str(e)}},
                exc_info=True,
            )
            deleted = False
        if not deleted:
            return [
                "Appointment cancelled but the calendar event could not be removed"
            ]
        return []
