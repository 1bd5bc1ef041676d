"""
Appointment repository - the persistence collaborator of the booking engine.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.orm import joinedload

from parlor_booking.db.base import Appointment as DbAppointment
from parlor_booking.domain.entities import ACTIVE_STATUSES, STATUS_CANCELLED
from parlor_booking.domain.entities import Appointment as DomainAppointment
from parlor_booking.domain.entities import BookedInterval, Page
from parlor_booking.domain.interfaces import IAppointmentRepository
from parlor_booking.domain.time_utils import format_time, parse_time, to_time

from .base import SqlAlchemyRepository
from .customer_repo import CustomerRepository
from .service_repo import ServiceRepository

logger = logging.getLogger(__name__)

# Namespace for advisory locks taken on behalf of booking dates
_DATE_LOCK_NAMESPACE = 0x5041524C  # "PARL"


class AppointmentRepository(SqlAlchemyRepository, IAppointmentRepository):
    """Repository for Appointment persistence operations."""

    def get_by_id(self, appointment_id: int) -> Optional[DomainAppointment]:
        db_appointment = (
            self.db.query(DbAppointment)
            .options(
                joinedload(DbAppointment.customer), joinedload(DbAppointment.service)
            )
            .filter(DbAppointment.id == appointment_id)
            .populate_existing()
            .first()
        )
        return self._to_domain(db_appointment) if db_appointment else None

    def find_bookings_by_date(self, day: date) -> List[BookedInterval]:
        rows = (
            self.db.query(
                DbAppointment.id,
                DbAppointment.appointment_date,
                DbAppointment.start_time,
                DbAppointment.end_time,
                DbAppointment.status,
            )
            .filter(
                DbAppointment.appointment_date == day,
                DbAppointment.status != STATUS_CANCELLED,
            )
            .order_by(DbAppointment.start_time)
            .all()
        )
        return [
            BookedInterval(
                id=row.id,
                appointment_date=row.appointment_date,
                start_time=format_time(parse_time(row.start_time)),
                end_time=format_time(parse_time(row.end_time)),
                status=row.status,
            )
            for row in rows
        ]

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        day: Optional[date] = None,
        customer_id: Optional[int] = None,
        newest_first: bool = False,
    ) -> Page:
        query = self.db.query(DbAppointment)
        if status:
            query = query.filter(DbAppointment.status == status)
        if day:
            query = query.filter(DbAppointment.appointment_date == day)
        if customer_id is not None:
            query = query.filter(DbAppointment.customer_id == customer_id)

        total = query.count()
        date_order = (
            DbAppointment.appointment_date.desc()
            if newest_first
            else DbAppointment.appointment_date.asc()
        )
        rows = (
            query.options(
                joinedload(DbAppointment.customer), joinedload(DbAppointment.service)
            )
            .order_by(date_order, DbAppointment.start_time.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return Page(
            items=[self._to_domain(row) for row in rows],
            total=total,
            page=page,
            limit=limit,
        )

    def count_active_for_customer(self, customer_id: int) -> int:
        return (
            self.db.query(DbAppointment)
            .filter(
                DbAppointment.customer_id == customer_id,
                DbAppointment.status.in_(ACTIVE_STATUSES),
            )
            .count()
        )

    def count_for_service(self, service_id: int) -> int:
        return (
            self.db.query(DbAppointment)
            .filter(DbAppointment.service_id == service_id)
            .count()
        )

    def create(self, appointment: DomainAppointment) -> DomainAppointment:
        db_appointment = DbAppointment(
            customer_id=appointment.customer_id,
            service_id=appointment.service_id,
            appointment_date=appointment.appointment_date,
            start_time=to_time(appointment.start_time),
            end_time=to_time(appointment.end_time),
            status=appointment.status,
            total_price=appointment.total_price,
            special_requests=appointment.special_requests,
            calendar_event_id=appointment.calendar_event_id,
            payment_status=appointment.payment_status,
            notes=appointment.notes,
        )
        self.db.add(db_appointment)
        self.db.flush()
        self.db.refresh(db_appointment)
        return self._to_domain(db_appointment)

    def update(self, appointment: DomainAppointment) -> DomainAppointment:
        if not appointment.id:
            raise ValueError("Appointment ID is required for update")

        db_appointment = self.db.get(DbAppointment, appointment.id)
        if not db_appointment:
            raise ValueError(f"Appointment with ID {appointment.id} not found")

        # customer_id and service_id are immutable after creation
        db_appointment.appointment_date = appointment.appointment_date
        db_appointment.start_time = to_time(appointment.start_time)
        db_appointment.end_time = to_time(appointment.end_time)
        db_appointment.status = appointment.status
        db_appointment.special_requests = appointment.special_requests
        db_appointment.calendar_event_id = appointment.calendar_event_id
        db_appointment.payment_status = appointment.payment_status
        db_appointment.notes = appointment.notes
        db_appointment.cancelled_at = appointment.cancelled_at
        db_appointment.cancelled_by = appointment.cancelled_by
        self.db.flush()
        self.db.refresh(db_appointment)
        return self._to_domain(db_appointment)

    def set_calendar_event_id(
        self, appointment_id: int, event_id: Optional[str]
    ) -> bool:
        updated = (
            self.db.query(DbAppointment)
            .filter(DbAppointment.id == appointment_id)
            .update({DbAppointment.calendar_event_id: event_id})
        )
        self.db.flush()
        return updated > 0

    def lock_date(self, day: date) -> None:
        """Take a transaction-scoped advisory lock for ``day`` on PostgreSQL.

        Other backends rely on the in-process date locks only.
        """
        if self.dialect_name != "postgresql":
            return
        self.db.execute(
            text("SELECT pg_advisory_xact_lock(:namespace, :key)"),
            {"namespace": _DATE_LOCK_NAMESPACE, "key": day.toordinal()},
        )
        logger.debug(
            "Advisory lock acquired for booking date",
            extra={"context": {"date": day.isoformat()}},
        )

    @staticmethod
    def _to_domain(db_appointment: DbAppointment) -> DomainAppointment:
        """Convert database model to domain entity, with joined summaries."""
        customer = (
            CustomerRepository._to_domain(db_appointment.customer)
            if db_appointment.customer is not None
            else None
        )
        service = (
            ServiceRepository._to_domain(db_appointment.service)
            if db_appointment.service is not None
            else None
        )
        return DomainAppointment(
            id=db_appointment.id,
            customer_id=db_appointment.customer_id,
            service_id=db_appointment.service_id,
            appointment_date=db_appointment.appointment_date,
            start_time=format_time(parse_time(db_appointment.start_time)),
            end_time=format_time(parse_time(db_appointment.end_time)),
            status=db_appointment.status,
            total_price=db_appointment.total_price,
            special_requests=db_appointment.special_requests,
            calendar_event_id=db_appointment.calendar_event_id,
            payment_status=db_appointment.payment_status,
            notes=db_appointment.notes,
            cancelled_at=db_appointment.cancelled_at,
            cancelled_by=db_appointment.cancelled_by,
            created_at=db_appointment.created_at,
            updated_at=db_appointment.updated_at,
            customer=customer,
            service=service,
        )
