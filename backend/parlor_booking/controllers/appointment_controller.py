"""
Appointment controller - HTTP surface of the booking engine.

This controller:
- Handles HTTP concerns only (parsing, status codes, envelopes)
- Delegates every rule to AppointmentService
- Lets BookingError subclasses reach the registered error handlers
"""

from flask import Blueprint, request

from ..core.api_utils import api_response, get_json_body, int_arg, paginated
from ..db.session import SessionLocal
from ..domain.time_utils import parse_date
from ..repositories.appointment_repo import AppointmentRepository
from ..repositories.customer_repo import CustomerRepository
from ..repositories.service_repo import ServiceRepository
from ..schemas.dtos import AppointmentCreateRequest, AppointmentUpdateRequest
from ..services.appointment_service import AppointmentService
from ..services.google_calendar_service import GoogleCalendarService

appointment_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


def build_appointment_service(db) -> AppointmentService:
    """Wire the booking orchestrator to repositories sharing ``db``."""
    return AppointmentService(
        appointment_repo=AppointmentRepository(db),
        customer_repo=CustomerRepository(db),
        service_repo=ServiceRepository(db),
        calendar_sync=GoogleCalendarService.from_config(),
    )


@appointment_bp.route("", methods=["GET"])
def list_appointments():
    """List appointments, optionally filtered by status and date."""
    page = int_arg("page", 1)
    limit = int_arg("limit", 10)
    status = request.args.get("status") or None
    day = request.args.get("date")

    db = SessionLocal()
    try:
        service = build_appointment_service(db)
        result = service.list_appointments(
            page=page,
            limit=limit,
            status=status,
            day=parse_date(day) if day else None,
        )
        return api_response(
            True, "Appointments retrieved", paginated(result, "appointments")
        )
    finally:
        db.close()


@appointment_bp.route("", methods=["POST"])
def create_appointment():
    """Book an appointment."""
    create_request = AppointmentCreateRequest.from_json(get_json_body())

    db = SessionLocal()
    try:
        result = build_appointment_service(db).create_appointment(create_request)
        return api_response(
            True,
            "Appointment booked successfully",
            result.appointment.to_dict(),
            201,
            warnings=result.warnings or None,
        )
    finally:
        db.close()


@appointment_bp.route("/availability/<date_str>", methods=["GET"])
def get_availability(date_str: str):
    """Open slots for ``?service_id=`` on a date."""
    day = parse_date(date_str)
    service_id = int_arg("service_id")
    if service_id is None:
        service_id = int_arg("serviceId")

    db = SessionLocal()
    try:
        availability = build_appointment_service(db).get_availability(day, service_id)
        return api_response(True, "Availability retrieved", availability.to_dict())
    finally:
        db.close()


@appointment_bp.route("/<int:appointment_id>", methods=["GET"])
def get_appointment(appointment_id: int):
    db = SessionLocal()
    try:
        appointment = build_appointment_service(db).get_appointment(appointment_id)
        return api_response(True, "Appointment retrieved", appointment.to_dict())
    finally:
        db.close()


@appointment_bp.route("/<int:appointment_id>", methods=["PUT"])
def update_appointment(appointment_id: int):
    """Reschedule or edit an appointment."""
    update_request = AppointmentUpdateRequest.from_json(get_json_body())

    db = SessionLocal()
    try:
        result = build_appointment_service(db).update_appointment(
            appointment_id, update_request
        )
        return api_response(
            True,
            "Appointment updated successfully",
            result.appointment.to_dict(),
            warnings=result.warnings or None,
        )
    finally:
        db.close()


@appointment_bp.route("/<int:appointment_id>", methods=["DELETE"])
def cancel_appointment(appointment_id: int):
    """Cancel an appointment. The record is kept with status cancelled."""
    payload = request.get_json(silent=True) or {}
    cancelled_by = (
        payload.get("cancelled_by") if isinstance(payload, dict) else None
    ) or request.args.get("cancelled_by") or "system"

    db = SessionLocal()
    try:
        result = build_appointment_service(db).cancel_appointment(
            appointment_id, cancelled_by=cancelled_by
        )
        return api_response(
            True,
            "Appointment cancelled successfully",
            result.appointment.to_dict(),
            warnings=result.warnings or None,
        )
    finally:
        db.close()


@appointment_bp.route("/<int:appointment_id>/complete", methods=["POST"])
def complete_appointment(appointment_id: int):
    db = SessionLocal()
    try:
        appointment = build_appointment_service(db).complete_appointment(
            appointment_id
        )
        return api_response(True, "Appointment completed", appointment.to_dict())
    finally:
        db.close()
