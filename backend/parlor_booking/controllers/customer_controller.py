"""
Customer controller for handling HTTP requests.
"""

from flask import Blueprint, request

from ..core.api_utils import api_response, bool_arg, get_json_body, int_arg, paginated
from ..db.session import SessionLocal
from ..repositories.appointment_repo import AppointmentRepository
from ..repositories.customer_repo import CustomerRepository
from ..schemas.dtos import CustomerCreateRequest, CustomerUpdateRequest
from ..services.customer_service import CustomerService
from .appointment_controller import build_appointment_service

customer_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


def build_customer_service(db) -> CustomerService:
    return CustomerService(CustomerRepository(db), AppointmentRepository(db))


@customer_bp.route("", methods=["GET"])
def list_customers():
    """List customers with optional ``search`` and ``is_active`` filters."""
    page = int_arg("page", 1)
    limit = int_arg("limit", 10)
    search = (request.args.get("search") or "").strip() or None
    is_active = bool_arg("is_active")

    db = SessionLocal()
    try:
        result = build_customer_service(db).list_customers(
            page=page, limit=limit, search=search, is_active=is_active
        )
        return api_response(True, "Customers retrieved", paginated(result, "customers"))
    finally:
        db.close()


@customer_bp.route("", methods=["POST"])
def create_customer():
    create_request = CustomerCreateRequest.from_json(get_json_body())

    db = SessionLocal()
    try:
        customer = build_customer_service(db).create_customer(create_request)
        return api_response(
            True, "Customer created successfully", customer.to_dict(), 201
        )
    finally:
        db.close()


@customer_bp.route("/search/<query>", methods=["GET"])
def search_customers(query: str):
    """Quick search over active customers (name, email or phone)."""
    limit = int_arg("limit", 10)

    db = SessionLocal()
    try:
        customers = build_customer_service(db).search_customers(query, limit=limit)
        return api_response(
            True, "Search completed", [customer.to_dict() for customer in customers]
        )
    finally:
        db.close()


@customer_bp.route("/<int:customer_id>", methods=["GET"])
def get_customer(customer_id: int):
    """Customer details, including their most recent appointments."""
    db = SessionLocal()
    try:
        customer = build_customer_service(db).get_customer(customer_id)
        return api_response(True, "Customer retrieved", customer.to_dict())
    finally:
        db.close()


@customer_bp.route("/<int:customer_id>", methods=["PUT"])
def update_customer(customer_id: int):
    update_request = CustomerUpdateRequest.from_json(get_json_body())

    db = SessionLocal()
    try:
        customer = build_customer_service(db).update_customer(
            customer_id, update_request
        )
        return api_response(True, "Customer updated successfully", customer.to_dict())
    finally:
        db.close()


@customer_bp.route("/<int:customer_id>", methods=["DELETE"])
def delete_customer(customer_id: int):
    """Soft delete: the customer is deactivated, never removed."""
    db = SessionLocal()
    try:
        customer = build_customer_service(db).delete_customer(customer_id)
        return api_response(
            True, "Customer deactivated successfully", customer.to_dict()
        )
    finally:
        db.close()


@customer_bp.route("/<int:customer_id>/appointments", methods=["GET"])
def list_customer_appointments(customer_id: int):
    page = int_arg("page", 1)
    limit = int_arg("limit", 10)

    db = SessionLocal()
    try:
        result = build_appointment_service(db).list_customer_appointments(
            customer_id, page=page, limit=limit
        )
        return api_response(
            True, "Customer appointments retrieved", paginated(result, "appointments")
        )
    finally:
        db.close()
