"""
Service catalog controller.
"""

from flask import Blueprint, request

from ..core.api_utils import api_response, bool_arg, get_json_body
from ..db.session import SessionLocal
from ..repositories.appointment_repo import AppointmentRepository
from ..repositories.service_repo import ServiceRepository
from ..schemas.dtos import ServiceCreateRequest, ServiceUpdateRequest
from ..services.catalog_service import ServiceCatalogService

service_bp = Blueprint("services", __name__, url_prefix="/api/services")


def build_catalog_service(db) -> ServiceCatalogService:
    return ServiceCatalogService(ServiceRepository(db), AppointmentRepository(db))


@service_bp.route("", methods=["GET"])
def list_services():
    """List services. Only active ones unless ``?is_active=false`` or ``all``."""
    category = request.args.get("category") or None
    if request.args.get("is_active", "").strip().lower() == "all":
        is_active = None
    else:
        is_active = bool_arg("is_active")
        if is_active is None:
            is_active = True

    db = SessionLocal()
    try:
        services = build_catalog_service(db).list_services(
            category=category, is_active=is_active
        )
        return api_response(
            True, "Services retrieved", [service.to_dict() for service in services]
        )
    finally:
        db.close()


@service_bp.route("", methods=["POST"])
def create_service():
    create_request = ServiceCreateRequest.from_json(get_json_body())

    db = SessionLocal()
    try:
        service = build_catalog_service(db).create_service(create_request)
        return api_response(
            True, "Service created successfully", service.to_dict(), 201
        )
    finally:
        db.close()


@service_bp.route("/categories/list", methods=["GET"])
def list_categories():
    db = SessionLocal()
    try:
        categories = build_catalog_service(db).list_categories()
        return api_response(True, "Categories retrieved", categories)
    finally:
        db.close()


@service_bp.route("/<int:service_id>", methods=["GET"])
def get_service(service_id: int):
    db = SessionLocal()
    try:
        service = build_catalog_service(db).get_service(service_id)
        return api_response(True, "Service retrieved", service.to_dict())
    finally:
        db.close()


@service_bp.route("/<int:service_id>", methods=["PUT"])
def update_service(service_id: int):
    update_request = ServiceUpdateRequest.from_json(get_json_body())

    db = SessionLocal()
    try:
        service = build_catalog_service(db).update_service(service_id, update_request)
        return api_response(True, "Service updated successfully", service.to_dict())
    finally:
        db.close()


@service_bp.route("/<int:service_id>", methods=["DELETE"])
def delete_service(service_id: int):
    """Hard delete; refused with 409 while appointments reference the service."""
    db = SessionLocal()
    try:
        build_catalog_service(db).delete_service(service_id)
        return api_response(True, "Service deleted successfully")
    finally:
        db.close()
