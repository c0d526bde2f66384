"""Service layer for church service areas and user assignments."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from conexion.core.constants import SERVICES_COLLECTION, USERS_COLLECTION
from conexion.core.db import (
    commit_writes,
    get_document,
    query_documents,
    require_caller,
    snapshot_to_dict,
    utcnow,
)
from conexion.errors import AccessDenied, NotFoundError, ValidationError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from .models import ServiceArea

logger = logging.getLogger(__name__)

MIN_SERVICE_NAME_LENGTH = 2


def _require_admin(db: Client, user_id: str | None, message: str) -> dict[str, Any]:
    user = require_caller(db, user_id)
    if not user.get("isAdmin"):
        raise AccessDenied(message)
    return user


def _validate_name(name: str | None) -> str:
    name = (name or "").strip()
    if len(name) < MIN_SERVICE_NAME_LENGTH:
        raise ValidationError(
            "El nombre del servicio debe tener al menos 2 caracteres"
        )
    return name


def _load_service(db: Client, service_id: str) -> dict[str, Any]:
    service = get_document(db, SERVICES_COLLECTION, service_id)
    if service is None:
        raise NotFoundError("Servicio no encontrado")
    return service


def _load_target(db: Client, target_id: str) -> dict[str, Any]:
    target = get_document(db, USERS_COLLECTION, target_id)
    if target is None:
        raise NotFoundError("Usuario no encontrado")
    return target


class ServiceAreaService:
    """Service class for service area operations."""

    @staticmethod
    def get_all_services(db: Client) -> list[ServiceArea]:
        """Fetch every service area sorted by name."""
        services = [
            service
            for service in (
                snapshot_to_dict(doc)
                for doc in db.collection(SERVICES_COLLECTION).stream()
            )
            if service is not None
        ]
        services.sort(key=lambda s: s.get("name", ""))
        return services  # type: ignore[return-value]

    @staticmethod
    def get_service_by_id(db: Client, service_id: str) -> ServiceArea | None:
        """Fetch a service area by its ID."""
        service = get_document(db, SERVICES_COLLECTION, service_id)
        return service  # type: ignore[return-value]

    @staticmethod
    def get_my_service(db: Client, user_id: str | None) -> ServiceArea | None:
        """Fetch the service area the caller serves in, if any."""
        user = require_caller(db, user_id)
        service = get_document(db, SERVICES_COLLECTION, user.get("serviceId"))
        return service  # type: ignore[return-value]

    @staticmethod
    def create_service(db: Client, user_id: str | None, name: str) -> str:
        """Create a service area; admins only."""
        _require_admin(
            db, user_id, "Solo los administradores pueden crear servicios"
        )
        now = utcnow()
        service_ref = db.collection(SERVICES_COLLECTION).document()
        service_ref.set(
            {"name": _validate_name(name), "createdAt": now, "updatedAt": now}
        )
        return service_ref.id

    @staticmethod
    def update_service(
        db: Client, user_id: str | None, service_id: str, name: str | None = None
    ) -> dict[str, Any]:
        """Rename a service area; admins only."""
        _require_admin(
            db, user_id, "Solo los administradores pueden actualizar servicios"
        )
        _load_service(db, service_id)

        updates: dict[str, Any] = {"updatedAt": utcnow()}
        if name is not None:
            updates["name"] = _validate_name(name)
        db.collection(SERVICES_COLLECTION).document(service_id).update(updates)
        return {"success": True}

    @staticmethod
    def delete_service(
        db: Client, user_id: str | None, service_id: str
    ) -> dict[str, Any]:
        """Delete a service area and unassign everyone serving in it."""
        _require_admin(
            db, user_id, "Solo los administradores pueden eliminar servicios"
        )
        _load_service(db, service_id)

        assigned = query_documents(
            db, USERS_COLLECTION, "serviceId", "==", service_id
        )
        writes: list[tuple[str, Any, dict[str, Any] | None]] = [
            (
                "update",
                db.collection(USERS_COLLECTION).document(user["id"]),
                {"serviceId": None},
            )
            for user in assigned
        ]
        writes.append(
            ("delete", db.collection(SERVICES_COLLECTION).document(service_id), None)
        )
        commit_writes(db, writes)
        logger.info(f"Service {service_id} deleted, {len(assigned)} users unassigned")
        return {"success": True}

    @staticmethod
    def assign_service_to_user(
        db: Client, user_id: str | None, service_id: str
    ) -> dict[str, Any]:
        """Make the caller serve in a service area, replacing any previous one."""
        require_caller(db, user_id)
        _load_service(db, service_id)
        db.collection(USERS_COLLECTION).document(user_id).update(
            {"serviceId": service_id}
        )
        return {"success": True}

    @staticmethod
    def remove_service_from_user(db: Client, user_id: str | None) -> dict[str, Any]:
        """Clear the caller's service area."""
        require_caller(db, user_id)
        db.collection(USERS_COLLECTION).document(user_id).update({"serviceId": None})
        return {"success": True}

    @staticmethod
    def assign_service_to_user_for_admin(
        db: Client, user_id: str | None, target_id: str, service_id: str
    ) -> dict[str, Any]:
        """Assign a service area to another user; admins only."""
        _require_admin(
            db,
            user_id,
            "Solo los administradores pueden asignar servicios a otros usuarios",
        )
        _load_target(db, target_id)
        _load_service(db, service_id)
        db.collection(USERS_COLLECTION).document(target_id).update(
            {"serviceId": service_id}
        )
        return {"success": True}

    @staticmethod
    def remove_service_from_user_for_admin(
        db: Client, user_id: str | None, target_id: str
    ) -> dict[str, Any]:
        """Clear another user's service area; admins only."""
        _require_admin(
            db,
            user_id,
            "Solo los administradores pueden remover servicios de otros usuarios",
        )
        _load_target(db, target_id)
        db.collection(USERS_COLLECTION).document(target_id).update(
            {"serviceId": None}
        )
        return {"success": True}
