"""Service layer for user profiles and the dashboard."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from conexion.core.constants import (
    COURSES_COLLECTION,
    GENDERS,
    GRIDS_COLLECTION,
    ROLES,
    SEARCH_MIN_TERM_LENGTH,
    SEARCH_RESULTS_LIMIT,
    SERVICES_COLLECTION,
    USERS_COLLECTION,
)
from conexion.core.db import (
    get_document,
    get_documents,
    query_documents,
    require_authenticated,
    require_caller,
    snapshot_to_dict,
    utcnow,
)
from conexion.errors import AccessDenied, ValidationError
from conexion.grid.utils import get_grid_of_pastor
from conexion.utils import as_utc

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from .models import User

logger = logging.getLogger(__name__)


def _validate_choices(role: str | None = None, gender: str | None = None) -> None:
    if role is not None and role not in ROLES:
        raise ValidationError(f"Rol inválido: {role}")
    if gender is not None and gender not in GENDERS:
        raise ValidationError(f"Género inválido: {gender}")


class UserService:
    """Service class for user-related operations and Firestore interaction."""

    @staticmethod
    def create_profile(
        db: Client, user_id: str | None, name: str, email: str
    ) -> User:
        """Create the user document at sign-up, or return the existing one."""
        require_authenticated(user_id)
        existing = get_document(db, USERS_COLLECTION, user_id)
        if existing is not None:
            return existing  # type: ignore[return-value]

        now = utcnow()
        data = {
            "name": name,
            "email": email.lower(),
            "currentCourses": [],
            "isActiveInSchool": False,
            "isAdmin": False,
            "createdAt": now,
            "updatedAt": now,
        }
        db.collection(USERS_COLLECTION).document(user_id).set(data)
        logger.info(f"User {user_id} registered")
        return {**data, "id": user_id}  # type: ignore[return-value]

    @staticmethod
    def get_my_profile(db: Client, user_id: str | None) -> dict[str, Any]:
        """Fetch the caller with its leader, grid, service and courses resolved."""
        user = require_caller(db, user_id)
        return {
            **user,
            "leader": get_document(db, USERS_COLLECTION, user.get("leader")),
            "grid": get_document(db, GRIDS_COLLECTION, user.get("gridId")),
            "service": get_document(db, SERVICES_COLLECTION, user.get("serviceId")),
            "courses": get_documents(
                db, COURSES_COLLECTION, user.get("currentCourses") or []
            ),
        }

    @staticmethod
    def complete_profile(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        name: str,
        role: str,
        gender: str,
        phone: str | None = None,
        birthdate: Any = None,
    ) -> dict[str, Any]:
        """Fill in role, gender and contact data the first time."""
        user = require_caller(db, user_id)
        if user.get("role") and user.get("gender"):
            raise ValidationError("El perfil ya está completo")
        _validate_choices(role=role, gender=gender)

        updates: dict[str, Any] = {
            "name": name,
            "role": role,
            "gender": gender,
            "isActiveInSchool": user.get("isActiveInSchool", False),
            "currentCourses": user.get("currentCourses") or [],
            "isAdmin": user.get("isAdmin", False),
            "updatedAt": utcnow(),
        }
        if phone:
            updates["phone"] = phone
        if birthdate is not None:
            updates["birthdate"] = as_utc(birthdate)

        db.collection(USERS_COLLECTION).document(user_id).update(updates)
        return {"success": True}

    @staticmethod
    def update_my_profile(
        db: Client,
        user_id: str | None,
        name: str | None = None,
        gender: str | None = None,
        phone: str | None = None,
        birthdate: Any = None,
    ) -> dict[str, Any]:
        """Patch only the profile fields that were given."""
        require_caller(db, user_id)
        _validate_choices(gender=gender)

        updates: dict[str, Any] = {"updatedAt": utcnow()}
        if name is not None:
            updates["name"] = name
        if gender is not None:
            updates["gender"] = gender
        if phone is not None:
            updates["phone"] = phone
        if birthdate is not None:
            updates["birthdate"] = as_utc(birthdate)

        db.collection(USERS_COLLECTION).document(user_id).update(updates)
        return {"success": True}

    @staticmethod
    def get_user_by_email(
        db: Client, user_id: str | None, email: str
    ) -> dict[str, Any] | None:
        """Find a user by exact email, exposing only public fields."""
        require_authenticated(user_id)
        users = query_documents(
            db, USERS_COLLECTION, "email", "==", email.strip().lower()
        )
        if not users:
            return None
        user = users[0]
        return {
            "id": user["id"],
            "name": user.get("name"),
            "email": user.get("email"),
            "role": user.get("role"),
            "gender": user.get("gender"),
        }

    @staticmethod
    def search_users_by_email(
        db: Client,
        user_id: str | None,
        term: str,
        limit: int = SEARCH_RESULTS_LIMIT,
    ) -> list[dict[str, Any]]:
        """Case-insensitive substring search on email, excluding the caller."""
        require_authenticated(user_id)
        term = (term or "").strip().lower()
        if len(term) < SEARCH_MIN_TERM_LENGTH:
            return []

        results = []
        for snapshot in db.collection(USERS_COLLECTION).stream():
            user = snapshot_to_dict(snapshot)
            if user is None or user["id"] == user_id:
                continue
            if term in (user.get("email") or "").lower():
                results.append(
                    {
                        "id": user["id"],
                        "name": user.get("name"),
                        "email": user.get("email"),
                        "gender": user.get("gender"),
                    }
                )
                if len(results) >= limit:
                    break
        return results

    @staticmethod
    def get_disciples_by_leader(
        db: Client, user_id: str | None, leader_id: str
    ) -> list[User]:
        """List the users assigned to a leader; only that leader may ask."""
        require_authenticated(user_id)
        if user_id != leader_id:
            raise AccessDenied("Solo puedes ver tus propios discípulos")
        return query_documents(  # type: ignore[return-value]
            db, USERS_COLLECTION, "leader", "==", leader_id
        )

    @staticmethod
    def get_dashboard(db: Client, user_id: str | None) -> dict[str, Any]:
        """Gather the caller, their groups, courses and, for pastors, their grid."""
        from conexion.group.services import GroupService

        user = require_caller(db, user_id)
        return {
            "user": user,
            "groupAsDisciple": GroupService.get_group_as_disciple(db, user_id),
            "groupsAsLeader": GroupService.get_groups_as_leader(db, user_id),
            "courses": get_documents(
                db, COURSES_COLLECTION, user.get("currentCourses") or []
            ),
            "grid": get_grid_of_pastor(db, user),
        }
