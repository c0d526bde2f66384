"""Service layer for grids, the member networks pastors lead."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from conexion.core.constants import (
    GENDER_FEMALE,
    GENDER_MALE,
    GRIDS_COLLECTION,
    GROUPS_COLLECTION,
    ROLE_PASTOR,
    SEARCH_MIN_TERM_LENGTH,
    SEARCH_RESULTS_LIMIT,
    USERS_COLLECTION,
)
from conexion.core.db import (
    get_document,
    public_user,
    query_documents,
    require_authenticated,
    require_caller,
    snapshot_to_dict,
    utcnow,
)
from conexion.errors import AccessDenied, NotFoundError, ValidationError

from .utils import get_grid_of_pastor

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from conexion.user.models import User

    from .models import Grid, GridStats

logger = logging.getLogger(__name__)


def _require_pastor(db: Client, user_id: str | None, message: str) -> dict[str, Any]:
    user = require_caller(db, user_id)
    if user.get("role") != ROLE_PASTOR:
        raise AccessDenied(message)
    return user


def _validate_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("El nombre de la red es obligatorio")
    return name


class GridService:
    """Service class for grid operations."""

    @staticmethod
    def search_grids_by_name(
        db: Client,
        user_id: str | None,
        term: str,
        limit: int = SEARCH_RESULTS_LIMIT,
    ) -> list[dict[str, Any]]:
        """Case-insensitive substring search on grid names, with each pastor."""
        require_authenticated(user_id)
        term = (term or "").strip().lower()
        if len(term) < SEARCH_MIN_TERM_LENGTH:
            return []

        results = []
        for snapshot in db.collection(GRIDS_COLLECTION).stream():
            grid = snapshot_to_dict(snapshot)
            if grid is None or term not in (grid.get("name") or "").lower():
                continue
            pastor = get_document(db, USERS_COLLECTION, grid.get("pastorId"))
            results.append(
                {
                    "id": grid["id"],
                    "name": grid.get("name"),
                    "pastor": public_user(pastor),
                }
            )
            if len(results) >= limit:
                break
        return results

    @staticmethod
    def get_my_grid(db: Client, user_id: str | None) -> dict[str, Any] | None:
        """Fetch the caller's grid with its pastor, if the caller leads one."""
        user = require_caller(db, user_id)
        grid = get_grid_of_pastor(db, user)
        if grid is None:
            return None
        return {**grid, "pastor": user}

    @staticmethod
    def get_grid_members(db: Client, user_id: str | None) -> list[User]:
        """List the users in the caller's grid."""
        user = _require_pastor(
            db, user_id, "Solo los pastores pueden ver los miembros de su red"
        )
        grid = get_grid_of_pastor(db, user)
        if grid is None:
            return []
        return query_documents(  # type: ignore[return-value]
            db, USERS_COLLECTION, "gridId", "==", grid["id"]
        )

    @staticmethod
    def get_grid_stats(db: Client, user_id: str | None) -> GridStats:
        """Count the members of the caller's grid and the groups they lead.

        A group belongs to the grid when any of its leaders does.
        """
        user = _require_pastor(
            db, user_id, "Solo los pastores pueden ver las estadísticas de su red"
        )
        grid = get_grid_of_pastor(db, user)
        members = (
            query_documents(db, USERS_COLLECTION, "gridId", "==", grid["id"])
            if grid is not None
            else []
        )
        member_ids = {m["id"] for m in members}

        total_groups = 0
        if member_ids:
            for snapshot in db.collection(GROUPS_COLLECTION).stream():
                group = snapshot_to_dict(snapshot) or {}
                if member_ids.intersection(group.get("leaders", [])):
                    total_groups += 1

        return {
            "totalMembers": len(members),
            "membersInSchool": sum(1 for m in members if m.get("isActiveInSchool")),
            "totalGroups": total_groups,
            "maleCount": sum(1 for m in members if m.get("gender") == GENDER_MALE),
            "femaleCount": sum(
                1 for m in members if m.get("gender") == GENDER_FEMALE
            ),
        }

    @staticmethod
    def create_grid(db: Client, user_id: str | None, name: str) -> str:
        """Create the caller's grid; a pastor leads at most one."""
        user = _require_pastor(db, user_id, "Solo los pastores pueden crear redes")
        if get_grid_of_pastor(db, user) is not None:
            raise ValidationError(
                "Ya tienes una red creada. Un pastor solo puede tener una red."
            )

        now = utcnow()
        grid_ref = db.collection(GRIDS_COLLECTION).document()
        grid_ref.set(
            {
                "name": _validate_name(name),
                "pastorId": user_id,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        logger.info(f"Pastor {user_id} created grid {grid_ref.id}")
        return grid_ref.id

    @staticmethod
    def add_member_to_grid(
        db: Client, user_id: str | None, user_email: str
    ) -> dict[str, Any]:
        """Add a user, found by email, to the caller's grid."""
        user = _require_pastor(
            db, user_id, "Solo los pastores pueden agregar miembros a su red"
        )
        grid = get_grid_of_pastor(db, user)
        if grid is None:
            raise ValidationError("Primero debes crear una red")

        found = query_documents(
            db, USERS_COLLECTION, "email", "==", (user_email or "").strip().lower()
        )
        if not found:
            raise NotFoundError("Usuario no encontrado con ese email")
        member = found[0]
        if member.get("gridId") == grid["id"]:
            return {"success": True, "message": "El usuario ya pertenece a esta red"}
        if member.get("gridId"):
            raise ValidationError("El usuario ya pertenece a otra red")

        db.collection(USERS_COLLECTION).document(member["id"]).update(
            {"gridId": grid["id"]}
        )
        logger.info(f"User {member['id']} added to grid {grid['id']}")
        return {"success": True}

    @staticmethod
    def remove_member_from_grid(
        db: Client, user_id: str | None, member_id: str
    ) -> dict[str, Any]:
        """Take a user out of the caller's grid."""
        user = _require_pastor(
            db, user_id, "Solo los pastores pueden remover miembros de su red"
        )
        grid = get_grid_of_pastor(db, user)
        if grid is None:
            raise ValidationError("No tienes una red creada")
        member = get_document(db, USERS_COLLECTION, member_id)
        if member is None:
            raise NotFoundError("Usuario no encontrado")
        if member.get("gridId") != grid["id"]:
            raise ValidationError("El usuario no pertenece a tu red")

        db.collection(USERS_COLLECTION).document(member_id).update({"gridId": None})
        return {"success": True}

    @staticmethod
    def update_grid(
        db: Client, user_id: str | None, grid_id: str, name: str
    ) -> dict[str, Any]:
        """Rename a grid; only its pastor may."""
        require_authenticated(user_id)
        grid: Grid | None = get_document(  # type: ignore[assignment]
            db, GRIDS_COLLECTION, grid_id
        )
        if grid is None:
            raise NotFoundError("Red no encontrada")
        if grid.get("pastorId") != user_id:
            raise AccessDenied("Solo el pastor puede actualizar la red")

        db.collection(GRIDS_COLLECTION).document(grid_id).update(
            {"name": _validate_name(name), "updatedAt": utcnow()}
        )
        return {"success": True}
