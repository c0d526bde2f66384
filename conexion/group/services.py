"""Service layer for connection groups and membership."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from conexion.core.constants import (
    GROUPS_COLLECTION,
    MAX_GROUP_LEADERS,
    USERS_COLLECTION,
)
from conexion.core.db import (
    commit_writes,
    get_document,
    get_documents,
    require_authenticated,
    require_caller,
    utcnow,
)
from conexion.errors import AccessDenied, IntegrityError, NotFoundError, ValidationError

from .utils import (
    expand_group,
    generate_invitation_code,
    get_group_by_code,
    get_groups_led_by,
    is_leader,
    is_member,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from .models import EnrichedGroup

logger = logging.getLogger(__name__)


class GroupService:
    """Service class for group-related operations."""

    @staticmethod
    def get_groups_as_leader(db: Client, user_id: str | None) -> list[EnrichedGroup]:
        """Fetch every group the caller leads, with members expanded."""
        require_authenticated(user_id)
        return [expand_group(db, group) for group in get_groups_led_by(db, user_id)]

    @staticmethod
    def get_group_as_disciple(db: Client, user_id: str | None) -> EnrichedGroup | None:
        """Fetch the group the caller joined as a disciple, if any."""
        user = require_caller(db, user_id)
        leader_id = user.get("leader")
        if not leader_id:
            return None

        for group in get_groups_led_by(db, leader_id):
            if user_id in group.get("disciples", []):
                return expand_group(db, group)
        return None

    @staticmethod
    def get_group_by_invitation_code(
        db: Client, invitation_code: str
    ) -> dict[str, Any] | None:
        """Look up a group by code, exposing only its leaders."""
        group = get_group_by_code(db, invitation_code.strip().upper())
        if group is None:
            return None
        leaders = get_documents(db, USERS_COLLECTION, group.get("leaders", []))
        return {**group, "leaders": leaders}

    @staticmethod
    def get_group_by_id(
        db: Client, user_id: str | None, group_id: str
    ) -> EnrichedGroup:
        """Fetch a group for one of its members, disciples with their courses."""
        require_authenticated(user_id)
        group = get_document(db, GROUPS_COLLECTION, group_id)
        if group is None:
            raise NotFoundError("Grupo no encontrado")
        if not is_member(group, user_id):
            raise AccessDenied("No tienes acceso a este grupo")
        return expand_group(db, group, with_courses=True)

    @staticmethod
    def create_group(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        name: str,
        address: str,
        district: str,
        day: str,
        time: str,
        min_age: int | None = None,
        max_age: int | None = None,
        co_leader_id: str | None = None,
    ) -> str:
        """Create a group led by the caller and, optionally, a co-leader.

        A co-leader must be another existing user of the opposite gender.
        """
        user = require_caller(db, user_id)
        leaders = [user_id]

        if co_leader_id:
            if co_leader_id == user_id:
                raise ValidationError("No puedes agregarte a ti mismo como co-líder")
            co_leader = get_document(db, USERS_COLLECTION, co_leader_id)
            if co_leader is None:
                raise NotFoundError("Co-líder no encontrado")
            if co_leader.get("gender") == user.get("gender"):
                raise ValidationError(
                    "El co-líder debe ser de diferente género (uno hombre, una mujer)"
                )
            leaders.append(co_leader_id)

        if len(leaders) > MAX_GROUP_LEADERS:
            raise ValidationError("Un grupo solo puede tener máximo 2 líderes")

        if min_age is not None and max_age is not None:
            if min_age > max_age:
                raise ValidationError(
                    "La edad mínima no puede ser mayor que la edad máxima"
                )
            if min_age < 0 or max_age < 0:
                raise ValidationError("Las edades deben ser números positivos")

        invitation_code = generate_invitation_code()
        if get_group_by_code(db, invitation_code) is not None:
            raise IntegrityError("Error al generar código único. Intenta nuevamente.")

        now = utcnow()
        group_ref = db.collection(GROUPS_COLLECTION).document()
        group_ref.set(
            {
                "name": name,
                "address": address,
                "district": district,
                "minAge": min_age,
                "maxAge": max_age,
                "day": day,
                "time": time,
                "leaders": leaders,
                "disciples": [],
                "invitationCode": invitation_code,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        logger.info(f"Group {group_ref.id} created by {user_id}")
        return group_ref.id

    @staticmethod
    def join_group(
        db: Client, user_id: str | None, invitation_code: str
    ) -> dict[str, Any]:
        """Join a group by invitation code and get a leader assigned.

        With one leader that leader is assigned; with two, the one sharing the
        caller's gender.
        """
        user = require_caller(db, user_id)
        if user.get("leader"):
            raise ValidationError(
                "Ya perteneces a un grupo. Solo puedes pertenecer a un grupo a la vez."
            )

        group = get_group_by_code(db, invitation_code.strip().upper())
        if group is None:
            raise NotFoundError("Código de invitación inválido")
        if is_leader(group, user_id):
            raise ValidationError("Ya eres líder de este grupo")
        disciples = group.get("disciples", [])
        if user_id in disciples:
            raise ValidationError("Ya perteneces a este grupo")

        leader_ids = group.get("leaders", [])
        if len(leader_ids) == 1:
            assigned_leader = leader_ids[0]
        elif len(leader_ids) == MAX_GROUP_LEADERS:
            same_gender = [
                leader
                for leader in get_documents(db, USERS_COLLECTION, leader_ids)
                if leader.get("gender") == user.get("gender")
            ]
            if not same_gender:
                raise IntegrityError(
                    "No se pudo asignar un líder. Contacta al administrador."
                )
            assigned_leader = same_gender[0]["id"]
        else:
            raise IntegrityError("El grupo no tiene líderes válidos")

        commit_writes(
            db,
            [
                (
                    "update",
                    db.collection(USERS_COLLECTION).document(user_id),
                    {"leader": assigned_leader},
                ),
                (
                    "update",
                    db.collection(GROUPS_COLLECTION).document(group["id"]),
                    {
                        "disciples": firestore.ArrayUnion([user_id]),
                        "updatedAt": utcnow(),
                    },
                ),
            ],
        )
        logger.info(
            f"User {user_id} joined group {group['id']} under {assigned_leader}"
        )
        return {"success": True, "groupId": group["id"], "leaderId": assigned_leader}

    @staticmethod
    def update_group(
        db: Client,
        user_id: str | None,
        group_id: str,
        name: str | None = None,
        address: str | None = None,
    ) -> dict[str, Any]:
        """Patch a group's name and address; leaders only."""
        require_authenticated(user_id)
        group = get_document(db, GROUPS_COLLECTION, group_id)
        if group is None:
            raise NotFoundError("Grupo no encontrado")
        if not is_leader(group, user_id):
            raise AccessDenied("Solo los líderes pueden actualizar el grupo")

        updates: dict[str, Any] = {"updatedAt": utcnow()}
        if name is not None:
            updates["name"] = name
        if address is not None:
            updates["address"] = address

        db.collection(GROUPS_COLLECTION).document(group_id).update(updates)
        return {"success": True}
