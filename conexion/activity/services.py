"""Service layer for group activities and member responses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from conexion.core.constants import (
    ACTIVITIES_COLLECTION,
    ACTIVITY_RESPONSES_COLLECTION,
    GROUPS_COLLECTION,
    MIN_ACTIVITY_ADDRESS_LENGTH,
    MIN_ACTIVITY_DESCRIPTION_LENGTH,
    MIN_ACTIVITY_NAME_LENGTH,
    RESPONSE_CONFIRMED,
    RESPONSE_DENIED,
    RESPONSE_PENDING,
    RESPONSE_STATUSES,
    USERS_COLLECTION,
)
from conexion.core.db import (
    commit_writes,
    get_document,
    public_user,
    query_documents,
    require_authenticated,
    utcnow,
)
from conexion.errors import AccessDenied, NotFoundError, ValidationError
from conexion.group.utils import is_leader, is_member
from conexion.utils import as_utc

if TYPE_CHECKING:
    import datetime

    from google.cloud.firestore_v1.client import Client

    from .models import Activity, ActivityResponse

logger = logging.getLogger(__name__)


def response_id(activity_id: str, user_id: str) -> str:
    """Return the document id of a user's response to an activity."""
    return f"{activity_id}_{user_id}"


def _validate_name(name: str) -> str:
    name = name.strip()
    if len(name) < MIN_ACTIVITY_NAME_LENGTH:
        raise ValidationError("El nombre debe tener al menos 2 caracteres")
    return name


def _validate_address(address: str) -> str:
    address = address.strip()
    if len(address) < MIN_ACTIVITY_ADDRESS_LENGTH:
        raise ValidationError("Ingresa una dirección válida")
    return address


def _validate_date_time(date_time: datetime.datetime) -> datetime.datetime:
    date_time = as_utc(date_time)
    if date_time <= utcnow():
        raise ValidationError("La fecha y hora deben ser futuras")
    return date_time


def _validate_description(description: str) -> str:
    if len(description.strip()) < MIN_ACTIVITY_DESCRIPTION_LENGTH:
        raise ValidationError("La descripción debe tener al menos 10 caracteres")
    return description


def _load_activity(db: Client, activity_id: str) -> Activity:
    activity = get_document(db, ACTIVITIES_COLLECTION, activity_id)
    if activity is None:
        raise NotFoundError("Actividad no encontrada")
    return activity  # type: ignore[return-value]


def _load_group(db: Client, group_id: str) -> dict[str, Any]:
    group = get_document(db, GROUPS_COLLECTION, group_id)
    if group is None:
        raise NotFoundError("Grupo no encontrado")
    return group


def _with_creator(db: Client, activity: dict[str, Any]) -> dict[str, Any]:
    creator = get_document(db, USERS_COLLECTION, activity.get("createdBy"))
    return {**activity, "creator": public_user(creator)}


class ActivityService:
    """Service class for activity-related operations."""

    @staticmethod
    def get_activities_by_group(
        db: Client, user_id: str | None, group_id: str
    ) -> list[dict[str, Any]]:
        """List a group's activities, newest first, for one of its members."""
        require_authenticated(user_id)
        group = _load_group(db, group_id)
        if not is_member(group, user_id):
            raise AccessDenied("No tienes acceso a este grupo")

        activities = query_documents(
            db, ACTIVITIES_COLLECTION, "groupId", "==", group_id
        )
        activities.sort(key=lambda a: a["dateTime"], reverse=True)
        return [_with_creator(db, activity) for activity in activities]

    @staticmethod
    def create_activity(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        group_id: str,
        name: str,
        address: str,
        date_time: datetime.datetime,
        description: str,
    ) -> str:
        """Create an activity in a group the caller leads."""
        require_authenticated(user_id)
        group = _load_group(db, group_id)
        if not is_leader(group, user_id):
            raise AccessDenied("Solo los líderes pueden crear actividades")

        data = {
            "groupId": group_id,
            "name": _validate_name(name),
            "address": _validate_address(address),
            "dateTime": _validate_date_time(date_time),
            "description": _validate_description(description),
            "createdBy": user_id,
        }
        now = utcnow()
        activity_ref = db.collection(ACTIVITIES_COLLECTION).document()
        activity_ref.set({**data, "createdAt": now, "updatedAt": now})
        return activity_ref.id

    @staticmethod
    def respond_to_activity(
        db: Client, user_id: str | None, activity_id: str, status: str
    ) -> str:
        """Record or change the caller's answer to an activity."""
        require_authenticated(user_id)
        if status not in RESPONSE_STATUSES:
            raise ValidationError(f"Estado inválido: {status}")
        activity = _load_activity(db, activity_id)
        group = _load_group(db, activity["groupId"])
        if not is_member(group, user_id):
            raise AccessDenied("No puedes responder a esta actividad")

        doc_id = response_id(activity_id, user_id)
        response_ref = db.collection(ACTIVITY_RESPONSES_COLLECTION).document(doc_id)
        response_ref.set(
            {
                "activityId": activity_id,
                "userId": user_id,
                "status": status,
                "respondedAt": utcnow(),
            }
        )
        return doc_id

    @staticmethod
    def get_my_activity_response(
        db: Client, user_id: str | None, activity_id: str
    ) -> ActivityResponse | None:
        """Fetch the caller's answer to an activity, if any."""
        require_authenticated(user_id)
        return get_document(  # type: ignore[return-value]
            db, ACTIVITY_RESPONSES_COLLECTION, response_id(activity_id, user_id)
        )

    @staticmethod
    def get_activity_with_responses(
        db: Client, user_id: str | None, activity_id: str
    ) -> dict[str, Any]:
        """Fetch an activity with every member's answer grouped by status.

        Members who never answered are listed as pending with an empty id.
        """
        require_authenticated(user_id)
        activity = _load_activity(db, activity_id)
        group = _load_group(db, activity["groupId"])
        if not is_member(group, user_id):
            raise AccessDenied("No tienes acceso a esta actividad")

        members = {}
        for member_id in [*group.get("leaders", []), *group.get("disciples", [])]:
            if member_id not in members:
                members[member_id] = public_user(
                    get_document(db, USERS_COLLECTION, member_id)
                )

        rows = [
            {**row, "user": members.get(row["userId"])}
            for row in query_documents(
                db, ACTIVITY_RESPONSES_COLLECTION, "activityId", "==", activity_id
            )
        ]
        responses: dict[str, list[dict[str, Any]]] = {
            RESPONSE_CONFIRMED: [],
            RESPONSE_PENDING: [],
            RESPONSE_DENIED: [],
        }
        for row in rows:
            responses[row["status"]].append(row)

        answered = {row["userId"] for row in rows}
        for member_id, member in members.items():
            if member is None or member_id in answered:
                continue
            responses[RESPONSE_PENDING].append(
                {
                    "id": "",
                    "activityId": activity_id,
                    "userId": member_id,
                    "status": RESPONSE_PENDING,
                    "respondedAt": None,
                    "user": member,
                }
            )

        user_response = next((row for row in rows if row["userId"] == user_id), None)
        return {
            "activity": _with_creator(db, activity),
            "group": {
                "id": group["id"],
                "name": group.get("name"),
                "leaders": [
                    members[m] for m in group.get("leaders", []) if members.get(m)
                ],
                "disciples": [
                    members[m] for m in group.get("disciples", []) if members.get(m)
                ],
            },
            "responses": responses,
            "userResponse": user_response,
        }

    @staticmethod
    def update_activity(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        activity_id: str,
        name: str | None = None,
        address: str | None = None,
        date_time: datetime.datetime | None = None,
        description: str | None = None,
    ) -> dict[str, Any]:
        """Patch an activity; only its creator may."""
        require_authenticated(user_id)
        activity = _load_activity(db, activity_id)
        if activity.get("createdBy") != user_id:
            raise AccessDenied("Solo el creador puede actualizar la actividad")

        updates: dict[str, Any] = {}
        if name is not None:
            updates["name"] = _validate_name(name)
        if address is not None:
            updates["address"] = _validate_address(address)
        if date_time is not None:
            updates["dateTime"] = _validate_date_time(date_time)
        if description is not None:
            updates["description"] = _validate_description(description)
        updates["updatedAt"] = utcnow()

        db.collection(ACTIVITIES_COLLECTION).document(activity_id).update(updates)
        return {"success": True}

    @staticmethod
    def delete_activity(
        db: Client, user_id: str | None, activity_id: str
    ) -> dict[str, Any]:
        """Delete an activity and its responses; only its creator may."""
        require_authenticated(user_id)
        activity = _load_activity(db, activity_id)
        if activity.get("createdBy") != user_id:
            raise AccessDenied("Solo el creador puede eliminar la actividad")

        responses = query_documents(
            db, ACTIVITY_RESPONSES_COLLECTION, "activityId", "==", activity_id
        )
        writes = [
            (
                "delete",
                db.collection(ACTIVITY_RESPONSES_COLLECTION).document(r["id"]),
                None,
            )
            for r in responses
        ]
        writes.append(
            ("delete", db.collection(ACTIVITIES_COLLECTION).document(activity_id), None)
        )
        commit_writes(db, writes)
        logger.info(
            f"Activity {activity_id} deleted with {len(responses)} responses"
        )
        return {"success": True}
