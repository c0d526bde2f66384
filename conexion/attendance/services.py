"""Service layer for attendance records and period reports."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from conexion.core.constants import (
    ATTENDANCE_COLLECTION,
    MAX_GROUP_LEADERS,
    USERS_COLLECTION,
)
from conexion.core.db import (
    get_document,
    get_documents,
    query_documents,
    require_authenticated,
    require_caller,
    utcnow,
)
from conexion.errors import AccessDenied, NotFoundError
from conexion.group.utils import get_groups_led_by

from .utils import (
    build_group_report,
    build_report,
    clean_record,
    get_records_of,
    in_period,
    newest_first,
    period_range,
    summarize,
)

if TYPE_CHECKING:
    import datetime

    from google.cloud.firestore_v1.client import Client

    from .models import AttendanceRecord

logger = logging.getLogger(__name__)


def _load_own_record(
    db: Client, user_id: str | None, record_id: str, action: str
) -> dict[str, Any]:
    require_authenticated(user_id)
    record = get_document(db, ATTENDANCE_COLLECTION, record_id)
    if record is None:
        raise NotFoundError("Registro no encontrado")
    if record.get("userId") != user_id:
        raise AccessDenied(f"No tienes permiso para {action} este registro")
    return record


class AttendanceService:
    """Service class for attendance operations."""

    @staticmethod
    def get_co_leaders(db: Client, user_id: str | None) -> list[dict[str, Any]]:
        """List the opposite-gender leaders the caller shares a group with."""
        user = require_caller(db, user_id)
        co_leaders: dict[str, dict[str, Any]] = {}
        for group in get_groups_led_by(db, user_id):
            leaders = group.get("leaders", [])
            if len(leaders) != MAX_GROUP_LEADERS:
                continue
            other_id = next((lid for lid in leaders if lid != user_id), None)
            if other_id is None or other_id in co_leaders:
                continue
            other = get_document(db, USERS_COLLECTION, other_id)
            if other is None or other.get("gender") == user.get("gender"):
                continue
            co_leaders[other_id] = {
                "id": other_id,
                "name": other.get("name"),
                "email": other.get("email"),
                "gender": other.get("gender"),
            }
        return list(co_leaders.values())

    @staticmethod
    def record_attendance(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        date: datetime.date | datetime.datetime,
        type: str,  # noqa: A002
        count: int,
        attended: bool | None = None,
        service: str | None = None,
    ) -> str:
        """Record a dated count for the caller and return the record id."""
        require_caller(db, user_id)
        data = clean_record(date, type, count, attended=attended, service=service)

        now = utcnow()
        record_ref = db.collection(ATTENDANCE_COLLECTION).document()
        record_ref.set({**data, "userId": user_id, "createdAt": now, "updatedAt": now})
        return record_ref.id

    @staticmethod
    def update_attendance(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        record_id: str,
        date: datetime.date | datetime.datetime | None = None,
        type: str | None = None,  # noqa: A002
        count: int | None = None,
        attended: bool | None = None,
        service: str | None = None,
    ) -> dict[str, Any]:
        """Edit one of the caller's records, validating the merged result."""
        record = _load_own_record(db, user_id, record_id, "editar")

        data = clean_record(
            date if date is not None else record["date"],
            type if type is not None else record["type"],
            count if count is not None else record.get("count", 0),
            attended=attended if attended is not None else record.get("attended"),
            service=service if service is not None else record.get("service"),
        )
        # Fields the cleaned record no longer carries are cleared.
        for field in ("attended", "service"):
            data.setdefault(field, None)
        data["updatedAt"] = utcnow()

        db.collection(ATTENDANCE_COLLECTION).document(record_id).update(data)
        return {"success": True}

    @staticmethod
    def delete_attendance(
        db: Client, user_id: str | None, record_id: str
    ) -> dict[str, Any]:
        """Delete one of the caller's records."""
        _load_own_record(db, user_id, record_id, "eliminar")
        db.collection(ATTENDANCE_COLLECTION).document(record_id).delete()
        return {"success": True}

    @staticmethod
    def get_my_attendance_records(
        db: Client,
        user_id: str | None,
        type: str | None = None,  # noqa: A002
        month: int | None = None,
        year: int | None = None,
    ) -> list[AttendanceRecord]:
        """List the caller's records, newest first.

        The month filter applies only when both month and year are given.
        """
        require_authenticated(user_id)
        records = get_records_of(db, user_id)
        if type:
            records = [r for r in records if r.get("type") == type]
        if month is not None and year is not None:
            start, end = period_range(year, month)
            records = [r for r in records if in_period(r, start, end)]
        return newest_first(records)  # type: ignore[return-value]

    @staticmethod
    def get_attendance_records_by_user_id(
        db: Client, user_id: str | None, target_id: str
    ) -> list[AttendanceRecord]:
        """List a disciple's records for one of their leaders."""
        require_authenticated(user_id)
        groups = get_groups_led_by(db, user_id)
        if not groups:
            raise AccessDenied(
                "Solo los líderes pueden ver los registros de sus discípulos"
            )
        if get_document(db, USERS_COLLECTION, target_id) is None:
            raise NotFoundError("Usuario no encontrado")
        if not any(target_id in g.get("disciples", []) for g in groups):
            raise AccessDenied("Solo puedes ver los registros de tus discípulos")
        return newest_first(get_records_of(db, target_id))  # type: ignore[return-value]

    @staticmethod
    def get_my_monthly_report(
        db: Client, user_id: str | None, year: int, month: int | None = None
    ) -> dict[str, dict[str, Any]]:
        """Total the caller's records per type over a month or a year."""
        user = require_caller(db, user_id)
        start, end = period_range(year, month)
        records = [r for r in get_records_of(db, user_id) if in_period(r, start, end)]
        return build_report(records, {user_id: user.get("gender")})

    @staticmethod
    def get_group_attendance_report(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        year: int,
        month: int | None = None,
        disciple_id: str | None = None,
        group_id: str | None = None,
    ) -> dict[str, Any]:
        """Report the caller's totals and, for leaders, their disciples' totals.

        The group figures cover the disciples only; the leader's own totals
        are reported apart.
        """
        user = require_caller(db, user_id)
        start, end = period_range(year, month)
        my_records = [
            r for r in get_records_of(db, user_id) if in_period(r, start, end)
        ]
        my_genders = {user_id: user.get("gender")}
        my_report = build_report(my_records, my_genders)

        groups = get_groups_led_by(db, user_id)
        if not groups:
            return {"isLeader": False, "myReport": my_report, "groupReport": None}

        if group_id is not None:
            group = next((g for g in groups if g["id"] == group_id), None)
            if group is None:
                raise AccessDenied("El grupo especificado no pertenece a tus grupos")
            disciples = get_documents(db, USERS_COLLECTION, group.get("disciples", []))
        else:
            disciples = query_documents(db, USERS_COLLECTION, "leader", "==", user_id)

        if disciple_id is not None:
            disciples = [d for d in disciples if d["id"] == disciple_id]
            if not disciples:
                raise AccessDenied(
                    "El discípulo especificado no pertenece a tus grupos"
                )

        disciple_records = []
        for disciple in disciples:
            disciple_records.extend(
                r
                for r in get_records_of(db, disciple["id"])
                if in_period(r, start, end)
            )
        disciple_genders = {d["id"]: d.get("gender") for d in disciples}

        return {
            "isLeader": True,
            "myReport": my_report,
            "groupReport": build_group_report(
                summarize(my_records, my_genders),
                summarize(disciple_records, disciple_genders),
            ),
        }
