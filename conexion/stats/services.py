"""Service layer for the leader statistics dashboard."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from conexion.attendance.utils import get_records_of, record_total
from conexion.core.constants import (
    AGE_BANDS,
    ATTENDANCE_TYPES,
    COURSES_COLLECTION,
    GENDER_FEMALE,
    GENDER_MALE,
    GROUPS_COLLECTION,
    POPULAR_COURSES_LIMIT,
    SERVICE_SLOTS,
    UNKNOWN_COURSE_NAME,
    USERS_COLLECTION,
)
from conexion.core.db import (
    get_document,
    get_documents,
    require_authenticated,
    utcnow,
)
from conexion.errors import AccessDenied, NotFoundError
from conexion.group.utils import get_groups_led_by
from conexion.utils import as_utc

from .utils import age_band, calculate_age, month_label, period_range, trend_months

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


def _disciples_for(
    db: Client, user_id: str, group_id: str | None = None
) -> list[dict[str, Any]]:
    """Resolve the disciples of one group the caller leads, or of all of them."""
    if group_id:
        group = get_document(db, GROUPS_COLLECTION, group_id)
        if group is None:
            raise NotFoundError("Grupo no encontrado")
        if user_id not in group.get("leaders", []):
            raise AccessDenied(
                "Solo los líderes pueden ver las estadísticas del grupo"
            )
        disciple_ids = group.get("disciples", [])
    else:
        disciple_ids = []
        for group in get_groups_led_by(db, user_id):
            disciple_ids.extend(group.get("disciples", []))
    return get_documents(db, USERS_COLLECTION, list(dict.fromkeys(disciple_ids)))


def _records_in(
    db: Client, user_ids: list[str], start: datetime.datetime, end: datetime.datetime
) -> list[dict[str, Any]]:
    records = []
    for uid in user_ids:
        records.extend(
            r for r in get_records_of(db, uid) if start <= as_utc(r["date"]) <= end
        )
    return records


class StatsService:
    """Service class for statistics aggregation."""

    @staticmethod
    def get_gender_distribution(
        db: Client, user_id: str | None, group_id: str | None = None
    ) -> dict[str, int]:
        """Count the disciples of each gender."""
        require_authenticated(user_id)
        disciples = _disciples_for(db, user_id, group_id)
        return {
            "male": sum(1 for d in disciples if d.get("gender") == GENDER_MALE),
            "female": sum(1 for d in disciples if d.get("gender") == GENDER_FEMALE),
        }

    @staticmethod
    def get_age_distribution(
        db: Client,
        user_id: str | None,
        group_id: str | None = None,
        now: datetime.datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Count disciples per age band; those without a birthdate are skipped."""
        require_authenticated(user_id)
        today = as_utc(now or utcnow()).date()
        counts = dict.fromkeys(AGE_BANDS, 0)
        for disciple in _disciples_for(db, user_id, group_id):
            birthdate = disciple.get("birthdate")
            if birthdate is None:
                continue
            counts[age_band(calculate_age(birthdate, today))] += 1
        return [{"range": band, "count": count} for band, count in counts.items()]

    @staticmethod
    def get_attendance_trends(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        period_type: str,
        reference_date: datetime.datetime,
        group_id: str | None = None,
        now: datetime.datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Sum record totals per month by type and by service slot."""
        require_authenticated(user_id)
        months = trend_months(period_type, reference_date)
        period_end = period_range(period_type, reference_date, now)[1]
        first_year, first_month = months[0]
        window_start = datetime.datetime(
            first_year, first_month, 1, tzinfo=datetime.timezone.utc
        )

        rows = {
            key: {
                "month": month_label(*key),
                **dict.fromkeys(ATTENDANCE_TYPES, 0),
                **dict.fromkeys(SERVICE_SLOTS, 0),
            }
            for key in months
        }
        user_ids = [user_id, *(d["id"] for d in _disciples_for(db, user_id, group_id))]
        for record in _records_in(db, user_ids, window_start, period_end):
            date = as_utc(record["date"])
            row = rows.get((date.year, date.month))
            if row is None:
                continue
            total = record_total(record)
            if record.get("type") in ATTENDANCE_TYPES:
                row[record["type"]] += total
            if record.get("service") in SERVICE_SLOTS:
                row[record["service"]] += total
        return [rows[key] for key in months]

    @staticmethod
    def get_service_distribution(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        period_type: str,
        reference_date: datetime.datetime,
        group_id: str | None = None,
        now: datetime.datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Sum record totals per worship service slot over the period."""
        require_authenticated(user_id)
        start, end = period_range(period_type, reference_date, now)
        user_ids = [user_id, *(d["id"] for d in _disciples_for(db, user_id, group_id))]

        counts = dict.fromkeys(SERVICE_SLOTS, 0)
        for record in _records_in(db, user_ids, start, end):
            if record.get("service") in counts:
                counts[record["service"]] += record_total(record)
        return [
            {"service": SERVICE_SLOTS[code], "count": count}
            for code, count in counts.items()
        ]

    @staticmethod
    def get_school_participation(
        db: Client, user_id: str | None, group_id: str | None = None
    ) -> dict[str, int]:
        """Count disciples who are and are not active in the school."""
        require_authenticated(user_id)
        disciples = _disciples_for(db, user_id, group_id)
        active = sum(1 for d in disciples if d.get("isActiveInSchool"))
        return {"active": active, "inactive": len(disciples) - active}

    @staticmethod
    def get_popular_courses(
        db: Client,
        user_id: str | None,
        group_id: str | None = None,
        limit: int = POPULAR_COURSES_LIMIT,
    ) -> list[dict[str, Any]]:
        """Rank the courses the disciples are enrolled in by enrollment count."""
        require_authenticated(user_id)
        counts: dict[str, int] = {}
        for disciple in _disciples_for(db, user_id, group_id):
            for course_id in disciple.get("currentCourses") or []:
                counts[course_id] = counts.get(course_id, 0) + 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        results = []
        for course_id, count in ranked[:limit]:
            course = get_document(db, COURSES_COLLECTION, course_id)
            name = course.get("name") if course else None
            results.append({"courseName": name or UNKNOWN_COURSE_NAME, "count": count})
        return results
