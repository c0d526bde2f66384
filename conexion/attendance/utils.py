"""Period windows and aggregation helpers for attendance records."""

from __future__ import annotations

import calendar
import datetime
from typing import TYPE_CHECKING, Any

from conexion.core.constants import (
    ATTENDANCE_COLLECTION,
    ATTENDANCE_NEW_ATTENDEES,
    ATTENDANCE_TYPES,
    GENDER_FEMALE,
    GENDER_MALE,
    SERVICE_SLOTS,
)
from conexion.core.db import query_documents
from conexion.errors import ValidationError
from conexion.utils import as_utc

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from .models import GroupTypeReport, TypeReport

SUNDAY = 6
END_OF_DAY = datetime.time(23, 59, 59, 999999)


def normalize_date(value: datetime.date | datetime.datetime) -> datetime.datetime:
    """Return midnight UTC of the value's calendar date."""
    value = as_utc(value)
    return datetime.datetime(
        value.year, value.month, value.day, tzinfo=datetime.timezone.utc
    )


def end_of_day(value: datetime.date) -> datetime.datetime:
    """Return the last microsecond of a calendar day in UTC."""
    return datetime.datetime.combine(value, END_OF_DAY, tzinfo=datetime.timezone.utc)


def month_range(year: int, month: int) -> tuple[datetime.datetime, datetime.datetime]:
    """Return the first and last instant of a month."""
    if not 1 <= month <= 12:  # noqa: PLR2004
        raise ValidationError("Mes inválido")
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime.datetime(year, month, 1, tzinfo=datetime.timezone.utc),
        end_of_day(datetime.date(year, month, last_day)),
    )


def year_range(year: int) -> tuple[datetime.datetime, datetime.datetime]:
    """Return the first and last instant of a year."""
    return (
        datetime.datetime(year, 1, 1, tzinfo=datetime.timezone.utc),
        end_of_day(datetime.date(year, 12, 31)),
    )


def period_range(
    year: int, month: int | None = None
) -> tuple[datetime.datetime, datetime.datetime]:
    """Return the window of a month when one is given, else of the whole year."""
    if month is not None:
        return month_range(year, month)
    return year_range(year)


def in_period(
    record: dict[str, Any], start: datetime.datetime, end: datetime.datetime
) -> bool:
    """Return True if the record's date falls inside the window."""
    return start <= as_utc(record["date"]) <= end


def clean_record(
    date: datetime.date | datetime.datetime,
    type: str,  # noqa: A002
    count: int,
    attended: bool | None = None,
    service: str | None = None,
) -> dict[str, Any]:
    """Validate the fields of an attendance record and return them normalized.

    ``attended`` is only kept for new attendee records, which must fall on a
    Sunday.
    """
    if type not in ATTENDANCE_TYPES:
        raise ValidationError(f"Tipo de registro inválido: {type}")
    normalized = normalize_date(date)
    data: dict[str, Any] = {"date": normalized, "type": type}

    if type == ATTENDANCE_NEW_ATTENDEES:
        if normalized.weekday() != SUNDAY:
            raise ValidationError(
                "Los nuevos asistentes solo pueden registrarse en domingo"
            )
        if attended is None:
            raise ValidationError("Debes indicar si asististe o no")
        data["attended"] = attended

    if count is None or count < 0:
        raise ValidationError("Las cantidades deben ser números no negativos")
    data["count"] = count

    if service is not None:
        if service not in SERVICE_SLOTS:
            raise ValidationError(f"Servicio inválido: {service}")
        data["service"] = service
    return data


def record_total(record: dict[str, Any]) -> int:
    """Count the people in a record, the owner included if they attended."""
    total = record.get("count", 0)
    if record.get("type") == ATTENDANCE_NEW_ATTENDEES and record.get("attended"):
        total += 1
    return total


def get_records_of(db: Client, user_id: str) -> list[dict[str, Any]]:
    """Fetch every attendance record a user owns."""
    return query_documents(db, ATTENDANCE_COLLECTION, "userId", "==", user_id)


def newest_first(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(records, key=lambda r: as_utc(r["date"]), reverse=True)


def summarize(
    records: list[dict[str, Any]], genders: dict[str, str | None]
) -> dict[str, TypeReport]:
    """Sum record totals per type, split by each record owner's gender."""
    report: dict[str, TypeReport] = {
        t: {"total": 0, "male": 0, "female": 0} for t in ATTENDANCE_TYPES
    }
    for record in records:
        bucket = report.get(record.get("type"))
        if bucket is None:
            continue
        total = record_total(record)
        bucket["total"] += total
        gender = genders.get(record["userId"])
        if gender == GENDER_MALE:
            bucket["male"] += total
        elif gender == GENDER_FEMALE:
            bucket["female"] += total
    return report


def build_report(
    records: list[dict[str, Any]], genders: dict[str, str | None]
) -> dict[str, dict[str, Any]]:
    """Summarize records per type, listing the records of each type."""
    summary = summarize(records, genders)
    return {
        t: {
            **summary[t],
            "records": newest_first([r for r in records if r.get("type") == t]),
        }
        for t in ATTENDANCE_TYPES
    }


def build_group_report(
    my_summary: dict[str, TypeReport], disciples_summary: dict[str, TypeReport]
) -> dict[str, GroupTypeReport]:
    """Combine the leader's and the disciples' totals; the group is disciples only."""
    report: dict[str, GroupTypeReport] = {}
    for t in ATTENDANCE_TYPES:
        mine, theirs = my_summary[t], disciples_summary[t]
        report[t] = {
            "total": theirs["total"],
            "male": theirs["male"],
            "female": theirs["female"],
            "myTotal": mine["total"],
            "disciplesTotal": theirs["total"],
            "myMale": mine["male"],
            "myFemale": mine["female"],
            "disciplesMale": theirs["male"],
            "disciplesFemale": theirs["female"],
        }
    return report
