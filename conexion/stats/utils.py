"""Date windows and bucketing for the statistics views."""

from __future__ import annotations

import datetime

from conexion.attendance.utils import end_of_day, month_range, year_range
from conexion.core.constants import (
    AGE_BANDS,
    MONTH_ABBREVIATIONS,
    MONTHS_PER_TERM,
    PERIOD_MONTH,
    PERIOD_QUARTER,
    PERIOD_TYPES,
    PERIOD_WEEK,
    PERIOD_YEAR,
    TREND_MONTHS,
)
from conexion.core.db import utcnow
from conexion.errors import ValidationError
from conexion.utils import as_utc

Period = tuple[datetime.datetime, datetime.datetime]


def validate_period_type(period_type: str) -> str:
    if period_type not in PERIOD_TYPES:
        raise ValidationError(f"Tipo de período inválido: {period_type}")
    return period_type


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """Shift a (year, month) pair by a number of months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def term_start_month(month: int) -> int:
    """Return the first month of the four-month term containing ``month``."""
    return (month - 1) // MONTHS_PER_TERM * MONTHS_PER_TERM + 1


def period_range(
    period_type: str,
    reference: datetime.datetime,
    now: datetime.datetime | None = None,
) -> Period:
    """Return the window of the period containing the reference date.

    A period that contains today ends at the end of today instead of at its
    natural end.
    """
    validate_period_type(period_type)
    reference = as_utc(reference)
    now = as_utc(now or utcnow())
    today_end = end_of_day(now.date())

    if period_type == PERIOD_WEEK:
        monday = reference.date() - datetime.timedelta(days=reference.weekday())
        start = datetime.datetime.combine(
            monday, datetime.time(), tzinfo=datetime.timezone.utc
        )
        return start, end_of_day(reference.date())

    if period_type == PERIOD_MONTH:
        start, end = month_range(reference.year, reference.month)
        current = (reference.year, reference.month) == (now.year, now.month)
    elif period_type == PERIOD_QUARTER:
        first = term_start_month(reference.month)
        start = month_range(reference.year, first)[0]
        end = month_range(reference.year, first + MONTHS_PER_TERM - 1)[1]
        current = reference.year == now.year and first == term_start_month(now.month)
    else:
        start, end = year_range(reference.year)
        current = reference.year == now.year

    if current and reference <= now:
        return start, today_end
    return start, end


def trend_months(
    period_type: str, reference: datetime.datetime
) -> list[tuple[int, int]]:
    """Return the (year, month) pairs a trend chart covers, oldest first.

    Years cover January to December and terms their four months; months
    cover the trailing half year and weeks their own month.
    """
    validate_period_type(period_type)
    reference = as_utc(reference)
    count = TREND_MONTHS[period_type]
    if period_type == PERIOD_YEAR:
        first = (reference.year, 1)
    elif period_type == PERIOD_QUARTER:
        first = (reference.year, term_start_month(reference.month))
    else:
        first = add_months(reference.year, reference.month, -(count - 1))
    return [add_months(*first, i) for i in range(count)]


def month_label(year: int, month: int) -> str:
    """Return a short Spanish label such as ``Ene 2026``."""
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


def calculate_age(birthdate: datetime.datetime, today: datetime.date) -> int:
    """Return the age in completed years on the given day."""
    birthdate = as_utc(birthdate)
    age = today.year - birthdate.year
    if (today.month, today.day) < (birthdate.month, birthdate.day):
        age -= 1
    return age


def age_band(age: int) -> str:
    """Return the label of the age band an age falls into."""
    if age < 13:  # noqa: PLR2004
        return AGE_BANDS[0]
    if age <= 17:  # noqa: PLR2004
        return AGE_BANDS[1]
    if age <= 25:  # noqa: PLR2004
        return AGE_BANDS[2]
    if age <= 35:  # noqa: PLR2004
        return AGE_BANDS[3]
    if age <= 45:  # noqa: PLR2004
        return AGE_BANDS[4]
    if age <= 55:  # noqa: PLR2004
        return AGE_BANDS[5]
    return AGE_BANDS[6]
