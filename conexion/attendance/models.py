"""Data models for the attendance blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from conexion.core.types import FirestoreDocument


class AttendanceRecord(FirestoreDocument, total=False):
    """A dated count of people a user brought or served."""

    userId: str
    date: Any
    type: str
    attended: bool
    count: int
    service: str


class TypeReport(TypedDict):
    """Totals of one attendance type over a period."""

    total: int
    male: int
    female: int


class GroupTypeReport(TypeReport):
    """Disciple totals of one type, with the leader's own shown apart."""

    myTotal: int
    disciplesTotal: int
    myMale: int
    myFemale: int
    disciplesMale: int
    disciplesFemale: int
