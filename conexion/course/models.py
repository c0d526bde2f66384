"""Data models for the course blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from conexion.core.types import FirestoreDocument


class Course(FirestoreDocument, total=False):
    """A school course document in Firestore."""

    name: str
    description: str
    startDate: Any
    endDate: Any
    durationWeeks: int


class CourseProgress(FirestoreDocument, total=False):
    """A student's progress in one course."""

    userId: str
    courseId: str
    completedWeeks: list[int]
    completedWorkAndExam: bool


class WeekStatus(TypedDict):
    """Derived status of one course week."""

    week: int
    status: str
