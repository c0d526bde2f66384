"""Utility functions for course weeks and progress rows."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from conexion.core.constants import (
    COURSE_PROGRESS_COLLECTION,
    COURSES_COLLECTION,
    DEFAULT_DURATION_WEEKS,
    WEEK_STATUS_BEHIND,
    WEEK_STATUS_PENDING,
    WEEK_STATUS_UP_TO_DATE,
)
from conexion.core.db import get_document, utcnow
from conexion.utils import as_utc

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from .models import CourseProgress, WeekStatus

ONE_WEEK = datetime.timedelta(weeks=1)


def duration_of(course: dict[str, Any]) -> int:
    """Return the course length in weeks."""
    return course.get("durationWeeks") or DEFAULT_DURATION_WEEKS


def current_week(course: dict[str, Any], now: datetime.datetime | None = None) -> int:
    """Return the week the course is in, capped at its last week.

    Courses without a start date are in week 1; courses that have not
    started yet are in week 0.
    """
    start_date = course.get("startDate")
    if start_date is None:
        return 1
    now = now or utcnow()
    elapsed_weeks = (as_utc(now) - as_utc(start_date)) // ONE_WEEK
    return max(0, min(elapsed_weeks + 1, duration_of(course)))


def week_statuses(
    course: dict[str, Any],
    completed_weeks: list[int],
    now: datetime.datetime | None = None,
) -> list[WeekStatus]:
    """Derive the status of every week of a course for one student."""
    week_now = current_week(course, now)
    completed = set(completed_weeks)
    statuses: list[WeekStatus] = []
    for week in range(1, duration_of(course) + 1):
        if week in completed:
            status = WEEK_STATUS_UP_TO_DATE
        elif week <= week_now:
            status = WEEK_STATUS_BEHIND
        else:
            status = WEEK_STATUS_PENDING
        statuses.append({"week": week, "status": status})
    return statuses


def progress_id(user_id: str, course_id: str) -> str:
    """Return the document id of a user's progress row for a course."""
    return f"{user_id}_{course_id}"


def empty_progress(user_id: str, course_id: str) -> dict[str, Any]:
    """Return the fields of a progress row nothing has been marked on."""
    now = utcnow()
    return {
        "userId": user_id,
        "courseId": course_id,
        "completedWeeks": [],
        "completedWorkAndExam": False,
        "createdAt": now,
        "updatedAt": now,
    }


def get_progress(db: Client, user_id: str, course_id: str) -> CourseProgress | None:
    """Fetch a user's progress row for a course."""
    return get_document(  # type: ignore[return-value]
        db, COURSE_PROGRESS_COLLECTION, progress_id(user_id, course_id)
    )


def courses_with_progress(
    db: Client, user: dict[str, Any], now: datetime.datetime | None = None
) -> list[dict[str, Any]]:
    """Attach progress and week statuses to every course a user is enrolled in."""
    now = now or utcnow()
    results = []
    for course_id in user.get("currentCourses") or []:
        course = get_document(db, COURSES_COLLECTION, course_id)
        if course is None:
            continue
        progress = get_progress(db, user["id"], course_id) or {
            "id": progress_id(user["id"], course_id),
            "userId": user["id"],
            "courseId": course_id,
            "completedWeeks": [],
            "completedWorkAndExam": False,
        }
        results.append(
            {
                **course,
                "progress": progress,
                "currentWeek": current_week(course, now),
                "weeks": week_statuses(course, progress["completedWeeks"], now),
            }
        )
    return results
