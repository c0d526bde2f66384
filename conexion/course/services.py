"""Service layer for the school: courses, enrollment and weekly progress."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from conexion.core.constants import (
    COURSE_PROGRESS_COLLECTION,
    COURSES_COLLECTION,
    DEFAULT_DURATION_WEEKS,
    USERS_COLLECTION,
)
from conexion.core.db import (
    commit_writes,
    get_document,
    query_documents,
    require_authenticated,
    require_caller,
    snapshot_to_dict,
    utcnow,
)
from conexion.errors import AccessDenied, NotFoundError, ValidationError
from conexion.group.utils import get_disciple_ids_led_by
from conexion.utils import as_utc

from .utils import (
    courses_with_progress,
    duration_of,
    empty_progress,
    get_progress,
    progress_id,
)

if TYPE_CHECKING:
    import datetime

    from google.cloud.firestore_v1.client import Client

    from .models import Course

logger = logging.getLogger(__name__)

MIN_COURSE_NAME_LENGTH = 2


def _require_admin(db: Client, user_id: str | None) -> dict[str, Any]:
    user = require_caller(db, user_id)
    if not user.get("isAdmin"):
        raise AccessDenied("Solo los administradores pueden gestionar cursos")
    return user


def _load_course(db: Client, course_id: str) -> dict[str, Any]:
    course = get_document(db, COURSES_COLLECTION, course_id)
    if course is None:
        raise NotFoundError("Curso no encontrado")
    return course


def _validate_course_fields(
    name: str | None, start_date: Any, end_date: Any, duration_weeks: int | None
) -> None:
    if name is not None and len(name.strip()) < MIN_COURSE_NAME_LENGTH:
        raise ValidationError("El nombre debe tener al menos 2 caracteres")
    if duration_weeks is not None and duration_weeks < 1:
        raise ValidationError("La duración debe ser de al menos 1 semana")
    if start_date is not None and end_date is not None:
        if as_utc(start_date) >= as_utc(end_date):
            raise ValidationError(
                "La fecha de inicio debe ser anterior a la fecha de fin"
            )


def _require_enrolled(user: dict[str, Any], course_id: str) -> None:
    if course_id not in (user.get("currentCourses") or []):
        raise AccessDenied("No estás inscrito en este curso")


class CourseService:
    """Service class for course-related operations."""

    @staticmethod
    def get_all_courses(db: Client) -> list[Course]:
        """Fetch every course, newest first."""
        courses = [
            course
            for course in (
                snapshot_to_dict(doc)
                for doc in db.collection(COURSES_COLLECTION).stream()
            )
            if course is not None
        ]
        courses.sort(key=lambda c: c.get("createdAt"), reverse=True)
        return courses  # type: ignore[return-value]

    @staticmethod
    def get_course_by_id(db: Client, course_id: str) -> Course | None:
        """Fetch a course by its ID."""
        course = get_document(db, COURSES_COLLECTION, course_id)
        return course  # type: ignore[return-value]

    @staticmethod
    def create_course(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        name: str,
        description: str | None = None,
        start_date: datetime.datetime | None = None,
        end_date: datetime.datetime | None = None,
        duration_weeks: int | None = None,
    ) -> str:
        """Create a course; admins only."""
        _require_admin(db, user_id)
        if duration_weeks is None:
            duration_weeks = DEFAULT_DURATION_WEEKS
        _validate_course_fields(name, start_date, end_date, duration_weeks)

        now = utcnow()
        course_ref = db.collection(COURSES_COLLECTION).document()
        course_ref.set(
            {
                "name": name.strip(),
                "description": description,
                "startDate": as_utc(start_date),
                "endDate": as_utc(end_date),
                "durationWeeks": duration_weeks,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        logger.info(f"Course {course_ref.id} created by {user_id}")
        return course_ref.id

    @staticmethod
    def update_course(  # noqa: PLR0913
        db: Client,
        user_id: str | None,
        course_id: str,
        name: str | None = None,
        description: str | None = None,
        start_date: datetime.datetime | None = None,
        end_date: datetime.datetime | None = None,
        duration_weeks: int | None = None,
    ) -> dict[str, Any]:
        """Patch a course; admins only.

        The date range is checked against the stored dates merged with the
        new ones.
        """
        _require_admin(db, user_id)
        course = _load_course(db, course_id)
        _validate_course_fields(
            name,
            start_date if start_date is not None else course.get("startDate"),
            end_date if end_date is not None else course.get("endDate"),
            duration_weeks,
        )

        updates: dict[str, Any] = {"updatedAt": utcnow()}
        if name is not None:
            updates["name"] = name.strip()
        if description is not None:
            updates["description"] = description
        if start_date is not None:
            updates["startDate"] = as_utc(start_date)
        if end_date is not None:
            updates["endDate"] = as_utc(end_date)
        if duration_weeks is not None:
            updates["durationWeeks"] = duration_weeks

        db.collection(COURSES_COLLECTION).document(course_id).update(updates)
        return {"success": True}

    @staticmethod
    def delete_course(
        db: Client, user_id: str | None, course_id: str
    ) -> dict[str, Any]:
        """Delete a course, its progress rows and every enrollment in it."""
        _require_admin(db, user_id)
        _load_course(db, course_id)

        writes: list[tuple[str, Any, dict[str, Any] | None]] = []
        for row in query_documents(
            db, COURSE_PROGRESS_COLLECTION, "courseId", "==", course_id
        ):
            writes.append(
                (
                    "delete",
                    db.collection(COURSE_PROGRESS_COLLECTION).document(row["id"]),
                    None,
                )
            )
        enrolled = query_documents(
            db, USERS_COLLECTION, "currentCourses", "array_contains", course_id
        )
        for user in enrolled:
            writes.append(
                (
                    "update",
                    db.collection(USERS_COLLECTION).document(user["id"]),
                    {"currentCourses": firestore.ArrayRemove([course_id])},
                )
            )
        writes.append(
            ("delete", db.collection(COURSES_COLLECTION).document(course_id), None)
        )
        commit_writes(db, writes)
        logger.info(f"Course {course_id} deleted, {len(enrolled)} users unenrolled")
        return {"success": True}

    @staticmethod
    def enroll_in_courses(
        db: Client, user_id: str | None, course_ids: list[str]
    ) -> dict[str, Any]:
        """Add courses to the caller's enrollment, creating progress rows."""
        user = require_caller(db, user_id)
        if any(get_document(db, COURSES_COLLECTION, c) is None for c in course_ids):
            raise NotFoundError("Uno o más cursos no existen")

        enrolled = user.get("currentCourses") or []
        current = list(dict.fromkeys([*enrolled, *course_ids]))
        user_updates: dict[str, Any] = {
            "currentCourses": firestore.ArrayUnion(list(dict.fromkeys(course_ids)))
        }
        if current:
            user_updates["isActiveInSchool"] = True

        writes: list[tuple[str, Any, dict[str, Any] | None]] = [
            ("update", db.collection(USERS_COLLECTION).document(user_id), user_updates)
        ]
        for course_id in dict.fromkeys(course_ids):
            if get_progress(db, user_id, course_id) is None:
                writes.append(
                    (
                        "set",
                        db.collection(COURSE_PROGRESS_COLLECTION).document(
                            progress_id(user_id, course_id)
                        ),
                        empty_progress(user_id, course_id),
                    )
                )
        commit_writes(db, writes)
        return {"success": True, "currentCourses": current}

    @staticmethod
    def unenroll_from_courses(
        db: Client, user_id: str | None, course_ids: list[str]
    ) -> dict[str, Any]:
        """Remove courses from the caller's enrollment and drop their progress."""
        user = require_caller(db, user_id)
        removed = set(course_ids)
        current = [c for c in user.get("currentCourses") or [] if c not in removed]
        user_updates: dict[str, Any] = {
            "currentCourses": firestore.ArrayRemove(list(removed))
        }
        if not current:
            user_updates["isActiveInSchool"] = False

        writes: list[tuple[str, Any, dict[str, Any] | None]] = [
            ("update", db.collection(USERS_COLLECTION).document(user_id), user_updates)
        ]
        for course_id in removed:
            if get_progress(db, user_id, course_id) is not None:
                writes.append(
                    (
                        "delete",
                        db.collection(COURSE_PROGRESS_COLLECTION).document(
                            progress_id(user_id, course_id)
                        ),
                        None,
                    )
                )
        commit_writes(db, writes)
        return {"success": True, "currentCourses": current}

    @staticmethod
    def update_school_status(
        db: Client, user_id: str | None, is_active: bool
    ) -> dict[str, Any]:
        """Set whether the caller is an active student."""
        require_caller(db, user_id)
        db.collection(USERS_COLLECTION).document(user_id).update(
            {"isActiveInSchool": is_active}
        )
        return {"success": True}

    @staticmethod
    def toggle_week_completion(
        db: Client, user_id: str | None, course_id: str, week: int
    ) -> list[int]:
        """Mark or unmark one week of a course as completed by the caller."""
        user = require_caller(db, user_id)
        course = _load_course(db, course_id)
        if week is None or not 1 <= week <= duration_of(course):
            raise ValidationError(
                f"La semana debe estar entre 1 y {duration_of(course)}"
            )
        _require_enrolled(user, course_id)

        progress_ref = db.collection(COURSE_PROGRESS_COLLECTION).document(
            progress_id(user_id, course_id)
        )
        progress = get_progress(db, user_id, course_id)
        if progress is None:
            completed = [week]
            progress_ref.set(
                {**empty_progress(user_id, course_id), "completedWeeks": completed}
            )
            return completed

        completed = set(progress.get("completedWeeks") or [])
        completed ^= {week}
        completed_weeks = sorted(completed)
        progress_ref.update({"completedWeeks": completed_weeks, "updatedAt": utcnow()})
        return completed_weeks

    @staticmethod
    def toggle_work_and_exam(db: Client, user_id: str | None, course_id: str) -> bool:
        """Flip whether the caller handed in the course work and exam."""
        user = require_caller(db, user_id)
        _load_course(db, course_id)
        _require_enrolled(user, course_id)

        progress_ref = db.collection(COURSE_PROGRESS_COLLECTION).document(
            progress_id(user_id, course_id)
        )
        progress = get_progress(db, user_id, course_id)
        if progress is None:
            progress_ref.set(
                {**empty_progress(user_id, course_id), "completedWorkAndExam": True}
            )
            return True

        done = not progress.get("completedWorkAndExam", False)
        progress_ref.update({"completedWorkAndExam": done, "updatedAt": utcnow()})
        return done

    @staticmethod
    def get_my_courses(
        db: Client, user_id: str | None, now: datetime.datetime | None = None
    ) -> list[dict[str, Any]]:
        """Fetch the caller's courses with progress and week statuses."""
        user = require_caller(db, user_id)
        return courses_with_progress(db, user, now)

    @staticmethod
    def get_disciple_course_progress(
        db: Client,
        user_id: str | None,
        disciple_id: str,
        now: datetime.datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch a disciple's course progress for one of their leaders."""
        require_authenticated(user_id)
        if disciple_id not in get_disciple_ids_led_by(db, user_id):
            raise AccessDenied("No tienes acceso al progreso de este discípulo")
        disciple = get_document(db, USERS_COLLECTION, disciple_id)
        if disciple is None:
            raise NotFoundError("Discípulo no encontrado")
        return courses_with_progress(db, disciple, now)
