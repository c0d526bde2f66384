"""Utility functions for group membership."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any

from conexion.core.constants import (
    COURSES_COLLECTION,
    GROUPS_COLLECTION,
    INVITATION_CODE_ALPHABET,
    INVITATION_CODE_LENGTH,
    USERS_COLLECTION,
)
from conexion.core.db import get_documents, query_documents

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from .models import EnrichedGroup, Group


def generate_invitation_code() -> str:
    """Return a random uppercase alphanumeric invitation code."""
    return "".join(
        secrets.choice(INVITATION_CODE_ALPHABET) for _ in range(INVITATION_CODE_LENGTH)
    )


def is_leader(group: dict[str, Any], user_id: str) -> bool:
    """Return True if the user leads the group."""
    return user_id in group.get("leaders", [])


def is_member(group: dict[str, Any], user_id: str) -> bool:
    """Return True if the user leads the group or is one of its disciples."""
    return is_leader(group, user_id) or user_id in group.get("disciples", [])


def get_groups_led_by(db: Client, user_id: str) -> list[Group]:
    """Fetch every group that lists the user among its leaders."""
    return query_documents(  # type: ignore[return-value]
        db, GROUPS_COLLECTION, "leaders", "array_contains", user_id
    )


def get_disciple_ids_led_by(db: Client, user_id: str) -> set[str]:
    """Collect the disciple ids of every group the user leads."""
    disciple_ids: set[str] = set()
    for group in get_groups_led_by(db, user_id):
        disciple_ids.update(group.get("disciples", []))
    return disciple_ids


def get_group_by_code(db: Client, invitation_code: str) -> Group | None:
    """Look a group up by its invitation code."""
    groups = query_documents(
        db, GROUPS_COLLECTION, "invitationCode", "==", invitation_code
    )
    return groups[0] if groups else None  # type: ignore[return-value]


def expand_group(
    db: Client, group: dict[str, Any], with_courses: bool = False
) -> EnrichedGroup:
    """Replace leader and disciple ids with user documents.

    Ids that no longer resolve to a user are dropped. With ``with_courses``
    every disciple also carries the course documents it is enrolled in.
    """
    leaders = get_documents(db, USERS_COLLECTION, group.get("leaders", []))
    disciples = get_documents(db, USERS_COLLECTION, group.get("disciples", []))
    if with_courses:
        for disciple in disciples:
            disciple["courses"] = get_documents(
                db, COURSES_COLLECTION, disciple.get("currentCourses") or []
            )
    return {  # type: ignore[return-value]
        **group,
        "leaders": leaders,
        "disciples": disciples,
    }
