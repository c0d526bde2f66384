"""Data models for the group blueprint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from conexion.core.types import FirestoreDocument

if TYPE_CHECKING:
    from conexion.user.models import User


class Group(FirestoreDocument, total=False):
    """A connection group document in Firestore."""

    name: str
    address: str
    district: str
    minAge: int
    maxAge: int
    day: str
    time: str
    leaders: list[str]
    disciples: list[str]
    invitationCode: str


class EnrichedGroup(FirestoreDocument, total=False):
    """A group with its leader and disciple ids expanded to user documents."""

    name: str
    address: str
    district: str
    minAge: int
    maxAge: int
    day: str
    time: str
    leaders: list[User | dict[str, Any]]
    disciples: list[User | dict[str, Any]]
    invitationCode: str
