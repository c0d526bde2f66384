"""Data models for the user blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from conexion.core.types import FirestoreDocument


class User(FirestoreDocument, total=False):
    """A user document in Firestore."""

    name: str
    email: str
    phone: str
    role: str
    gender: str
    birthdate: Any
    leader: str
    currentCourses: list[str]
    serviceId: str
    gridId: str
    isActiveInSchool: bool
    isAdmin: bool


class PublicUser(TypedDict):
    """The subset of a user other members may see."""

    id: str
    name: str | None
    email: str | None
