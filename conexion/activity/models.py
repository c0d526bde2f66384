"""Data models for the activity blueprint."""

from __future__ import annotations

from typing import Any

from conexion.core.types import FirestoreDocument


class Activity(FirestoreDocument, total=False):
    """A group activity document in Firestore."""

    groupId: str
    name: str
    address: str
    dateTime: Any
    description: str
    createdBy: str


class ActivityResponse(FirestoreDocument, total=False):
    """A member's answer to an activity, one per (activity, user) pair."""

    activityId: str
    userId: str
    status: str
    respondedAt: Any
