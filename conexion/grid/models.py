"""Data models for the grid blueprint."""

from __future__ import annotations

from typing import TypedDict

from conexion.core.types import FirestoreDocument


class Grid(FirestoreDocument, total=False):
    """A network of members led by one pastor."""

    name: str
    pastorId: str


class GridStats(TypedDict):
    """Headcounts over the members of a grid."""

    totalMembers: int
    membersInSchool: int
    totalGroups: int
    maleCount: int
    femaleCount: int
