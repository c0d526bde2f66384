"""Data models for the service area blueprint."""

from __future__ import annotations

from conexion.core.types import FirestoreDocument


class ServiceArea(FirestoreDocument, total=False):
    """A church service area members can volunteer in."""

    name: str
