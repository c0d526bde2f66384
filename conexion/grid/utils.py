"""Utility functions for grids."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from conexion.core.constants import GRIDS_COLLECTION, ROLE_PASTOR
from conexion.core.db import query_documents

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from .models import Grid


def get_grid_of_pastor(db: Client, user: dict[str, Any]) -> Grid | None:
    """Return the grid a pastor leads, or None for members and grid-less pastors."""
    if user.get("role") != ROLE_PASTOR:
        return None
    grids = query_documents(db, GRIDS_COLLECTION, "pastorId", "==", user["id"])
    return grids[0] if grids else None  # type: ignore[return-value]
