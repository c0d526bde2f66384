"""Firestore access helpers shared by the service layer."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from conexion.errors import AuthenticationError, NotFoundError

from .constants import FIRESTORE_BATCH_LIMIT, USERS_COLLECTION

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference

    from conexion.user.models import PublicUser


def get_db() -> Client:
    """Return the Firestore client of the initialized Firebase app."""
    return firestore.client()


def utcnow() -> datetime.datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def snapshot_to_dict(snapshot: DocumentSnapshot) -> dict[str, Any] | None:
    """Convert a snapshot to a dict carrying its document id, or None."""
    if not snapshot.exists:
        return None
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    return data


def get_document(
    db: Client, collection: str, doc_id: str | None
) -> dict[str, Any] | None:
    """Fetch a single document by id."""
    if not doc_id:
        return None
    snapshot = db.collection(collection).document(doc_id).get()
    return snapshot_to_dict(cast("DocumentSnapshot", snapshot))


def get_documents(
    db: Client, collection: str, doc_ids: list[str]
) -> list[dict[str, Any]]:
    """Fetch documents one by one, preserving order and skipping missing ones."""
    documents = []
    for doc_id in doc_ids:
        doc = get_document(db, collection, doc_id)
        if doc is not None:
            documents.append(doc)
    return documents


def query_documents(
    db: Client, collection: str, field: str, op: str, value: Any
) -> list[dict[str, Any]]:
    """Run a single-field query and return the matching documents."""
    query = db.collection(collection).where(
        filter=firestore.FieldFilter(field, op, value)
    )
    return [
        data
        for data in (snapshot_to_dict(doc) for doc in query.stream())
        if data is not None
    ]


def require_authenticated(user_id: str | None) -> str:
    """Fail unless the request carries a caller identity."""
    if not user_id:
        raise AuthenticationError()
    return user_id


def require_caller(db: Client, user_id: str | None) -> dict[str, Any]:
    """Resolve the calling user's document or fail."""
    require_authenticated(user_id)
    user = get_document(db, USERS_COLLECTION, user_id)
    if user is None:
        raise NotFoundError("Usuario no encontrado")
    return user


def public_user(user: dict[str, Any] | None) -> PublicUser | None:
    """Reduce a user document to the fields other members may see."""
    if user is None:
        return None
    return {"id": user["id"], "name": user.get("name"), "email": user.get("email")}


def commit_writes(
    db: Client, writes: list[tuple[str, DocumentReference, dict[str, Any] | None]]
) -> None:
    """Commit ("set" | "update" | "delete", ref, data) writes in batches.

    Each batch is atomic; a write list longer than the batch limit is split
    into sequential commits.
    """
    for start in range(0, len(writes), FIRESTORE_BATCH_LIMIT):
        batch = db.batch()
        for op, ref, data in writes[start : start + FIRESTORE_BATCH_LIMIT]:
            if op == "set":
                batch.set(ref, data)
            elif op == "update":
                batch.update(ref, data)
            elif op == "delete":
                batch.delete(ref)
            else:
                raise ValueError(f"Unknown write operation: {op}")
        batch.commit()
