"""Common utilities for tests."""

from __future__ import annotations

import datetime
import unittest
import unittest.mock
from typing import Any, Iterator, Optional

from mockfirestore import CollectionReference, MockFirestore, Query
from mockfirestore.document import DocumentReference


class MockArrayUnion:
    def __init__(self, values: list[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


class MockArrayRemove:
    def __init__(self, values: list[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore to support FieldFilter and equality."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:  # noqa: E501
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where

    def doc_ref_eq(self: Any, other: Any) -> bool:
        if not isinstance(other, DocumentReference):
            return False
        return self._path == other._path

    if not hasattr(DocumentReference, "_orig_eq"):
        DocumentReference._orig_eq = DocumentReference.__eq__
        DocumentReference.__eq__ = doc_ref_eq
        DocumentReference.__hash__ = lambda self: hash(tuple(self._path))

    def patched_update(self: Any, data: dict[str, Any]) -> Any:
        sentinels = (MockArrayUnion, MockArrayRemove)
        if not any(isinstance(v, sentinels) for v in data.values()):
            return self._orig_update(data)

        current = self.get().to_dict() or {}
        resolved = {}
        for k, v in data.items():
            if isinstance(v, MockArrayUnion):
                merged = list(current.get(k) or [])
                merged.extend(item for item in v.values if item not in merged)
                resolved[k] = merged
            elif isinstance(v, MockArrayRemove):
                resolved[k] = [i for i in current.get(k) or [] if i not in v.values]
            else:
                resolved[k] = v
        return self._orig_update(resolved)

    if not hasattr(DocumentReference, "_orig_update"):
        DocumentReference._orig_update = DocumentReference.update
        DocumentReference.update = patched_update


class MockBatch:
    def __init__(self, db: Any) -> None:
        self.db = db
        self.writes: list[tuple[str, Any, Any]] = []
        self.commits = 0
        self.commit = unittest.mock.MagicMock(side_effect=self._real_commit)

    def update(self, ref: Any, data: Any) -> None:
        self.writes.append(("update", ref, data))

    def set(self, ref: Any, data: Any, merge: bool = False) -> None:
        self.writes.append(("set", ref, data))

    def delete(self, ref: Any) -> None:
        self.writes.append(("delete", ref, None))

    def _real_commit(self) -> None:
        # One instance serves every batch of a test, so each commit drains it.
        writes, self.writes = self.writes, []
        self.commits += 1
        for op, ref, data in writes:
            if op == "delete":
                ref.delete()
            elif op == "set":
                ref.set(data)
            else:
                ref.update(data)


def patch_array_sentinels(case: unittest.TestCase) -> None:
    """Route firestore.ArrayUnion/ArrayRemove to the mock sentinels."""
    for name, sentinel in (
        ("ArrayUnion", MockArrayUnion),
        ("ArrayRemove", MockArrayRemove),
    ):
        patcher = unittest.mock.patch(f"firebase_admin.firestore.{name}", sentinel)
        patcher.start()
        case.addCleanup(patcher.stop)


def make_db() -> MockFirestore:
    """Return a patched MockFirestore whose batches apply their writes."""
    patch_mockfirestore()
    db = MockFirestore()
    db.batch = unittest.mock.MagicMock(return_value=MockBatch(db))
    return db


def utc(*args: int) -> datetime.datetime:
    """Build an aware UTC datetime."""
    return datetime.datetime(*args, tzinfo=datetime.timezone.utc)


def add_user(db: Any, user_id: str, **fields: Any) -> dict[str, Any]:
    """Store a user document with complete profile defaults."""
    data = {
        "name": user_id.title(),
        "email": f"{user_id}@example.com",
        "role": "Member",
        "gender": "Male",
        "currentCourses": [],
        "isActiveInSchool": False,
        "isAdmin": False,
        **fields,
    }
    db.collection("users").document(user_id).set(data)
    return {**data, "id": user_id}


def add_group(
    db: Any,
    group_id: str,
    leaders: list[str],
    disciples: Optional[list[str]] = None,
    **fields: Any,
) -> dict[str, Any]:
    """Store a group document."""
    data = {
        "name": f"Grupo {group_id}",
        "address": "Av. Siempre Viva 742",
        "district": "Centro",
        "day": "Viernes",
        "time": "19:30",
        "leaders": leaders,
        "disciples": disciples or [],
        "invitationCode": group_id.upper()[:6].ljust(6, "X"),
        **fields,
    }
    db.collection("groups").document(group_id).set(data)
    return {**data, "id": group_id}


class ServiceTestCase(unittest.TestCase):
    """Base case running services against a fresh mock Firestore."""

    def setUp(self) -> None:
        self.db = make_db()
        patch_array_sentinels(self)


class AppTestCase(unittest.TestCase):
    """Base case driving the JSON API with a mock Firestore behind it."""

    user_id = "user1"

    def setUp(self) -> None:
        """Set up a test client and a mock environment."""
        self.db = make_db()
        patch_array_sentinels(self)

        patchers = {
            "init_app": unittest.mock.patch("firebase_admin.initialize_app"),
            "firestore_client": unittest.mock.patch(
                "firebase_admin.firestore.client", return_value=self.db
            ),
            "verify_id_token": unittest.mock.patch(
                "firebase_admin.auth.verify_id_token"
            ),
        }
        self.mocks = {name: p.start() for name, p in patchers.items()}
        for p in patchers.values():
            self.addCleanup(p.stop)

        from conexion import create_app

        self.app = create_app(
            {"TESTING": True, "WTF_CSRF_ENABLED": False, "SERVER_NAME": "localhost"}
        )
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()

    def tearDown(self) -> None:
        """Tear down the test client."""
        self.app_context.pop()

    def _set_session_user(self, user_id: Optional[str] = None) -> None:
        """Set a logged-in user in the session."""
        with self.client.session_transaction() as sess:
            sess["user_id"] = user_id or self.user_id
