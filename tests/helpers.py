"""Shared test cases backed by mockfirestore."""

from __future__ import annotations

import unittest
from typing import Any
from unittest.mock import MagicMock, patch

from mockfirestore import MockFirestore

from contestbeaters import create_app
from tests.mock_utils import MockBatch, MockFirestoreBuilder, MockTransaction

SERVICE_MODULES = (
    "contestbeaters.contest.services",
    "contestbeaters.registration.services",
    "contestbeaters.user.services",
)

ADMIN_EMAIL = "admin@example.com"
CREATOR_EMAIL = "creator@example.com"
OTHER_CREATOR_EMAIL = "rival@example.com"
USER_EMAIL = "user@example.com"


class FirestoreTestCase(unittest.TestCase):
    """Runs the service layer against an in-memory Firestore."""

    def setUp(self) -> None:
        self.db = MockFirestore()
        self.db.batch = MagicMock(side_effect=lambda: MockBatch(self.db))
        self.db.transaction = MagicMock(side_effect=MockTransaction)
        self.mock_firestore_module = MockFirestoreBuilder.firestore_module(self.db)

        for module in SERVICE_MODULES:
            patcher = patch(f"{module}.firestore", new=self.mock_firestore_module)
            patcher.start()
            self.addCleanup(patcher.stop)

    def add_contest(self, contest_id: str, **fields: Any) -> str:
        data = {
            "email": CREATOR_EMAIL,
            "type": "Web",
            "status": "accepted",
            "participants": 0,
            "winner": None,
            "title": f"Contest {contest_id}",
            "deadline": "2030-01-01",
        }
        data.update(fields)
        self.db.collection("contests").document(contest_id).set(data)
        return contest_id

    def add_registration(self, registration_id: str, **fields: Any) -> str:
        data = {
            "contestId": "c1",
            "name": "Test User",
            "email": USER_EMAIL,
            "contestOwner": CREATOR_EMAIL,
            "deadline": "2030-01-01",
            "participated": False,
            "winner": False,
        }
        data.update(fields)
        self.db.collection("registrations").document(registration_id).set(data)
        return registration_id

    def add_user(self, user_id: str, email: str, **fields: Any) -> str:
        data = {"email": email, "name": user_id.title()}
        data.update(fields)
        self.db.collection("users").document(user_id).set(data)
        return user_id

    def contest(self, contest_id: str) -> dict[str, Any]:
        return self.db.collection("contests").document(contest_id).get().to_dict()

    def registration(self, registration_id: str) -> dict[str, Any]:
        return (
            self.db.collection("registrations").document(registration_id).get().to_dict()
        )


class AppTestCase(FirestoreTestCase):
    """Drives the HTTP API through the Flask test client."""

    def setUp(self) -> None:
        super().setUp()
        self.app = create_app(
            {"TESTING": True, "JWT_SECRET": "test-secret"}, db=self.db
        )
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()
        self.addCleanup(self.app_context.pop)

    def headers_for(self, email: str, role: str = "user") -> dict[str, str]:
        """Token header for ``email`` acting with ``role``."""
        token = self.app.extensions["token_service"].issue(
            {"email": email, "role": role}
        )
        return {"token": token}
