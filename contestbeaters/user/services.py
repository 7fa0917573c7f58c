"""Service layer for the user directory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from contestbeaters.core.constants import ROLE_CREATOR, ROLE_USER, ROLES, USERS_COLLECTION
from contestbeaters.core.types import UpdateResult, insert_result, update_result
from contestbeaters.errors import ValidationError
from contestbeaters.utils import doc_to_dict, docs_to_list, validate_doc_id

from .models import User

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.collection import CollectionReference

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "image")


class UserService:
    """Service class for user-related operations and Firestore interaction."""

    @staticmethod
    def _collection(db: Client) -> CollectionReference:
        return db.collection(USERS_COLLECTION)

    @staticmethod
    def _find(db: Client, email: str) -> DocumentSnapshot | None:
        docs = (
            UserService._collection(db)
            .where(filter=firestore.FieldFilter("email", "==", email))
            .limit(1)
            .stream()
        )
        for doc in docs:
            return cast("DocumentSnapshot", doc)
        return None

    @staticmethod
    def get_by_email(db: Client, email: str) -> User | None:
        """Fetch a user by email."""
        doc = UserService._find(db, email)
        if doc is None:
            return None
        return cast(User, doc_to_dict(doc))

    @staticmethod
    def list_excluding(db: Client, email: str) -> list[User]:
        """Fetch every user except ``email``."""
        users = docs_to_list(UserService._collection(db).stream())
        return cast(list[User], [u for u in users if u.get("email") != email])

    @staticmethod
    def list_creators(db: Client) -> list[User]:
        """Fetch the users with the creator role."""
        docs = (
            UserService._collection(db)
            .where(filter=firestore.FieldFilter("role", "==", ROLE_CREATOR))
            .stream()
        )
        return cast(list[User], docs_to_list(docs))

    @staticmethod
    def upsert_on_first_seen(db: Client, user: dict[str, Any]) -> dict[str, Any]:
        """Insert a user the first time their email is seen.

        An existing record is returned as stored and never overwritten.
        """
        email = user.get("email")
        if not email:
            raise ValidationError("email: This field is required.")

        existing = UserService.get_by_email(db, email)
        if existing is not None:
            return dict(existing)

        payload = {k: v for k, v in user.items() if k != "id" and v is not None}
        payload["role"] = payload.get("role") or ROLE_USER
        payload["createdAt"] = firestore.SERVER_TIMESTAMP
        _, ref = UserService._collection(db).add(payload)
        logger.info(f"User {email} added with role {payload['role']}")
        return dict(insert_result(str(ref.id)))

    @staticmethod
    def role_of(db: Client, email: str) -> str:
        """Return the stored role of ``email``, "user" when unknown."""
        user = UserService.get_by_email(db, email)
        if user is None:
            return ROLE_USER
        return user.get("role") or ROLE_USER

    @staticmethod
    def set_role(db: Client, user_id: str, role: str) -> UpdateResult:
        """Change a user's role."""
        if role not in ROLES:
            raise ValidationError(f"role: Must be one of {', '.join(ROLES)}.")
        validate_doc_id(user_id, "user id")
        ref = UserService._collection(db).document(user_id)
        doc = cast("DocumentSnapshot", ref.get())
        if not doc.exists:
            return update_result(0)
        if (doc.to_dict() or {}).get("role") == role:
            return update_result(1, 0)
        ref.update({"role": role})
        logger.info(f"User {user_id} role set to {role}")
        return update_result(1)

    @staticmethod
    def update_profile(
        db: Client, email: str, name: str | None = None, image: str | None = None
    ) -> UpdateResult:
        """Update a user's display name and picture."""
        update_data = {
            k: v for k, v in zip(PROFILE_FIELDS, (name, image)) if v is not None
        }
        if not update_data:
            raise ValidationError("No profile fields supplied.")

        doc = UserService._find(db, email)
        if doc is None:
            return update_result(0)
        UserService._collection(db).document(doc.id).update(update_data)
        return update_result(1)
