"""Service layer for contest data access."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from contestbeaters.core.constants import (
    ALL_TYPES,
    CONTESTS_COLLECTION,
    POPULAR_CONTESTS_LIMIT,
    STATUS_ACCEPTED,
    STATUS_PENDING,
    STATUSES,
)
from contestbeaters.core.types import (
    DeleteResult,
    InsertResult,
    UpdateResult,
    delete_result,
    insert_result,
    update_result,
)
from contestbeaters.errors import ValidationError
from contestbeaters.utils import doc_to_dict, docs_to_list, validate_doc_id

from .models import Contest

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.collection import CollectionReference
    from google.cloud.firestore_v1.document import DocumentReference

logger = logging.getLogger(__name__)

# Fields owned by the registration workflow or by Firestore itself.
PROTECTED_FIELDS = ("id", "participants", "winner")


def _check_status(fields: dict[str, Any]) -> None:
    if "status" in fields and fields["status"] not in STATUSES:
        raise ValidationError(f"status: must be one of {', '.join(STATUSES)}")


def capitalize(term: str) -> str:
    """Normalize a search term to the stored type vocabulary ("web" -> "Web")."""
    term = term.strip()
    return term[:1].upper() + term[1:].lower()


class ContestService:
    """Handles data access for contests."""

    @staticmethod
    def _collection(db: Client) -> CollectionReference:
        return db.collection(CONTESTS_COLLECTION)

    @staticmethod
    def list_all(db: Client) -> list[Contest]:
        """Fetch every contest."""
        docs = ContestService._collection(db).stream()
        return cast(list[Contest], docs_to_list(docs))

    @staticmethod
    def list_popular(db: Client, limit: int = POPULAR_CONTESTS_LIMIT) -> list[Contest]:
        """Fetch the contests with the most participants, most popular first."""
        docs = (
            ContestService._collection(db)
            .order_by("participants", direction=firestore.Query.DESCENDING)
            .limit(limit)
            .stream()
        )
        return cast(list[Contest], docs_to_list(docs))

    @staticmethod
    def search(db: Client, term: str) -> list[Contest]:
        """Exact-match lookup of contests by type.

        The term is normalized with :func:`capitalize`, so "web" finds
        contests of type "Web" but never "Website".
        """
        docs = (
            ContestService._collection(db)
            .where(filter=firestore.FieldFilter("type", "==", capitalize(term)))
            .stream()
        )
        return cast(list[Contest], docs_to_list(docs))

    @staticmethod
    def list_by_status(
        db: Client, contest_type: str = ALL_TYPES, status: str = STATUS_ACCEPTED
    ) -> list[Contest]:
        """Fetch contests in ``status``, optionally of one type ("All" means any)."""
        query = ContestService._collection(db).where(
            filter=firestore.FieldFilter("status", "==", status)
        )
        if contest_type != ALL_TYPES:
            query = query.where(filter=firestore.FieldFilter("type", "==", contest_type))
        return cast(list[Contest], docs_to_list(query.stream()))

    @staticmethod
    def list_by_creator(db: Client, email: str) -> list[Contest]:
        """Fetch the contests created by ``email``."""
        docs = (
            ContestService._collection(db)
            .where(filter=firestore.FieldFilter("email", "==", email))
            .stream()
        )
        return cast(list[Contest], docs_to_list(docs))

    @staticmethod
    def create(db: Client, contest: dict[str, Any]) -> InsertResult:
        """Insert a contest and return the insert acknowledgement.

        ``status`` is taken from the caller and only defaults to pending when
        absent.  The participant counter starts at zero and no winner is set.
        """
        payload = {k: v for k, v in contest.items() if k not in PROTECTED_FIELDS}
        payload.setdefault("status", STATUS_PENDING)
        _check_status(payload)
        payload["participants"] = 0
        payload["winner"] = None
        payload["createdAt"] = firestore.SERVER_TIMESTAMP

        _, ref = ContestService._collection(db).add(payload)
        logger.info(f"Contest {ref.id} created by {payload.get('email')}")
        return insert_result(str(ref.id))

    @staticmethod
    def _fetch(
        db: Client, contest_id: str
    ) -> tuple[DocumentReference, DocumentSnapshot]:
        validate_doc_id(contest_id, "contest id")
        ref = ContestService._collection(db).document(contest_id)
        return ref, cast("DocumentSnapshot", ref.get())

    @staticmethod
    def get_by_id(db: Client, contest_id: str) -> Contest | None:
        """Fetch a contest by its ID."""
        _, doc = ContestService._fetch(db, contest_id)
        if not doc.exists:
            return None
        return cast(Contest, doc_to_dict(doc))

    @staticmethod
    def delete_by_id(db: Client, contest_id: str) -> DeleteResult:
        """Delete a contest document."""
        ref, doc = ContestService._fetch(db, contest_id)
        if not doc.exists:
            return delete_result(0)
        ref.delete()
        logger.info(f"Contest {contest_id} deleted")
        return delete_result(1)

    @staticmethod
    def update_by_id(
        db: Client, contest_id: str, fields: dict[str, Any]
    ) -> UpdateResult:
        """Apply a partial update to a contest.

        The participant counter and the winner are never written here.
        """
        update_data = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
        if not update_data:
            raise ValidationError("No updatable contest fields supplied.")
        _check_status(update_data)

        ref, doc = ContestService._fetch(db, contest_id)
        if not doc.exists:
            return update_result(0)
        ref.update(update_data)
        return update_result(1)

    @staticmethod
    def set_status_accepted(db: Client, contest_id: str) -> UpdateResult:
        """Mark a contest as accepted."""
        ref, doc = ContestService._fetch(db, contest_id)
        if not doc.exists:
            return update_result(0)
        if (doc.to_dict() or {}).get("status") == STATUS_ACCEPTED:
            return update_result(1, 0)
        ref.update({"status": STATUS_ACCEPTED})
        logger.info(f"Contest {contest_id} accepted")
        return update_result(1)
