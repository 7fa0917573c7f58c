"""Core data types for the contestbeaters application."""

from __future__ import annotations

from typing import Any, TypedDict


class _FirestoreDocumentBase(TypedDict):
    id: str


class FirestoreDocument(_FirestoreDocumentBase, total=False):
    """Generic Firestore document structure."""

    createdAt: Any


class InsertResult(TypedDict):
    """Acknowledgement returned after inserting a document."""

    acknowledged: bool
    insertedId: str


class UpdateResult(TypedDict):
    """Acknowledgement returned after updating a document."""

    acknowledged: bool
    matchedCount: int
    modifiedCount: int


class DeleteResult(TypedDict):
    """Acknowledgement returned after deleting a document."""

    acknowledged: bool
    deletedCount: int


def insert_result(doc_id: str) -> InsertResult:
    """Build an insert acknowledgement."""
    return {"acknowledged": True, "insertedId": doc_id}


def update_result(matched: int, modified: int | None = None) -> UpdateResult:
    """Build an update acknowledgement."""
    if modified is None:
        modified = matched
    return {"acknowledged": True, "matchedCount": matched, "modifiedCount": modified}


def delete_result(deleted: int) -> DeleteResult:
    """Build a delete acknowledgement."""
    return {"acknowledged": True, "deletedCount": deleted}
