"""Core module for the contestbeaters application."""

from .types import DeleteResult, FirestoreDocument, InsertResult, UpdateResult

__all__ = ["FirestoreDocument", "InsertResult", "UpdateResult", "DeleteResult"]
