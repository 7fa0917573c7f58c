"""Data models for the contest blueprint."""

from __future__ import annotations

from typing import Any

from contestbeaters.core.types import FirestoreDocument


class Contest(FirestoreDocument, total=False):
    """A contest document in Firestore."""

    email: str
    type: str
    status: str
    participants: int
    winner: str | None
    # Free-form metadata supplied by the creator
    title: str
    name: str
    image: str
    description: str
    instruction: str
    deadline: str
    price: Any
    prize: Any
