"""Data models for the registration blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from contestbeaters.core.types import FirestoreDocument


class Registration(FirestoreDocument, total=False):
    """A contest registration document in Firestore.

    A registration is identified in the workflow by ``(contestId, email)``.
    ``contest``, ``contestOwner`` and ``deadline`` are copied from the contest
    at registration time.
    """

    contestId: str
    name: str
    email: str
    contest: Any
    contestOwner: str
    deadline: Any
    participated: bool
    winner: bool


class WinnerResult(TypedDict):
    """Soft-failure body of the winner declaration."""

    status: str


class ReconcileReport(TypedDict):
    """Changes applied by one reconciliation run."""

    contests_checked: int
    participants_fixed: int
    winners_flagged: int
    orphan_winners: int
    writes: int
