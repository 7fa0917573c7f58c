"""Service layer for the registration, participation and winner workflow.

Contests and registrations live in separate collections:

* ``register`` inserts the registration first and only then increments the
  contest's participant counter with an atomic ``Increment``.  A failure
  between the two writes leaves the counter short until ``reconcile`` runs;
  nothing is rolled back.
* ``declare_winner`` re-reads the contest and writes both winner fields inside
  one Firestore transaction, so concurrent declarations cannot both win.
"""

from __future__ import annotations

import datetime
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from contestbeaters.core.batch import BatchProcessor
from contestbeaters.core.constants import (
    CONTESTS_COLLECTION,
    REGISTRATIONS_COLLECTION,
    WINNER_FAILURE,
    WINNER_SUCCESS,
)
from contestbeaters.core.types import UpdateResult, update_result
from contestbeaters.errors import (
    DuplicateResourceError,
    NotFoundError,
    ValidationError,
)
from contestbeaters.utils import doc_to_dict, docs_to_list, validate_doc_id

from .models import ReconcileReport, Registration, WinnerResult

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.collection import CollectionReference
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction

logger = logging.getLogger(__name__)


def _deadline_sort_key(registration: dict[str, Any]) -> tuple[int, float]:
    """Sort key for deadlines; values that cannot be read as dates sort last."""
    value = registration.get("deadline")
    if isinstance(value, datetime.datetime):
        moment = value
    elif isinstance(value, datetime.date):
        moment = datetime.datetime.combine(value, datetime.time.min)
    elif isinstance(value, str):
        try:
            moment = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return (0, 0.0)
    else:
        return (0, 0.0)

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return (1, moment.timestamp())


class RegistrationService:
    """Drives registration, participation and winner declaration."""

    @staticmethod
    def _collection(db: Client) -> CollectionReference:
        return db.collection(REGISTRATIONS_COLLECTION)

    @staticmethod
    def find(db: Client, contest_id: str, email: str) -> DocumentSnapshot | None:
        """Return the registration of ``email`` for a contest, if any."""
        docs = (
            RegistrationService._collection(db)
            .where(filter=firestore.FieldFilter("contestId", "==", contest_id))
            .where(filter=firestore.FieldFilter("email", "==", email))
            .limit(1)
            .stream()
        )
        for doc in docs:
            return cast("DocumentSnapshot", doc)
        return None

    @staticmethod
    def register(  # noqa: PLR0913
        db: Client,
        contest_id: str,
        name: str,
        email: str,
        contest: Any = None,
        contest_owner: str | None = None,
        deadline: Any = None,
    ) -> dict[str, Any]:
        """Register ``email`` for a contest and count them as a participant.

        The registration is inserted first; the contest counter is incremented
        only once the insert returned.  If the increment fails the
        registration stays and the error propagates.
        """
        validate_doc_id(contest_id, "contest id")
        contest_ref = db.collection(CONTESTS_COLLECTION).document(contest_id)
        contest_doc = cast("DocumentSnapshot", contest_ref.get())
        if not contest_doc.exists:
            raise NotFoundError("Contest not found.")

        if RegistrationService.find(db, contest_id, email) is not None:
            raise DuplicateResourceError(f"{email} is already registered for this contest.")

        contest_data = contest_doc.to_dict() or {}
        payload = {
            "contestId": contest_id,
            "name": name,
            "email": email,
            "contest": contest if contest is not None else contest_data.get("title"),
            "contestOwner": contest_owner or contest_data.get("email"),
            "deadline": deadline if deadline is not None else contest_data.get("deadline"),
            "participated": False,
            "winner": False,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        _, reg_ref = RegistrationService._collection(db).add(payload)
        logger.info(f"Registration {reg_ref.id}: {email} joined contest {contest_id}")

        try:
            contest_ref.update({"participants": firestore.Increment(1)})
        except Exception as e:
            logger.error(
                f"Registration {reg_ref.id} stored but contest {contest_id} "
                f"participant count was not incremented: {e}"
            )
            raise

        return {**update_result(1), "insertedId": str(reg_ref.id)}

    @staticmethod
    def get_by_id(db: Client, registration_id: str) -> Registration | None:
        """Fetch a registration by its ID."""
        validate_doc_id(registration_id, "registration id")
        doc = cast(
            "DocumentSnapshot",
            RegistrationService._collection(db).document(registration_id).get(),
        )
        if not doc.exists:
            return None
        return cast(Registration, doc_to_dict(doc))

    @staticmethod
    def confirm_participation(db: Client, registration_id: str) -> UpdateResult:
        """Mark a registrant as having participated. Re-running is a no-op."""
        validate_doc_id(registration_id, "registration id")
        ref = RegistrationService._collection(db).document(registration_id)
        doc = cast("DocumentSnapshot", ref.get())
        if not doc.exists:
            return update_result(0)
        if (doc.to_dict() or {}).get("participated"):
            return update_result(1, 0)
        ref.update({"participated": True})
        return update_result(1)

    @staticmethod
    def declare_winner(db: Client, contest_id: str, user_id: str) -> WinnerResult:
        """Declare the winner of a contest, at most once.

        ``user_id`` is the winner's email, the unique key of a user; the
        winning registration is the one keyed by ``(contest_id, user_id)``.

        A contest that already has a winner is left untouched and the call
        reports ``{"status": "failure"}`` instead of raising.
        """
        validate_doc_id(contest_id, "contest id")
        if not user_id:
            raise ValidationError("A winner must be given.")

        contest_ref = db.collection(CONTESTS_COLLECTION).document(contest_id)
        contest_doc = cast("DocumentSnapshot", contest_ref.get())
        if not contest_doc.exists:
            raise NotFoundError("Contest not found.")

        current = (contest_doc.to_dict() or {}).get("winner")
        if current:
            logger.warning(
                f"Contest {contest_id} already won by {current}; rejected {user_id}"
            )
            return {"status": WINNER_FAILURE}

        registration = RegistrationService.find(db, contest_id, user_id)
        if registration is None:
            raise NotFoundError(f"{user_id} is not registered for this contest.")

        registration_ref = RegistrationService._collection(db).document(
            registration.id
        )
        claim = firestore.transactional(RegistrationService._claim_winner)
        if not claim(db.transaction(), contest_ref, registration_ref, user_id):
            logger.warning(
                f"Contest {contest_id} was won concurrently; rejected {user_id}"
            )
            return {"status": WINNER_FAILURE}

        logger.info(f"Contest {contest_id} winner declared: {user_id}")
        return {"status": WINNER_SUCCESS}

    @staticmethod
    def _claim_winner(
        transaction: Transaction,
        contest_ref: DocumentReference,
        registration_ref: DocumentReference,
        user_id: str,
    ) -> bool:
        """Set the winner unless one is already stored. Runs in a transaction."""
        snapshot = cast("DocumentSnapshot", contest_ref.get(transaction=transaction))
        if not snapshot.exists:
            raise NotFoundError("Contest not found.")
        if (snapshot.to_dict() or {}).get("winner"):
            return False

        transaction.update(contest_ref, {"winner": user_id})
        transaction.update(registration_ref, {"winner": True})
        return True

    @staticmethod
    def list_winning_for(db: Client, email: str) -> list[Registration]:
        """Fetch the registrations ``email`` has won."""
        docs = (
            RegistrationService._collection(db)
            .where(filter=firestore.FieldFilter("email", "==", email))
            .where(filter=firestore.FieldFilter("winner", "==", True))
            .stream()
        )
        return cast(list[Registration], docs_to_list(docs))

    @staticmethod
    def list_for_registrant(
        db: Client, email: str, sort: bool = False
    ) -> list[Registration]:
        """Fetch the registrations of ``email``, latest deadline first if ``sort``."""
        docs = (
            RegistrationService._collection(db)
            .where(filter=firestore.FieldFilter("email", "==", email))
            .stream()
        )
        registrations = docs_to_list(docs)
        if sort:
            registrations.sort(key=_deadline_sort_key, reverse=True)
        return cast(list[Registration], registrations)

    @staticmethod
    def list_for_owner(db: Client, owner_email: str) -> list[Registration]:
        """Fetch the registrations for contests created by ``owner_email``."""
        docs = (
            RegistrationService._collection(db)
            .where(filter=firestore.FieldFilter("contestOwner", "==", owner_email))
            .stream()
        )
        return cast(list[Registration], docs_to_list(docs))

    @staticmethod
    def reconcile(db: Client) -> ReconcileReport:
        """Bring contests and registrations back into agreement.

        * ``participants`` is reset to the number of registrations when the
          two differ (a lost increment after a stored registration).
        * A contest with a winner gets the matching registration flagged
          (winners stored by hand or before the flag was written with them).

        Running it twice in a row changes nothing the second time.
        """
        report: ReconcileReport = {
            "contests_checked": 0,
            "participants_fixed": 0,
            "winners_flagged": 0,
            "orphan_winners": 0,
            "writes": 0,
        }

        by_contest: dict[str, list[DocumentSnapshot]] = defaultdict(list)
        for reg_doc in RegistrationService._collection(db).stream():
            reg_data = reg_doc.to_dict() or {}
            if reg_data.get("contestId"):
                by_contest[reg_data["contestId"]].append(reg_doc)

        writer = BatchProcessor(db)
        contests = db.collection(CONTESTS_COLLECTION)
        for contest_doc in contests.stream():
            report["contests_checked"] += 1
            data = contest_doc.to_dict() or {}
            registrations = by_contest.get(contest_doc.id, [])

            if data.get("participants", 0) != len(registrations):
                logger.info(
                    f"Contest {contest_doc.id}: participants "
                    f"{data.get('participants', 0)} -> {len(registrations)}"
                )
                writer.update(
                    contests.document(contest_doc.id),
                    {"participants": len(registrations)},
                )
                report["participants_fixed"] += 1

            winner = data.get("winner")
            if not winner:
                continue
            winning = [
                r for r in registrations if (r.to_dict() or {}).get("email") == winner
            ]
            if not winning:
                logger.warning(
                    f"Contest {contest_doc.id} names winner {winner} "
                    "but has no matching registration"
                )
                report["orphan_winners"] += 1
                continue
            for reg_doc in winning:
                if not (reg_doc.to_dict() or {}).get("winner"):
                    writer.update(
                        RegistrationService._collection(db).document(reg_doc.id),
                        {"winner": True},
                    )
                    report["winners_flagged"] += 1

        writer.commit()
        report["writes"] = writer.total
        return report
