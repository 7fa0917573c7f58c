"""Tests for the registration workflow."""

from __future__ import annotations

import unittest
from typing import Any
from unittest.mock import MagicMock, patch

from contestbeaters.core.batch import BatchProcessor
from contestbeaters.errors import DuplicateResourceError, NotFoundError
from contestbeaters.registration.services import RegistrationService
from tests.helpers import CREATOR_EMAIL, USER_EMAIL, FirestoreTestCase

OTHER_EMAIL = "other@example.com"


class RegisterTestCase(FirestoreTestCase):
    """Test case for registering for a contest."""

    def setUp(self) -> None:
        """Set up a contest to register for."""
        super().setUp()
        self.add_contest("c1", deadline="2030-06-30", title="Logo Design")

    def test_register_increments_participants(self) -> None:
        """Test that a registration is stored and counted."""
        result = RegistrationService.register(self.db, "c1", "User", USER_EMAIL)

        self.assertTrue(result["acknowledged"])
        self.assertEqual(result["modifiedCount"], 1)
        self.assertEqual(self.contest("c1")["participants"], 1)

        stored = self.registration(result["insertedId"])
        self.assertEqual(stored["contestId"], "c1")
        self.assertFalse(stored["participated"])
        self.assertFalse(stored["winner"])

    def test_register_copies_contest_details(self) -> None:
        """Test that owner, deadline and title default to the contest's."""
        result = RegistrationService.register(self.db, "c1", "User", USER_EMAIL)
        stored = self.registration(result["insertedId"])
        self.assertEqual(stored["contestOwner"], CREATOR_EMAIL)
        self.assertEqual(stored["deadline"], "2030-06-30")
        self.assertEqual(stored["contest"], "Logo Design")

    def test_one_increment_per_registration(self) -> None:
        """Test that each registration adds exactly one participant."""
        for i in range(3):
            RegistrationService.register(self.db, "c1", f"User {i}", f"u{i}@example.com")
        self.assertEqual(self.contest("c1")["participants"], 3)

    def test_register_twice_is_rejected(self) -> None:
        """Test that a second registration for the same contest is refused."""
        RegistrationService.register(self.db, "c1", "User", USER_EMAIL)
        with self.assertRaises(DuplicateResourceError):
            RegistrationService.register(self.db, "c1", "User", USER_EMAIL)
        self.assertEqual(self.contest("c1")["participants"], 1)

    def test_register_for_missing_contest(self) -> None:
        """Test that registering for an unknown contest writes nothing."""
        with self.assertRaises(NotFoundError):
            RegistrationService.register(self.db, "nope", "User", USER_EMAIL)
        self.assertEqual(list(self.db.collection("registrations").stream()), [])

    def test_failed_increment_keeps_registration(self) -> None:
        """Test that a lost increment leaves the registration for reconcile."""
        self.mock_firestore_module.Increment = MagicMock(
            side_effect=RuntimeError("store down")
        )
        with self.assertLogs("contestbeaters.registration.services", level="ERROR"):
            with self.assertRaises(RuntimeError):
                RegistrationService.register(self.db, "c1", "User", USER_EMAIL)

        self.assertIsNotNone(RegistrationService.find(self.db, "c1", USER_EMAIL))
        self.assertEqual(self.contest("c1")["participants"], 0)

        report = RegistrationService.reconcile(self.db)
        self.assertEqual(report["participants_fixed"], 1)
        self.assertEqual(self.contest("c1")["participants"], 1)


class WinnerTestCase(FirestoreTestCase):
    """Test case for declaring a contest winner."""

    def setUp(self) -> None:
        """Set up a contest with two registrants."""
        super().setUp()
        self.add_contest("c1")
        RegistrationService.register(self.db, "c1", "User", USER_EMAIL)
        RegistrationService.register(self.db, "c1", "Other", OTHER_EMAIL)

    def winners(self) -> list[str]:
        docs = (
            self.db.collection("registrations").where("winner", "==", True).stream()
        )
        return [doc.to_dict()["email"] for doc in docs]

    def test_scenario(self) -> None:
        """Test that the first declaration wins and the second is refused."""
        self.assertEqual(self.contest("c1")["participants"], 2)

        result = RegistrationService.declare_winner(self.db, "c1", USER_EMAIL)
        self.assertEqual(result, {"status": "success"})
        self.assertEqual(self.contest("c1")["winner"], USER_EMAIL)

        winning = RegistrationService.find(self.db, "c1", USER_EMAIL)
        self.assertTrue(winning.to_dict()["winner"])

        result = RegistrationService.declare_winner(self.db, "c1", OTHER_EMAIL)
        self.assertEqual(result, {"status": "failure"})
        self.assertEqual(self.contest("c1")["winner"], USER_EMAIL)
        other = RegistrationService.find(self.db, "c1", OTHER_EMAIL)
        self.assertFalse(other.to_dict()["winner"])

    def test_rejection_is_stable(self) -> None:
        """Test that repeated rejected declarations change nothing."""
        RegistrationService.declare_winner(self.db, "c1", USER_EMAIL)
        for _ in range(2):
            result = RegistrationService.declare_winner(self.db, "c1", OTHER_EMAIL)
            self.assertEqual(result["status"], "failure")
        self.assertEqual(self.contest("c1")["winner"], USER_EMAIL)

    def test_interleaved_declarations_have_one_winner(self) -> None:
        """Test that a declaration landing mid-transaction makes the other fail."""
        claim_winner = RegistrationService._claim_winner
        raced: list[Any] = []

        def racing_claim(*args: Any) -> bool:
            claimed = claim_winner(*args)
            if racing.call_count == 1:
                # A second owner request commits between our read and commit
                raced.append(
                    RegistrationService.declare_winner(self.db, "c1", OTHER_EMAIL)
                )
            return claimed

        with patch.object(
            RegistrationService, "_claim_winner", side_effect=racing_claim
        ) as racing:
            result = RegistrationService.declare_winner(self.db, "c1", USER_EMAIL)

        self.assertEqual(raced, [{"status": "success"}])
        self.assertEqual(result, {"status": "failure"})
        self.assertEqual(self.contest("c1")["winner"], OTHER_EMAIL)
        self.assertEqual(self.winners(), [OTHER_EMAIL])

    def test_claim_winner_reads_and_writes_through_transaction(self) -> None:
        """Test that the claim reads and writes with the transaction."""
        transaction = MagicMock()
        contest_ref = MagicMock()
        registration_ref = MagicMock()
        contest_ref.get.return_value.exists = True
        contest_ref.get.return_value.to_dict.return_value = {"winner": None}

        claimed = RegistrationService._claim_winner(
            transaction, contest_ref, registration_ref, USER_EMAIL
        )

        self.assertTrue(claimed)
        contest_ref.get.assert_called_with(transaction=transaction)
        transaction.update.assert_any_call(contest_ref, {"winner": USER_EMAIL})
        transaction.update.assert_any_call(registration_ref, {"winner": True})
        contest_ref.update.assert_not_called()
        registration_ref.update.assert_not_called()

    def test_claim_winner_refuses_won_contest(self) -> None:
        """Test that the claim writes nothing once a winner is stored."""
        transaction = MagicMock()
        contest_ref = MagicMock()
        contest_ref.get.return_value.exists = True
        contest_ref.get.return_value.to_dict.return_value = {"winner": OTHER_EMAIL}

        claimed = RegistrationService._claim_winner(
            transaction, contest_ref, MagicMock(), USER_EMAIL
        )

        self.assertFalse(claimed)
        transaction.update.assert_not_called()

    def test_unregistered_winner_writes_nothing(self) -> None:
        """Test that a winner without a registration is refused before writing."""
        with self.assertRaises(NotFoundError):
            RegistrationService.declare_winner(self.db, "c1", "stranger@example.com")
        self.assertIsNone(self.contest("c1")["winner"])

    def test_missing_contest(self) -> None:
        """Test that declaring a winner for an unknown contest raises."""
        with self.assertRaises(NotFoundError):
            RegistrationService.declare_winner(self.db, "nope", USER_EMAIL)

    def test_list_winning_for(self) -> None:
        """Test listing the registrations a user has won."""
        RegistrationService.declare_winner(self.db, "c1", USER_EMAIL)
        self.assertEqual(len(RegistrationService.list_winning_for(self.db, USER_EMAIL)), 1)
        self.assertEqual(RegistrationService.list_winning_for(self.db, OTHER_EMAIL), [])


class ParticipationTestCase(FirestoreTestCase):
    """Test case for confirming participation."""

    def test_confirm_participation(self) -> None:
        """Test that confirmation is idempotent and reports matches."""
        self.add_registration("r1")

        first = RegistrationService.confirm_participation(self.db, "r1")
        self.assertEqual((first["matchedCount"], first["modifiedCount"]), (1, 1))
        self.assertTrue(self.registration("r1")["participated"])

        again = RegistrationService.confirm_participation(self.db, "r1")
        self.assertEqual((again["matchedCount"], again["modifiedCount"]), (1, 0))

        missing = RegistrationService.confirm_participation(self.db, "nope")
        self.assertEqual(missing["matchedCount"], 0)


class ListingTestCase(FirestoreTestCase):
    """Test case for the registration listings."""

    def setUp(self) -> None:
        """Set up registrations with assorted deadlines."""
        super().setUp()
        self.add_registration("r1", deadline="2024-05-01")
        self.add_registration("r2", deadline="2024-07-01T12:00:00Z")
        self.add_registration("r3", deadline="someday")
        self.add_registration("r4", deadline="2024-06-01", contestOwner="x@example.com")
        self.add_registration("r5", email=OTHER_EMAIL)

    def test_list_for_registrant(self) -> None:
        """Test that only the registrant's registrations are listed."""
        ids = {r["id"] for r in RegistrationService.list_for_registrant(self.db, USER_EMAIL)}
        self.assertEqual(ids, {"r1", "r2", "r3", "r4"})

    def test_list_for_registrant_sorted(self) -> None:
        """Test latest deadline first, unreadable deadlines last."""
        results = RegistrationService.list_for_registrant(self.db, USER_EMAIL, sort=True)
        self.assertEqual([r["id"] for r in results], ["r2", "r4", "r1", "r3"])

    def test_list_for_owner(self) -> None:
        """Test listing registrations by contest owner."""
        results = RegistrationService.list_for_owner(self.db, "x@example.com")
        self.assertEqual([r["id"] for r in results], ["r4"])

    def test_get_by_id(self) -> None:
        """Test fetching a registration by id."""
        self.assertEqual(RegistrationService.get_by_id(self.db, "r1")["id"], "r1")
        self.assertIsNone(RegistrationService.get_by_id(self.db, "nope"))


class ReconcileTestCase(FirestoreTestCase):
    """Test case for reconciling contests with their registrations."""

    def test_reconcile_repairs_and_is_idempotent(self) -> None:
        """Test that counts and winner flags are repaired once."""
        self.add_contest("c1", participants=5, winner=USER_EMAIL)
        self.add_contest("c2", participants=0)
        self.add_contest("c3", winner="ghost@example.com", participants=0)
        self.add_registration("r1", contestId="c1")
        self.add_registration("r2", contestId="c1", email=OTHER_EMAIL)
        self.add_registration("r3", contestId="c2")

        report = RegistrationService.reconcile(self.db)
        self.assertEqual(
            report,
            {
                "contests_checked": 3,
                "participants_fixed": 2,
                "winners_flagged": 1,
                "orphan_winners": 1,
                "writes": 3,
            },
        )
        self.assertEqual(self.contest("c1")["participants"], 2)
        self.assertEqual(self.contest("c2")["participants"], 1)
        self.assertTrue(self.registration("r1")["winner"])
        self.assertFalse(self.registration("r2")["winner"])

        again = RegistrationService.reconcile(self.db)
        self.assertEqual(again["participants_fixed"], 0)
        self.assertEqual(again["winners_flagged"], 0)
        self.assertEqual(again["writes"], 0)


class BatchProcessorTestCase(unittest.TestCase):
    """Test case for the batched writer."""

    def test_flushes_at_limit(self) -> None:
        """Test that batches commit at the limit and once more at the end."""
        db = MagicMock()
        writer = BatchProcessor(db, limit=2)
        for i in range(5):
            writer.update(f"ref{i}", {"n": i})
        self.assertEqual(db.batch.return_value.commit.call_count, 2)

        writer.commit()
        self.assertEqual(db.batch.return_value.commit.call_count, 3)
        self.assertEqual(writer.total, 5)

        writer.commit()
        self.assertEqual(db.batch.return_value.commit.call_count, 3)
