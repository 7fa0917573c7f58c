"""
Repair script for contests and registrations left disagreeing by interrupted writes.

Resets each contest's participant count to its number of registrations and
flags the registration of every declared winner.  Safe to run repeatedly.
"""

from __future__ import annotations

import sys

from contestbeaters import create_app
from contestbeaters.registration.services import RegistrationService
from contestbeaters.store import get_db


def main() -> None:
    """Main entry point for the reconcile script."""
    app = create_app()
    try:
        with app.app_context():
            report = RegistrationService.reconcile(get_db())

        print(f"Checked {report['contests_checked']} contests.")
        print(f"  Participant counts fixed: {report['participants_fixed']}")
        print(f"  Winner registrations flagged: {report['winners_flagged']}")
        print(f"  Winners without a registration: {report['orphan_winners']}")
        print(f"  Documents written: {report['writes']}")
        print("\nReconcile completed successfully.")
    except Exception as e:
        print(f"\nAn error occurred during reconcile: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
