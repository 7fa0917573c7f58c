"""Per-route access policy table.

Every endpoint the app serves is listed here with the guard it must carry.
The decorators in :mod:`contestbeaters.auth.decorators` record what each view
actually enforces, and :func:`check_route_policies` refuses to start an app
whose views disagree with this table or are missing from it.

Ownership checks that need the stored resource (``owner`` below) run inside
the view body through ``require_owner_or_admin``; they are listed for
reference and not compared.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from contestbeaters.core.constants import ROLE_ADMIN, ROLE_CREATOR

if TYPE_CHECKING:
    from flask import Flask


@dataclass(frozen=True)
class RoutePolicy:
    """What a route requires before its handler runs."""

    authenticated: bool = False
    roles: tuple[str, ...] = ()
    self_only: bool = False


PUBLIC = RoutePolicy()
SELF = RoutePolicy(authenticated=True, self_only=True)
ADMIN = RoutePolicy(authenticated=True, roles=(ROLE_ADMIN,))
CREATOR_OR_ADMIN = RoutePolicy(authenticated=True, roles=(ROLE_CREATOR, ROLE_ADMIN))


ROUTE_POLICIES: dict[str, RoutePolicy] = {
    # Service
    "main.index": PUBLIC,
    "main.health": PUBLIC,
    "main.ready": PUBLIC,
    # Tokens
    "auth.issue_token": PUBLIC,
    # Contests
    "contest.list_contests": ADMIN,
    "contest.popular_contests": PUBLIC,
    "contest.search_contests": PUBLIC,
    "contest.accepted_contests": PUBLIC,
    "contest.add_contest": CREATOR_OR_ADMIN,
    "contest.creator_contests": SELF,
    "contest.get_contest": PUBLIC,
    "contest.delete_contest": CREATOR_OR_ADMIN,  # owner
    "contest.update_contest": CREATOR_OR_ADMIN,  # owner
    "contest.accept_contest": ADMIN,
    # Registrations
    "registration.register": PUBLIC,
    "registration.registered_contests": SELF,
    "registration.confirm_participation": CREATOR_OR_ADMIN,  # contest owner
    "registration.declare_winner": CREATOR_OR_ADMIN,  # contest owner
    "registration.winning_contests": SELF,
    "registration.owner_registrations": PUBLIC,
    # Users
    "user.list_users": ADMIN,
    "user.list_creators": PUBLIC,
    "user.add_user": PUBLIC,
    "user.user_role": PUBLIC,
    "user.update_role": ADMIN,
    "user.update_profile": SELF,
}


def check_route_policies(app: Flask) -> None:
    """Verify that every registered view declares the policy listed above."""
    for endpoint, view in app.view_functions.items():
        if endpoint == "static":
            continue
        declared = getattr(view, "route_policy", None)
        if declared is None:
            raise RuntimeError(f"Route '{endpoint}' declares no access policy.")
        expected = ROUTE_POLICIES.get(endpoint)
        if expected is None:
            raise RuntimeError(f"Route '{endpoint}' is missing from the policy table.")
        if declared != expected:
            raise RuntimeError(
                f"Route '{endpoint}' enforces {declared}, policy table says {expected}."
            )
