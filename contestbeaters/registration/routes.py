"""Routes for the registration blueprint."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request

from contestbeaters.auth.decorators import (
    public,
    require_owner_or_admin,
    role_required,
    self_only,
    token_required,
)
from contestbeaters.contest.services import ContestService
from contestbeaters.core.constants import ROLE_ADMIN, ROLE_CREATOR
from contestbeaters.errors import NotFoundError
from contestbeaters.store import get_db

from . import bp
from .forms import RegistrationForm, WinnerForm
from .services import RegistrationService


@bp.route("/register", methods=["POST"])
@public
def register() -> Any:
    """Register for a contest."""
    form = RegistrationForm.from_json()
    result = RegistrationService.register(
        get_db(),
        contest_id=form.contest_id.data,
        name=form.name.data,
        email=form.email.data,
        contest=form.contest.data or None,
        contest_owner=form.contest_owner.data or None,
        deadline=form.deadline.data or None,
    )
    return jsonify(result)


@bp.route("/registered-contests/<string:email>", methods=["GET"])
@token_required
@self_only("email")
def registered_contests(email: str) -> Any:
    """List the caller's registrations, latest deadline first with ?sort=true."""
    sort = request.args.get("sort", "").lower() == "true"
    return jsonify(RegistrationService.list_for_registrant(get_db(), email, sort=sort))


@bp.route("/registered-contest/update-status/<string:registration_id>", methods=["PATCH"])
@token_required
@role_required(ROLE_CREATOR, ROLE_ADMIN)
def confirm_participation(registration_id: str) -> Any:
    """Mark a registrant as having taken part."""
    db = get_db()
    registration = RegistrationService.get_by_id(db, registration_id)
    if registration is None:
        raise NotFoundError("Registration not found.")
    require_owner_or_admin(registration.get("contestOwner"))
    return jsonify(RegistrationService.confirm_participation(db, registration_id))


@bp.route("/contest/winner", methods=["PATCH"])
@token_required
@role_required(ROLE_CREATOR, ROLE_ADMIN)
def declare_winner() -> Any:
    """Declare the winner of one of the caller's contests."""
    form = WinnerForm.from_json()
    db = get_db()
    contest = ContestService.get_by_id(db, form.contest_id.data)
    if contest is None:
        raise NotFoundError("Contest not found.")
    require_owner_or_admin(contest.get("email"))
    return jsonify(
        RegistrationService.declare_winner(db, form.contest_id.data, form.user_id.data)
    )


@bp.route("/winning-contests/<string:email>", methods=["GET"])
@token_required
@self_only("email")
def winning_contests(email: str) -> Any:
    """List the contests the caller has won."""
    return jsonify(RegistrationService.list_winning_for(get_db(), email))


@bp.route("/registrations/<string:email>", methods=["GET"])
@public
def owner_registrations(email: str) -> Any:
    """List registrations for contests created by ``email``."""
    return jsonify(RegistrationService.list_for_owner(get_db(), email))
