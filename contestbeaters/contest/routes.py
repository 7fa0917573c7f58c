"""Routes for the contest blueprint."""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify, request

from contestbeaters.auth.decorators import (
    current_principal,
    public,
    require_owner_or_admin,
    role_required,
    self_only,
    token_required,
)
from contestbeaters.core.constants import (
    POPULAR_CONTESTS_LIMIT,
    ROLE_ADMIN,
    ROLE_CREATOR,
    STATUS_PENDING,
)
from contestbeaters.errors import NotFoundError, ValidationError
from contestbeaters.store import get_db

from . import bp
from .services import ContestService


def _json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def _owned_contest(contest_id: str) -> dict[str, Any]:
    """Load a contest and check the caller may change it."""
    contest = ContestService.get_by_id(get_db(), contest_id)
    if contest is None:
        raise NotFoundError("Contest not found.")
    require_owner_or_admin(contest.get("email"))
    return dict(contest)


@bp.route("/contests", methods=["GET"])
@token_required
@role_required(ROLE_ADMIN)
def list_contests() -> Any:
    """List every contest."""
    return jsonify(ContestService.list_all(get_db()))


@bp.route("/contests/popular", methods=["GET"])
@public
def popular_contests() -> Any:
    """List the most popular contests by participant count."""
    limit = current_app.config.get("POPULAR_LIMIT", POPULAR_CONTESTS_LIMIT)
    return jsonify(ContestService.list_popular(get_db(), limit=int(limit)))


@bp.route("/contests/search/<string:term>", methods=["GET"])
@public
def search_contests(term: str) -> Any:
    """Find contests whose type matches the search term exactly."""
    return jsonify(ContestService.search(get_db(), term))


@bp.route("/contests/accepted/<string:contest_type>", methods=["GET"])
@public
def accepted_contests(contest_type: str) -> Any:
    """List accepted contests, filtered by type unless the type is "All"."""
    return jsonify(ContestService.list_by_status(get_db(), contest_type))


@bp.route("/add-contest", methods=["POST"])
@token_required
@role_required(ROLE_CREATOR, ROLE_ADMIN)
def add_contest() -> Any:
    """Create a contest owned by the caller.

    Creators always own what they submit and cannot pre-accept it; admins may
    create on behalf of another creator and choose the status.
    """
    contest = _json_body()
    principal = current_principal()
    if principal["role"] != ROLE_ADMIN:
        contest["email"] = principal["email"]
        contest["status"] = STATUS_PENDING
    else:
        contest.setdefault("email", principal["email"])
    return jsonify(ContestService.create(get_db(), contest))


@bp.route("/contests/<string:email>", methods=["GET"])
@token_required
@self_only("email")
def creator_contests(email: str) -> Any:
    """List the contests created by the caller."""
    return jsonify(ContestService.list_by_creator(get_db(), email))


@bp.route("/get-contest/<string:contest_id>", methods=["GET"])
@public
def get_contest(contest_id: str) -> Any:
    """Fetch a single contest."""
    contest = ContestService.get_by_id(get_db(), contest_id)
    if contest is None:
        raise NotFoundError("Contest not found.")
    return jsonify(contest)


@bp.route("/contest/delete/<string:contest_id>", methods=["DELETE"])
@token_required
@role_required(ROLE_CREATOR, ROLE_ADMIN)
def delete_contest(contest_id: str) -> Any:
    """Delete a contest."""
    _owned_contest(contest_id)
    return jsonify(ContestService.delete_by_id(get_db(), contest_id))


@bp.route("/contest/update/<string:contest_id>", methods=["PUT"])
@token_required
@role_required(ROLE_CREATOR, ROLE_ADMIN)
def update_contest(contest_id: str) -> Any:
    """Update a contest's details."""
    _owned_contest(contest_id)
    fields = _json_body()
    if current_principal()["role"] != ROLE_ADMIN:
        # Ownership and acceptance stay with admins.
        fields.pop("email", None)
        fields.pop("status", None)
    return jsonify(ContestService.update_by_id(get_db(), contest_id, fields))


@bp.route("/contest/update-status/<string:contest_id>", methods=["PATCH"])
@token_required
@role_required(ROLE_ADMIN)
def accept_contest(contest_id: str) -> Any:
    """Mark a contest as accepted."""
    return jsonify(ContestService.set_status_accepted(get_db(), contest_id))
