"""Routes for the user blueprint."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request

from contestbeaters.auth.decorators import (
    public,
    role_required,
    self_only,
    token_required,
)
from contestbeaters.core.constants import ROLE_ADMIN
from contestbeaters.errors import ValidationError
from contestbeaters.store import get_db

from . import bp
from .forms import ProfileForm, RoleForm, UserForm
from .services import UserService


@bp.route("/users/<string:email>", methods=["GET"])
@token_required
@role_required(ROLE_ADMIN)
def list_users(email: str) -> Any:
    """List every user except ``email``."""
    return jsonify(UserService.list_excluding(get_db(), email))


@bp.route("/creators", methods=["GET"])
@public
def list_creators() -> Any:
    """List contest creators."""
    return jsonify(UserService.list_creators(get_db()))


@bp.route("/add-user", methods=["POST"])
@public
def add_user() -> Any:
    """Record a user the first time they sign in.

    New users always start with the "user" role; only an admin can raise it.
    """
    form = UserForm.from_json()
    user = {
        "email": form.email.data,
        "name": form.name.data or None,
        "image": form.image.data or None,
    }
    return jsonify(UserService.upsert_on_first_seen(get_db(), user))


@bp.route("/user-role", methods=["GET"])
@public
def user_role() -> Any:
    """Look up the role of the user in ``?email=``."""
    email = request.args.get("email")
    if not email:
        raise ValidationError("email: This field is required.")
    return jsonify({"role": UserService.role_of(get_db(), email)})


@bp.route("/user/update-role/<string:user_id>", methods=["PATCH"])
@token_required
@role_required(ROLE_ADMIN)
def update_role(user_id: str) -> Any:
    """Change a user's role."""
    form = RoleForm.from_json()
    return jsonify(UserService.set_role(get_db(), user_id, form.role.data))


@bp.route("/user/update/<string:email>", methods=["PATCH"])
@token_required
@self_only("email")
def update_profile(email: str) -> Any:
    """Update the caller's name and picture."""
    form = ProfileForm.from_json()
    return jsonify(
        UserService.update_profile(
            get_db(), email, name=form.name.data or None, image=form.image.data or None
        )
    )
