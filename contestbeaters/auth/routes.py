"""Routes for the auth blueprint."""

from __future__ import annotations

from typing import Any

from flask import jsonify

from contestbeaters.store import get_db
from contestbeaters.user.services import UserService

from . import bp
from .decorators import public
from .forms import TokenForm
from .tokens import get_token_service


@bp.route("/jwt", methods=["POST"])
@public
def issue_token() -> Any:
    """Issue a token for ``email`` carrying its stored role.

    The caller is not authenticated here.  The web client signs users in
    with its identity provider and then asks for a token for that email, so
    anyone who can reach this route can obtain a token for any email and act
    with that user's stored role.  Ignoring a role sent in the body only stops
    callers from choosing a role; it does not prove who they are.  Deployments
    must keep this route behind the same trust boundary as the sign-in flow.
    """
    form = TokenForm.from_json()
    email = form.email.data
    role = UserService.role_of(get_db(), email)
    token = get_token_service().issue({"email": email, "role": role})
    return jsonify({"token": token})
