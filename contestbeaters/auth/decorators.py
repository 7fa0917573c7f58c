"""Decorators for guarding routes with token and role checks.

Usage::

    @bp.route("/contests")
    @token_required
    @role_required(ROLE_ADMIN)
    def list_contests():
        ...

``token_required`` must be the outermost guard so the principal exists
before any role or ownership check runs.  Each decorator also records what it
enforces on the view as ``route_policy`` so the app factory can compare every
route against the policy table in :mod:`contestbeaters.auth.policies`.
"""

from __future__ import annotations

from dataclasses import replace
from functools import wraps
from typing import Any, Callable

from flask import current_app, g, request

from contestbeaters.core.constants import ROLE_ADMIN
from contestbeaters.errors import ForbiddenError, UnauthorizedError

from .models import Principal
from .policies import RoutePolicy
from .tokens import TokenService, get_token_service


def _policy_of(func: Callable[..., Any]) -> RoutePolicy:
    return getattr(func, "route_policy", RoutePolicy())


def public(f: Callable[..., Any]) -> Callable[..., Any]:
    """Declare a route as reachable without a token."""
    f.route_policy = RoutePolicy()  # type: ignore[attr-defined]
    return f


def current_principal() -> Principal:
    """Return the principal set by ``token_required``.

    Reaching this without a principal is a programming error (a guard was
    stacked without ``token_required``), not a client error.
    """
    principal = g.get("principal")
    if principal is None:
        raise RuntimeError("No principal on this request; add @token_required.")
    return principal


def token_required(f: Callable[..., Any]) -> Callable[..., Any]:
    """Reject the request with 401 unless it carries a valid token header."""

    @wraps(f)
    def decorated_function(*args: Any, **kwargs: Any) -> Any:
        header = current_app.config.get("TOKEN_HEADER", "token")
        token = request.headers.get(header)
        if not token:
            raise UnauthorizedError(f"Missing '{header}' header.")
        claims = get_token_service().verify(token)
        g.principal = TokenService.principal_from(claims)
        return f(*args, **kwargs)

    decorated_function.route_policy = replace(  # type: ignore[attr-defined]
        _policy_of(f), authenticated=True
    )
    return decorated_function


def role_required(*roles: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Reject the request with 403 unless the principal has one of ``roles``."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def decorated_function(*args: Any, **kwargs: Any) -> Any:
            principal = current_principal()
            if principal["role"] not in roles:
                raise ForbiddenError()
            return func(*args, **kwargs)

        decorated_function.route_policy = replace(  # type: ignore[attr-defined]
            _policy_of(func), roles=tuple(roles)
        )
        return decorated_function

    return decorator


def require_self(email: str) -> None:
    """Reject with 401 when ``email`` is not the caller's own email."""
    if email != current_principal()["email"]:
        raise ForbiddenError(status_code=401)


def self_only(param: str = "email") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Apply :func:`require_self` to the URL parameter named ``param``."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def decorated_function(*args: Any, **kwargs: Any) -> Any:
            require_self(kwargs[param])
            return func(*args, **kwargs)

        decorated_function.route_policy = replace(  # type: ignore[attr-defined]
            _policy_of(func), self_only=True
        )
        return decorated_function

    return decorator


def require_owner_or_admin(owner_email: str | None) -> None:
    """Reject with 403 unless the caller is an admin or owns the resource."""
    principal = current_principal()
    if principal["role"] == ROLE_ADMIN:
        return
    if not owner_email or owner_email != principal["email"]:
        raise ForbiddenError("Only the owner or an admin may do this.")
