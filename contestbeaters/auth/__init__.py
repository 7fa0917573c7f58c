"""The auth blueprint."""

from flask import Blueprint

bp = Blueprint("auth", __name__)

from . import routes  # noqa: E402
from .models import Principal  # noqa: E402
from .tokens import TokenService  # noqa: E402

__all__ = ["Principal", "TokenService", "routes"]
