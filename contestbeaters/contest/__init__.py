"""Contest blueprint."""

from flask import Blueprint

bp = Blueprint("contest", __name__)

from . import routes  # noqa: E402, F401
from .models import Contest  # noqa: E402
from .services import ContestService  # noqa: E402

__all__ = ["Contest", "ContestService", "routes"]
