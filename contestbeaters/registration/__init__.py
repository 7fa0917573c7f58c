"""Registration blueprint."""

from flask import Blueprint

bp = Blueprint("registration", __name__)

from . import routes  # noqa: E402, F401
from .models import Registration  # noqa: E402
from .services import RegistrationService  # noqa: E402

__all__ = ["Registration", "RegistrationService", "routes"]
