"""Data models for the auth blueprint."""

from __future__ import annotations

from typing import TypedDict


class Principal(TypedDict):
    """The authenticated identity attached to a request."""

    email: str
    role: str
