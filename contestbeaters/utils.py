"""Utility functions for the application."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from .core.constants import FIRESTORE_MAX_ID_BYTES
from .errors import InvalidIdError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot

_RESERVED_ID = re.compile(r"^__.*__$")


def validate_doc_id(value: Any, label: str = "id") -> str:
    """Return ``value`` if it is a usable Firestore document id.

    Raises:
        InvalidIdError: If the value is empty, too long, contains a slash, is
            ``.``/``..``, or uses the reserved ``__name__`` form.
    """
    if not isinstance(value, str) or not value:
        raise InvalidIdError(f"Invalid {label}.")
    if (
        "/" in value
        or value in (".", "..")
        or _RESERVED_ID.match(value)
        or len(value.encode("utf-8")) > FIRESTORE_MAX_ID_BYTES
    ):
        raise InvalidIdError(f"Invalid {label}: {value!r}.")
    return value


def doc_to_dict(doc: DocumentSnapshot) -> dict[str, Any]:
    """Return a snapshot's data with its document id under ``id``."""
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def docs_to_list(docs: Any) -> list[dict[str, Any]]:
    """Convert a stream of snapshots into a list of dicts."""
    return [doc_to_dict(doc) for doc in docs if doc.exists]
