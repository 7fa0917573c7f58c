"""Process-wide Firestore handle.

The Firestore client is created once by :func:`init_store` while the app
factory runs and is kept in ``app.extensions["store"]``.  Routes fetch it with
:func:`get_db` and hand it to the service layer explicitly; services never
create clients of their own.

When no credentials can be found, or initialization fails, the error is
logged and the app keeps serving with ``app.extensions["store"]`` set to
``None``.  Data routes then answer 503 and ``/ready`` reports the store as
down.
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

import firebase_admin
from firebase_admin import credentials, firestore
from flask import Flask, current_app

from .errors import StoreUnavailableError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


def _load_credentials(app: Flask) -> tuple[Any, str | None]:
    """Find Firebase credentials from env, a local file, or application defaults."""
    cred = None
    project_id = None

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # If both methods fail, fallback to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )

    return cred, project_id


def connect(app: Flask) -> Client | None:
    """Initialize the Firebase Admin SDK and return a Firestore client."""
    cred, project_id = _load_credentials(app)
    if not cred:
        return None

    if not firebase_admin._apps:
        options = {"projectId": project_id} if project_id else None
        try:
            firebase_admin.initialize_app(cred, options)
        except ValueError:
            # This can happen if the app is already initialized, which is fine.
            app.logger.info("Firebase app already initialized.")

    try:
        client = firestore.client()
    except Exception as e:
        app.logger.error(f"Could not create Firestore client: {e}")
        return None

    app.logger.info("Connected to Firestore.")
    return client


def init_store(app: Flask, client: Client | None = None) -> None:
    """Attach the Firestore handle to the app.

    An explicit ``client`` wins (tests pass a ``MockFirestore``).  Otherwise a
    client is created unless the app is in testing mode.
    """
    if client is None and not app.config.get("TESTING"):
        client = connect(app)
    if client is None:
        app.logger.warning("Firestore is not connected; data routes will answer 503.")
    app.extensions["store"] = client


def store_ready(app: Flask | None = None) -> bool:
    """Return True when a Firestore client is attached to the app."""
    app = app or current_app
    return app.extensions.get("store") is not None


def get_db() -> Client:
    """Return the app's Firestore client or raise StoreUnavailableError."""
    db = current_app.extensions.get("store")
    if db is None:
        raise StoreUnavailableError()
    return db
