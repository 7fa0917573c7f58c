"""Data models for the user blueprint."""

from contestbeaters.core.types import FirestoreDocument


class User(FirestoreDocument, total=False):
    """A user document in Firestore. ``email`` is the unique key."""

    email: str
    name: str
    image: str
    role: str
