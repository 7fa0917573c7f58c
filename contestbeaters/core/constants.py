"""Global constants for the contestbeaters application."""

# Database-related constants
FIRESTORE_BATCH_LIMIT = 400
FIRESTORE_MAX_ID_BYTES = 1500

# Collection names
CONTESTS_COLLECTION = "contests"
REGISTRATIONS_COLLECTION = "registrations"
USERS_COLLECTION = "users"

# Roles
ROLE_USER = "user"
ROLE_CREATOR = "creator"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_CREATOR, ROLE_ADMIN)

# Contest statuses
STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUSES = (STATUS_PENDING, STATUS_ACCEPTED)

# Sentinel accepted by the type filter meaning "any type"
ALL_TYPES = "All"

POPULAR_CONTESTS_LIMIT = 5

# Statuses reported by the winner declaration
WINNER_SUCCESS = "success"
WINNER_FAILURE = "failure"
