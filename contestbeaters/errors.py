"""Custom exception classes for the application."""


class AppError(Exception):
    """Base application error class."""

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ValidationError(AppError):
    """Raised when user input fails validation."""

    def __init__(self, message="Validation failed."):
        """Initialize the error."""
        super().__init__(message, 400)


class InvalidIdError(ValidationError):
    """Raised when a value is not a usable Firestore document id."""

    def __init__(self, message="Invalid id."):
        """Initialize the error."""
        super().__init__(message)


class UnauthorizedError(AppError):
    """Raised when a request carries no usable credential."""

    def __init__(self, message="Unauthorized"):
        """Initialize the error."""
        super().__init__(message, 401)


class ForbiddenError(AppError):
    """Raised when the caller is authenticated but not allowed."""

    def __init__(self, message="Forbidden", status_code=403):
        """Initialize the error."""
        super().__init__(message, status_code)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)


class DuplicateResourceError(AppError):
    """Raised when trying to create a resource that already exists."""

    def __init__(self, message="Resource already exists."):
        """Initialize the error."""
        super().__init__(message, 409)


class StoreUnavailableError(AppError):
    """Raised when a data route runs without a connected store."""

    def __init__(self, message="Data store is not available."):
        """Initialize the error."""
        super().__init__(message, 503)


class TokenInvalidError(UnauthorizedError):
    """Raised when a token has a bad signature or is malformed."""


class TokenExpiredError(UnauthorizedError):
    """Raised when a token's lifetime has elapsed."""
