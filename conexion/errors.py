"""Custom exception classes for the application."""


class AppError(Exception):
    """Base application error class."""

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AuthenticationError(AppError):
    """Raised when a request carries no caller identity."""

    def __init__(self, message="Usuario no autenticado"):
        """Initialize the error."""
        super().__init__(message, 401)


class AccessDenied(AppError):
    """Raised when the caller lacks the role, membership or ownership required."""

    def __init__(self, message="No tienes permiso para realizar esta acción"):
        """Initialize the error."""
        super().__init__(message, 403)


class ValidationError(AppError):
    """Raised when user input fails validation."""

    def __init__(self, message="Validation failed."):
        """Initialize the error."""
        super().__init__(message, 400)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)


class IntegrityError(AppError):
    """Raised when stored data breaks an invariant, or a generated key collides."""

    def __init__(self, message="Data integrity error."):
        """Initialize the error."""
        super().__init__(message, 409)
