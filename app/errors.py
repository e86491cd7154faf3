# app/errors.py
"""
Domain errors raised by services and translated to HTTP responses in app/main.py.
Each error carries the status code it maps to, so routers never build HTTPException by hand.
"""


class ReconError(Exception):
    """Base error for Recon Tracker operations."""

    status_code = 500

    def __init__(self, message: str, code: str = "RECON_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(ReconError):
    """Missing or malformed input."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR")


class UnauthorizedError(ReconError):
    """No session, invalid session, or actor not allowed to perform the action."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "UNAUTHORIZED")


class NotFoundError(ReconError):
    """Referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, key):
        super().__init__(f"{entity} not found: {key}", "NOT_FOUND")
        self.entity = entity
        self.key = key


class ConflictError(ReconError):
    """Duplicate unique key (VIN, email)."""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT")


class InternalError(ReconError):
    """Unexpected store or provider failure."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, "INTERNAL_ERROR")
