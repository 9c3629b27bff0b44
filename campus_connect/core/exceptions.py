"""
Domain exceptions for Campus Connect.

Services raise these instead of bare ValueError so the API layer can map each
kind to one status code (see the handlers registered in ``main.py``):

    UnauthorizedError     -> 401
    ForbiddenError        -> 403
    NotFoundError         -> 404
    InvalidArgumentError  -> 400
    AlreadyExistsError    -> 409
    StoreError            -> 500
"""

from typing import Any, Dict, Optional


class CampusConnectError(Exception):
    """Base exception for all Campus Connect errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


class UnauthorizedError(CampusConnectError):
    """No valid caller identity"""

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(CampusConnectError):
    """Caller is not allowed to perform this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="FORBIDDEN")


class InvalidArgumentError(CampusConnectError):
    """Request is well-formed but semantically invalid"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_ARGUMENT", details=details)


class NotFoundError(CampusConnectError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        message = f"{resource_type} not found"
        details = {"resource_type": resource_type}
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(
            message,
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details=details
        )


class ConnectionNotFoundError(NotFoundError):
    """
    No connection the caller may act on.

    Raised the same way whether the row is missing, belongs to other users or
    is in the wrong state, so callers cannot probe other users' requests.
    """

    def __init__(self, connection_id: Optional[str] = None):
        super().__init__("Connection", connection_id)


class PostNotFoundError(NotFoundError):

    def __init__(self, post_id: Optional[str] = None):
        super().__init__("Post", post_id)


class AlreadyExistsError(CampusConnectError):
    """A uniqueness constraint was violated"""

    status_code = 409

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="ALREADY_EXISTS", details=details)


class ConnectionAlreadyExistsError(AlreadyExistsError):
    """A connection record already exists for this pair of users"""

    def __init__(self, connection_id: Optional[str] = None):
        details = {"connection_id": connection_id} if connection_id else None
        super().__init__("Connection already exists", details=details)
        self.connection_id = connection_id


class StoreError(CampusConnectError):
    """The datastore failed; the original error is logged, never returned"""

    status_code = 500

    def __init__(self, message: str = "An error occurred while accessing the datastore"):
        super().__init__(message, code="STORE_ERROR")
