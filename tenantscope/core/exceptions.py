"""
Custom Exceptions

Centralized exception definitions for tenant scoping.
These are HTTPExceptions so they propagate out of the data layer
unchanged and FastAPI converts them to the matching response.
"""
from fastapi import HTTPException, status


class UnauthorizedWrite(HTTPException):
    """
    Raised when a record is written without a resolvable tenant.

    A create or update with no tenant context must never produce an
    unscoped or mis-scoped row, so the whole operation is aborted.
    """

    def __init__(self, detail: str = "Tenant context required for write"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class TenantIsolationError(HTTPException):
    """
    Raised when a cross-tenant change is attempted.

    This is a CRITICAL security error and should be logged/alerted on.
    """

    def __init__(self, detail: str = "Tenant isolation violation"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class AuthenticationError(HTTPException):
    """Raised when authentication fails."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class RecordNotFoundError(HTTPException):
    """Raised when a point lookup finds nothing visible to the caller."""

    def __init__(self, model_name: str = "Record", record_id: str = ""):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{model_name} not found: {record_id}" if record_id else f"{model_name} not found"
        )


class RecordWriteError(HTTPException):
    """
    Raised when the database rejects a write.

    The session is rolled back before this is raised, so it stays
    usable. The usual cause is a tenant id with no tenants row.
    """

    def __init__(self, detail: str = "Record could not be written"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail
        )


class TenantConfigurationError(HTTPException):
    """
    Raised when a tenant-scoped model has no column for the configured
    tenant field. Scoping cannot be applied, so the operation is refused.
    """

    def __init__(self, model_name: str, field_name: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{model_name} has no tenant field {field_name!r}"
        )
