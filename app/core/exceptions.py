"""
Domain errors raised by the quest board services.

Each one is an HTTPException with a fixed status code, so services can raise
them directly and routes let them propagate like any other HTTPException.
"""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """A required quest/message field is missing or blank."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class GeocodeNotFound(HTTPException):
    """The quest location could not be resolved to coordinates."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Could not find location: {address}",
        )


class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Not allowed"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UpstreamError(HTTPException):
    """Network failure talking to Supabase or the maps API."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
