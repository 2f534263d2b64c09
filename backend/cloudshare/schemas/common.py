"""Shared Pydantic schemas."""
from pydantic import BaseModel


class DeleteResponse(BaseModel):
    deleted: bool = True
    id: str = ""


class ErrorResponse(BaseModel):
    """Body of every error reply; ``error`` is one of the ErrorKind values."""
    error: str
    detail: str


OWNER_ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorResponse, "description": "Caller does not own the file"},
    404: {"model": ErrorResponse, "description": "File not found"},
    422: {"model": ErrorResponse, "description": "Invalid input"},
    503: {"model": ErrorResponse, "description": "Storage unavailable"},
}

PUBLIC_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Unknown or unshared link"},
    503: {"model": ErrorResponse, "description": "Storage unavailable"},
}
