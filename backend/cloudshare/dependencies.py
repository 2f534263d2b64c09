"""FastAPI dependencies wiring request handlers to the service container."""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cloudshare.services.container import FileServices
from cloudshare.services.file_lifecycle import FileLifecycleCoordinator

bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> FileServices:
    return request.app.state.services


def get_file_service(services: FileServices = Depends(get_services)) -> FileLifecycleCoordinator:
    return services.files


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    services: FileServices = Depends(get_services),
) -> str:
    """Resolve the caller's user id from the Authorization header.

    Raises Unauthenticated, which the app turns into a 401.
    """
    token = credentials.credentials if credentials else None
    return services.identity.current_user(token)
