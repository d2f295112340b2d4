from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gatekeeper.api.security import decode_actor
from gatekeeper.core.rbac import Actor
from gatekeeper.services import Gatekeeper

bearer_scheme = HTTPBearer(auto_error=False)


def get_gatekeeper(request: Request) -> Gatekeeper:
    """Handlers wired up at application startup."""
    return request.app.state.gatekeeper


def get_current_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    """Get the acting identity from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    actor = decode_actor(credentials.credentials, request.app.state.settings)
    if actor is None:
        raise credentials_exception
    return actor
