"""Shared API dependencies for authentication and the moderation service."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from whalebyte_moderation.core.security import decode_access_token
from whalebyte_moderation.services.identity import Identity
from whalebyte_moderation.services.moderation import ModerationService, get_moderation_service

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)


def get_moderation_service_dep() -> ModerationService:
    """Return the shared moderation service."""
    return get_moderation_service()


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> Identity:
    """Get the acting identity from a JWT bearer token.

    Raises:
        HTTPException: If the token is invalid or carries no subject.
    """
    subject = decode_access_token(credentials.credentials)
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return Identity(user_id=subject)


def get_optional_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
) -> Identity | None:
    """Return the acting identity if a valid token was supplied."""
    if credentials is None:
        return None
    subject = decode_access_token(credentials.credentials)
    return Identity(user_id=subject) if subject else None


ModerationServiceDep = Annotated[ModerationService, Depends(get_moderation_service_dep)]
CurrentIdentityDep = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentityDep = Annotated[Identity | None, Depends(get_optional_identity)]
