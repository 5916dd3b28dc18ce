"""Dependency injection for FastAPI endpoints"""

import logging
import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from fintrack.domain.exceptions import AuthenticationError, IdentityProviderError
from fintrack.domain.models import AuthenticatedUser
from fintrack.infrastructure.auth.state import AuthStateStore
from fintrack.infrastructure.clients.identity import IdentityClient
from fintrack.infrastructure.observability.metrics import identity_failures_counter


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity_client() -> IdentityClient:
    """Provide identity provider client instance"""
    return IdentityClient()


def get_auth_state(request: Request) -> AuthStateStore:
    """The application-owned auth state store"""
    return request.app.state.auth_state


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Pull the token out of `Authorization: Bearer <token>`"""
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=401,
            detail="Malformed authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token.strip()


async def authenticate(
    token: str,
    auth_state: AuthStateStore,
    identity_client: IdentityClient,
) -> AuthenticatedUser:
    """Cached identity for the token, verifying with the provider on a miss"""
    user = auth_state.current(token)
    if user is not None:
        return user

    user = await identity_client.verify_token(token)
    auth_state.publish(token, user)
    return user


async def get_current_user(
    request: Request,
    token: str = Depends(get_bearer_token),
    auth_state: AuthStateStore = Depends(get_auth_state),
    identity_client: IdentityClient = Depends(get_identity_client),
) -> AuthenticatedUser:
    """Resolve the signed-in user, mapping auth failures to HTTP errors"""
    try:
        return await authenticate(token, auth_state, identity_client)

    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e), headers={"WWW-Authenticate": "Bearer"})

    except IdentityProviderError as e:
        identity_failures_counter.inc()
        logging.error(f"Identity provider error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Identity service unavailable")


def parse_uuid(value: str, what: str = "ID") -> uuid.UUID:
    """Parse a path/query identifier, 400 on garbage"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {what} format")
