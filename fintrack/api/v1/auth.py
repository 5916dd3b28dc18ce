"""Session endpoints - sign in through the identity provider, sign out"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from fintrack.api.v1.schemas import SessionResponse
from fintrack.api.dependencies import get_auth_state, get_bearer_token, get_current_user, get_request_id
from fintrack.domain.models import AuthenticatedUser
from fintrack.infrastructure.auth.state import AuthStateStore
from fintrack.infrastructure.database.session import get_db
from fintrack.infrastructure.database.repositories import UserRepository

router = APIRouter()


@router.post("/auth/session", response_model=SessionResponse)
def create_session(
    request: Request,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Sign in: verify the token and save/refresh the user's profile"""
    try:
        db_user = UserRepository(db).upsert_user(user)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to save user profile: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    return SessionResponse(uid=db_user.uid, email=db_user.email, display_name=db_user.display_name)


@router.delete("/auth/session", status_code=204)
def delete_session(
    token: str = Depends(get_bearer_token),
    auth_state: AuthStateStore = Depends(get_auth_state),
):
    """Sign out: forget the cached identity for this token"""
    auth_state.revoke(token)
    return Response(status_code=204)
