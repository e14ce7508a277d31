"""
Authentication Routes

POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
GET /auth/permissions - Get current user's role and permissions
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from staffing_crm.core.auth import create_access_token, get_current_user, verify_password
from staffing_crm.core.permissions import ROLE_DISPLAY_NAMES, get_permissions
from staffing_crm.db.database import get_db
from staffing_crm.models import ActivityAction, Role, User
from staffing_crm.schemas.schemas import LoginRequest, PermissionsResponse, TokenResponse, UserResponse
from staffing_crm.services.activity_service import log_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = db.scalars(select(User).where(func.lower(User.email) == request.email.lower())).first()

    if not user or not verify_password(request.password, user.password_hash):
        logger.info("Failed login for %s", request.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        logger.info("Login refused for deactivated account %s", user.id)
        raise HTTPException(status_code=403, detail="Account deactivated")

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    log_activity(db, "User", user.id, ActivityAction.LOGIN, user.id)
    logger.info("User %s logged in", user.id)

    token = create_access_token(data={"sub": user.id, "role": Role(user.role).value})
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return user


@router.get("/permissions", response_model=PermissionsResponse)
def get_my_permissions(user: User = Depends(get_current_user)):
    role = Role(user.role)
    return PermissionsResponse(
        role=role,
        role_display_name=ROLE_DISPLAY_NAMES[role],
        permissions=get_permissions(role),
    )
