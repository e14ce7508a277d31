"""
User Routes

GET /users - List users (admin)
POST /users - Create user (admin)
GET /users/{user_id} - Get user (admin or self)
PUT /users/{user_id} - Update user (admin, or self for name/password)
DELETE /users/{user_id} - Deactivate user (admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from staffing_crm.api.deps import PageParams, get_or_404
from staffing_crm.core.auth import get_current_user, hash_password, require_permission
from staffing_crm.core.permissions import USERS_DELETE, USERS_READ, USERS_WRITE, has_permission
from staffing_crm.db.database import get_db
from staffing_crm.models import ActivityAction, Role, User
from staffing_crm.schemas.schemas import MessageResponse, UserCreate, UserEdit, UserListResponse, UserResponse
from staffing_crm.services.activity_service import log_activity
from staffing_crm.utils.pagination import page_meta, paginate

router = APIRouter(prefix="/users", tags=["Users"])


def _email_taken(db: Session, email: str) -> bool:
    return db.scalars(select(User.id).where(func.lower(User.email) == email.lower())).first() is not None


@router.get("", response_model=UserListResponse)
def list_users(
    search: Optional[str] = Query(None, description="Search in name and email"),
    role: Optional[Role] = Query(None),
    is_active: Optional[bool] = Query(None),
    paging: PageParams = Depends(),
    user: User = Depends(require_permission(USERS_READ)),
    db: Session = Depends(get_db),
):
    stmt = select(User)
    if search:
        stmt = stmt.where(or_(User.full_name.icontains(search, autoescape=True),
                              User.email.icontains(search, autoescape=True)))
    if role:
        stmt = stmt.where(User.role == role)
    if is_active is not None:
        stmt = stmt.where(User.is_active.is_(is_active))

    users, total = paginate(db, stmt.order_by(User.full_name), paging.page, paging.page_size)
    return UserListResponse(users=users, **page_meta(total, paging.page, paging.page_size))


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    data: UserCreate,
    user: User = Depends(require_permission(USERS_WRITE)),
    db: Session = Depends(get_db),
):
    if _email_taken(db, data.email):
        raise HTTPException(status_code=400, detail="Email already in use")

    new_user = User(
        full_name=data.full_name,
        email=data.email.lower(),
        password_hash=hash_password(data.password),
        role=data.role,
        is_active=data.is_active,
    )
    db.add(new_user)
    db.commit()

    log_activity(db, "User", new_user.id, ActivityAction.CREATED, user.id)
    return new_user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Users can always view their own profile."""
    if user_id != user.id and not has_permission(user.role, USERS_READ):
        raise HTTPException(status_code=403, detail="Forbidden")
    return get_or_404(db, User, user_id, "User")


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    data: UserEdit,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    is_admin = has_permission(user.role, USERS_WRITE)
    is_self = user_id == user.id
    if not is_self and not is_admin:
        raise HTTPException(status_code=403, detail="Forbidden")

    existing = get_or_404(db, User, user_id, "User")

    # Non-admins can only update their own name and password
    if not is_admin and (data.role is not None or data.is_active is not None or data.email is not None):
        raise HTTPException(status_code=403, detail="You can only update your name and password")

    if data.email and data.email.lower() != existing.email.lower() and _email_taken(db, data.email):
        raise HTTPException(status_code=400, detail="Email already in use")

    if data.full_name:
        existing.full_name = data.full_name
    if data.email:
        existing.email = data.email.lower()
    if data.role:
        existing.role = data.role
    if data.is_active is not None:
        existing.is_active = data.is_active
    if data.password:
        existing.password_hash = hash_password(data.password)
    db.commit()

    log_activity(db, "User", existing.id, ActivityAction.UPDATED, user.id)
    return existing


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    user: User = Depends(require_permission(USERS_DELETE)),
    db: Session = Depends(get_db),
):
    """Soft delete: the account is deactivated, its history stays."""
    if user_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    existing = get_or_404(db, User, user_id, "User")
    existing.is_active = False
    db.commit()

    log_activity(db, "User", user_id, ActivityAction.DELETED, user.id)
    return MessageResponse(message="User deactivated successfully")
