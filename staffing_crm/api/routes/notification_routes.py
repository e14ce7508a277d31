"""
Notification Routes

GET /notifications - List the current user's notifications
PATCH /notifications - Mark notifications as read
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc, func, select, update
from sqlalchemy.orm import Session

from staffing_crm.core.auth import require_permission
from staffing_crm.core.permissions import NOTIFICATIONS_READ
from staffing_crm.db.database import get_db
from staffing_crm.models import Notification, User
from staffing_crm.schemas.schemas import (
    NotificationListResponse,
    NotificationMarkRequest,
    NotificationMarkResponse,
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])

MAX_NOTIFICATIONS = 50


def _unread_count(db: Session, user_id: str) -> int:
    return db.scalar(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )
    )


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(MAX_NOTIFICATIONS, ge=1, le=200),
    user: User = Depends(require_permission(NOTIFICATIONS_READ)),
    db: Session = Depends(get_db),
):
    """Newest first. unread_count always counts every unread notification."""
    stmt = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    notifications = db.scalars(stmt.order_by(desc(Notification.created_at)).limit(limit)).all()

    return NotificationListResponse(notifications=notifications, unread_count=_unread_count(db, user.id))


@router.patch("", response_model=NotificationMarkResponse)
def mark_notifications(
    data: NotificationMarkRequest,
    user: User = Depends(require_permission(NOTIFICATIONS_READ)),
    db: Session = Depends(get_db),
):
    """Mark the given notifications (or all of them) as read. Only the caller's own are touched."""
    if not data.mark_all_as_read and not data.notification_ids:
        raise HTTPException(status_code=400, detail="Provide notification_ids or mark_all_as_read")

    stmt = update(Notification).where(Notification.user_id == user.id, Notification.is_read.is_(False))
    if not data.mark_all_as_read:
        stmt = stmt.where(Notification.id.in_(data.notification_ids))
    result = db.execute(stmt.values(is_read=True).execution_options(synchronize_session=False))
    db.commit()

    return NotificationMarkResponse(updated=result.rowcount, unread_count=_unread_count(db, user.id))
