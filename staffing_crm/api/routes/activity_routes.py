"""
Activity Routes

GET /activity - Activity log, newest first (filter by entity)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from staffing_crm.api.deps import PageParams
from staffing_crm.core.auth import get_current_user
from staffing_crm.db.database import get_db
from staffing_crm.models import ActivityAction, ActivityLog, User
from staffing_crm.schemas.schemas import ActivityListResponse, ActivityLogResponse
from staffing_crm.services.activity_service import format_action_label
from staffing_crm.utils.pagination import page_meta, paginate

router = APIRouter(prefix="/activity", tags=["Activity"])


@router.get("", response_model=ActivityListResponse)
def list_activity(
    entity_type: Optional[str] = Query(None, description="e.g. Customer, Project, Candidate"),
    entity_id: Optional[str] = Query(None),
    action: Optional[ActivityAction] = Query(None),
    paging: PageParams = Depends(),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    stmt = select(ActivityLog).options(selectinload(ActivityLog.performed_by))
    if entity_type:
        stmt = stmt.where(ActivityLog.entity_type == entity_type)
    if entity_id:
        stmt = stmt.where(ActivityLog.entity_id == entity_id)
    if action:
        stmt = stmt.where(ActivityLog.action == action)

    logs, total = paginate(db, stmt.order_by(desc(ActivityLog.created_at)), paging.page, paging.page_size)

    activities = []
    for log in logs:
        item = ActivityLogResponse.model_validate(log)
        item.action_label = format_action_label(log.action)
        activities.append(item)
    return ActivityListResponse(activities=activities, **page_meta(total, paging.page, paging.page_size))
