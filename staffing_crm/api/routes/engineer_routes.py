"""
Engineer Routes

GET /engineers - List engineers with filters
POST /engineers - Create engineer
GET /engineers/{engineer_id} - Get engineer with assignments and updates
PUT /engineers/{engineer_id} - Update engineer
DELETE /engineers/{engineer_id} - Delete engineer (admin)
GET /engineers/{engineer_id}/assignments - List assignments
POST /engineers/{engineer_id}/assignments - Create assignment
PUT /engineers/{engineer_id}/assignments/{assignment_id} - Update assignment
GET /engineers/{engineer_id}/updates - List updates
POST /engineers/{engineer_id}/updates - Add update
DELETE /engineers/{engineer_id}/updates/{update_id} - Delete update (author or admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc, or_, select
from sqlalchemy.orm import Session, selectinload

from staffing_crm.api.deps import PageParams, apply_changes, get_or_404
from staffing_crm.core.auth import get_current_user, require_permission
from staffing_crm.core.permissions import ENGINEERS_DELETE, ENGINEERS_READ, ENGINEERS_WRITE
from staffing_crm.db.database import get_db
from staffing_crm.models import (
    ActivityAction,
    AssignmentStatus,
    Candidate,
    Customer,
    EmploymentStatus,
    Engineer,
    EngineerAssignment,
    Project,
    Role,
    SeniorityLevel,
    User,
)
from staffing_crm.models import EngineerUpdate as EngineerUpdateEntry
from staffing_crm.schemas.schemas import (
    AssignmentCreate,
    AssignmentEdit,
    AssignmentListResponse,
    AssignmentResponse,
    EngineerCreate,
    EngineerDetailResponse,
    EngineerEdit,
    EngineerListResponse,
    EngineerResponse,
    EngineerUpdateCreate,
    EngineerUpdateListResponse,
    EngineerUpdateResponse,
    MessageResponse,
)
from staffing_crm.services.activity_service import create_diff, entity_snapshot, log_activity
from staffing_crm.services.assignment_service import (
    AssignmentConflict,
    change_assignment_status,
    start_assignment,
)
from staffing_crm.utils.pagination import json_array_contains_any, page_meta, paginate, split_csv

router = APIRouter(prefix="/engineers", tags=["Engineers"])


def _check_manager(db: Session, manager_id: Optional[str], engineer_id: Optional[str] = None) -> None:
    if not manager_id:
        return
    if manager_id == engineer_id:
        raise HTTPException(status_code=400, detail="An engineer cannot be their own manager")
    get_or_404(db, Engineer, manager_id, "Manager engineer")


# ============================================================
# ENGINEER CRUD
# ============================================================

@router.get("", response_model=EngineerListResponse)
def list_engineers(
    search: Optional[str] = Query(None, description="Search in name, title and email"),
    technologies: Optional[str] = Query(None, description="Comma separated, matches any"),
    seniority_level: Optional[SeniorityLevel] = Query(None),
    employment_status: Optional[EmploymentStatus] = Query(None),
    paging: PageParams = Depends(),
    user: User = Depends(require_permission(ENGINEERS_READ)),
    db: Session = Depends(get_db),
):
    stmt = select(Engineer)
    if search:
        stmt = stmt.where(or_(
            Engineer.full_name.icontains(search, autoescape=True),
            Engineer.title.icontains(search, autoescape=True),
            Engineer.email.icontains(search, autoescape=True),
        ))
    tech_list = split_csv(technologies)
    if tech_list:
        stmt = stmt.where(json_array_contains_any(Engineer.technologies, tech_list))
    if seniority_level:
        stmt = stmt.where(Engineer.seniority_level == seniority_level)
    if employment_status:
        stmt = stmt.where(Engineer.employment_status == employment_status)

    engineers, total = paginate(db, stmt.order_by(desc(Engineer.updated_at)), paging.page, paging.page_size)
    return EngineerListResponse(engineers=engineers, **page_meta(total, paging.page, paging.page_size))


@router.post("", response_model=EngineerResponse, status_code=201)
def create_engineer(
    data: EngineerCreate,
    user: User = Depends(require_permission(ENGINEERS_WRITE)),
    db: Session = Depends(get_db),
):
    if data.linked_candidate_id:
        candidate = get_or_404(db, Candidate, data.linked_candidate_id, "Candidate")
        if candidate.linked_engineer is not None:
            raise HTTPException(status_code=400, detail="Candidate is already linked to an engineer")
    _check_manager(db, data.manager_engineer_id)

    engineer = Engineer(**data.model_dump())
    db.add(engineer)
    db.commit()

    log_activity(db, "Engineer", engineer.id, ActivityAction.CREATED, user.id)
    return engineer


@router.get("/{engineer_id}", response_model=EngineerDetailResponse)
def get_engineer(
    engineer_id: str,
    user: User = Depends(require_permission(ENGINEERS_READ)),
    db: Session = Depends(get_db),
):
    return get_or_404(db, Engineer, engineer_id, "Engineer")


@router.put("/{engineer_id}", response_model=EngineerResponse)
def update_engineer(
    engineer_id: str,
    data: EngineerEdit,
    user: User = Depends(require_permission(ENGINEERS_WRITE)),
    db: Session = Depends(get_db),
):
    engineer = get_or_404(db, Engineer, engineer_id, "Engineer")
    changes = data.model_dump(exclude_unset=True)
    _check_manager(db, changes.get("manager_engineer_id"), engineer.id)

    before = entity_snapshot(engineer)
    applied = apply_changes(engineer, changes)
    after = entity_snapshot(engineer)
    db.commit()

    diff = create_diff(before, {key: after[key] for key in applied})
    log_activity(db, "Engineer", engineer.id, ActivityAction.UPDATED, user.id, diff)
    return engineer


@router.delete("/{engineer_id}", response_model=MessageResponse)
def delete_engineer(
    engineer_id: str,
    user: User = Depends(require_permission(ENGINEERS_DELETE)),
    db: Session = Depends(get_db),
):
    engineer = get_or_404(db, Engineer, engineer_id, "Engineer")
    for report in engineer.direct_reports:
        report.manager_engineer_id = None
    db.delete(engineer)
    db.commit()

    log_activity(db, "Engineer", engineer_id, ActivityAction.DELETED, user.id)
    return MessageResponse(message="Engineer deleted successfully")


# ============================================================
# ASSIGNMENTS
# ============================================================

@router.get("/{engineer_id}/assignments", response_model=AssignmentListResponse)
def list_assignments(
    engineer_id: str,
    user: User = Depends(require_permission(ENGINEERS_READ)),
    db: Session = Depends(get_db),
):
    get_or_404(db, Engineer, engineer_id, "Engineer")
    assignments = db.scalars(
        select(EngineerAssignment)
        .options(selectinload(EngineerAssignment.project), selectinload(EngineerAssignment.customer))
        .where(EngineerAssignment.engineer_id == engineer_id)
        .order_by(desc(EngineerAssignment.start_date))
    ).all()
    return AssignmentListResponse(assignments=assignments, total=len(assignments))


@router.post("/{engineer_id}/assignments", response_model=AssignmentResponse, status_code=201)
def create_assignment(
    engineer_id: str,
    data: AssignmentCreate,
    user: User = Depends(require_permission(ENGINEERS_WRITE)),
    db: Session = Depends(get_db),
):
    """
    Create an assignment. An ACTIVE one marks the engineer ASSIGNED and is
    rejected while another ACTIVE assignment exists.
    """
    engineer = get_or_404(db, Engineer, engineer_id, "Engineer")

    customer_id = data.customer_id
    if data.project_id:
        project = get_or_404(db, Project, data.project_id, "Project")
        customer_id = customer_id or project.customer_id
    if customer_id:
        get_or_404(db, Customer, customer_id, "Customer")

    try:
        assignment = start_assignment(
            db,
            engineer,
            project_id=data.project_id,
            customer_id=customer_id,
            role_title=data.role_title,
            start_date=data.start_date,
            end_date=data.end_date,
            status=data.status,
            notes=data.notes,
        )
    except AssignmentConflict as e:
        raise HTTPException(status_code=400, detail=str(e))
    db.commit()

    log_activity(db, "Engineer", engineer.id, ActivityAction.ASSIGNED, user.id,
                 {"assignment_id": assignment.id, "project_id": assignment.project_id})
    return assignment


@router.put("/{engineer_id}/assignments/{assignment_id}", response_model=AssignmentResponse)
def update_assignment(
    engineer_id: str,
    assignment_id: str,
    data: AssignmentEdit,
    user: User = Depends(require_permission(ENGINEERS_WRITE)),
    db: Session = Depends(get_db),
):
    """Update an assignment. Ending the last ACTIVE assignment puts the engineer on the bench."""
    assignment = get_or_404(db, EngineerAssignment, assignment_id, "Assignment")
    if assignment.engineer_id != engineer_id:
        raise HTTPException(status_code=404, detail="Assignment not found")

    changes = data.model_dump(exclude_unset=True)
    new_status = changes.pop("status", None)
    if changes.get("project_id"):
        get_or_404(db, Project, changes["project_id"], "Project")
    if changes.get("customer_id"):
        get_or_404(db, Customer, changes["customer_id"], "Customer")

    before = entity_snapshot(assignment)
    old_status = assignment.status
    applied = apply_changes(assignment, changes)
    if new_status is not None:
        try:
            change_assignment_status(db, assignment, new_status)
        except AssignmentConflict as e:
            db.rollback()
            raise HTTPException(status_code=400, detail=str(e))
        applied["status"] = new_status
    after = entity_snapshot(assignment)
    db.commit()

    ended = old_status == AssignmentStatus.ACTIVE and assignment.status != AssignmentStatus.ACTIVE
    action = ActivityAction.UNASSIGNED if ended else ActivityAction.UPDATED
    diff = create_diff(before, {key: after[key] for key in applied}) or {}
    diff["assignment_id"] = assignment.id
    log_activity(db, "Engineer", engineer_id, action, user.id, diff)
    return assignment


# ============================================================
# ENGINEER UPDATES
# ============================================================

@router.get("/{engineer_id}/updates", response_model=EngineerUpdateListResponse)
def list_engineer_updates(
    engineer_id: str,
    user: User = Depends(require_permission(ENGINEERS_READ)),
    db: Session = Depends(get_db),
):
    get_or_404(db, Engineer, engineer_id, "Engineer")
    updates = db.scalars(
        select(EngineerUpdateEntry)
        .options(selectinload(EngineerUpdateEntry.author))
        .where(EngineerUpdateEntry.engineer_id == engineer_id)
        .order_by(desc(EngineerUpdateEntry.created_at))
    ).all()
    return EngineerUpdateListResponse(updates=updates, total=len(updates))


@router.post("/{engineer_id}/updates", response_model=EngineerUpdateResponse, status_code=201)
def create_engineer_update(
    engineer_id: str,
    data: EngineerUpdateCreate,
    user: User = Depends(require_permission(ENGINEERS_WRITE)),
    db: Session = Depends(get_db),
):
    engineer = get_or_404(db, Engineer, engineer_id, "Engineer")
    update = EngineerUpdateEntry(
        engineer_id=engineer.id,
        author_user_id=user.id,
        content=data.content,
        visibility=data.visibility,
    )
    db.add(update)
    db.commit()

    log_activity(db, "Engineer", engineer.id, ActivityAction.UPDATE_ADDED, user.id, {"update_id": update.id})
    return update


@router.delete("/{engineer_id}/updates/{update_id}", response_model=MessageResponse)
def delete_engineer_update(
    engineer_id: str,
    update_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    update = get_or_404(db, EngineerUpdateEntry, update_id, "Update")
    if update.engineer_id != engineer_id:
        raise HTTPException(status_code=404, detail="Update not found")
    if update.author_user_id != user.id and user.role != Role.ADMIN:
        raise HTTPException(status_code=403, detail="Forbidden")

    db.delete(update)
    db.commit()
    return MessageResponse(message="Update deleted successfully")
