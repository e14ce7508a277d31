"""
Project Talent Routes

GET /project-talents - List talent on projects (filter by project, type, stage)
POST /project-talents - Add a candidate or engineer to a project
GET /project-talents/{talent_id} - Get talent entry
PUT /project-talents/{talent_id} - Update stage, owner, notes or feedback
DELETE /project-talents/{talent_id} - Remove talent from project

Moving an engineer to ASSIGNED starts an active assignment on the
project's customer.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from staffing_crm.api.deps import PageParams, apply_changes, check_project_access, get_or_404
from staffing_crm.core.auth import require_permission
from staffing_crm.core.permissions import PROJECTS_READ, PROJECTS_WRITE
from staffing_crm.db.database import get_db
from staffing_crm.models import (
    ActivityAction,
    Candidate,
    Engineer,
    Project,
    ProjectTalent,
    TalentStage,
    TalentType,
    User,
)
from staffing_crm.schemas.schemas import (
    MessageResponse,
    ProjectTalentCreate,
    ProjectTalentEdit,
    ProjectTalentListResponse,
    ProjectTalentResponse,
)
from staffing_crm.services.activity_service import create_diff, entity_snapshot, log_activity
from staffing_crm.services.assignment_service import AssignmentConflict, get_active_assignment, start_assignment
from staffing_crm.services.matching_service import score_candidate, score_engineer
from staffing_crm.utils.pagination import page_meta, paginate

router = APIRouter(prefix="/project-talents", tags=["Project Talents"])


@router.get("", response_model=ProjectTalentListResponse)
def list_project_talents(
    project_id: Optional[str] = Query(None),
    talent_type: Optional[TalentType] = Query(None),
    stage: Optional[TalentStage] = Query(None),
    paging: PageParams = Depends(),
    user: User = Depends(require_permission(PROJECTS_READ)),
    db: Session = Depends(get_db),
):
    stmt = select(ProjectTalent).options(
        selectinload(ProjectTalent.candidate),
        selectinload(ProjectTalent.engineer),
    )
    if project_id:
        stmt = stmt.where(ProjectTalent.project_id == project_id)
    if talent_type:
        stmt = stmt.where(ProjectTalent.talent_type == talent_type)
    if stage:
        stmt = stmt.where(ProjectTalent.stage == stage)

    stmt = stmt.order_by(ProjectTalent.stage, desc(ProjectTalent.match_score), desc(ProjectTalent.created_at))
    talents, total = paginate(db, stmt, paging.page, paging.page_size)
    return ProjectTalentListResponse(project_talents=talents, **page_meta(total, paging.page, paging.page_size))


@router.post("", response_model=ProjectTalentResponse, status_code=201)
def create_project_talent(
    data: ProjectTalentCreate,
    user: User = Depends(require_permission(PROJECTS_WRITE)),
    db: Session = Depends(get_db),
):
    """Add talent to a project. The body carries candidate_id or engineer_id to match talent_type."""
    project = get_or_404(db, Project, data.project_id, "Project")
    check_project_access(user, project)

    if data.talent_type == TalentType.CANDIDATE:
        if not data.candidate_id:
            raise HTTPException(status_code=400, detail="candidate_id is required for CANDIDATE talent")
        candidate = get_or_404(db, Candidate, data.candidate_id, "Candidate")
        duplicate = select(ProjectTalent.id).where(
            ProjectTalent.project_id == project.id, ProjectTalent.candidate_id == candidate.id
        )
        if db.scalars(duplicate).first():
            raise HTTPException(status_code=400, detail="Candidate already added to this project")
        match = score_candidate(candidate, project)
        talent = ProjectTalent(candidate_id=candidate.id)
    else:
        if not data.engineer_id:
            raise HTTPException(status_code=400, detail="engineer_id is required for ENGINEER talent")
        engineer = get_or_404(db, Engineer, data.engineer_id, "Engineer")
        duplicate = select(ProjectTalent.id).where(
            ProjectTalent.project_id == project.id, ProjectTalent.engineer_id == engineer.id
        )
        if db.scalars(duplicate).first():
            raise HTTPException(status_code=400, detail="Engineer already added to this project")
        match = score_engineer(engineer, project, engineer.assignments)
        talent = ProjectTalent(engineer_id=engineer.id)

    now = datetime.now(timezone.utc)
    talent.project_id = project.id
    talent.talent_type = data.talent_type
    talent.stage = data.stage
    talent.match_score = match.score
    talent.match_reasons = match.reasons
    talent.owner_user_id = data.owner_user_id or user.id
    talent.notes = data.notes
    talent.last_stage_change_at = now
    db.add(talent)
    db.commit()

    log_activity(db, "ProjectTalent", talent.id, ActivityAction.CREATED, user.id)
    return talent


@router.get("/{talent_id}", response_model=ProjectTalentResponse)
def get_project_talent(
    talent_id: str,
    user: User = Depends(require_permission(PROJECTS_READ)),
    db: Session = Depends(get_db),
):
    return get_or_404(db, ProjectTalent, talent_id, "Project talent")


@router.put("/{talent_id}", response_model=ProjectTalentResponse)
def update_project_talent(
    talent_id: str,
    data: ProjectTalentEdit,
    user: User = Depends(require_permission(PROJECTS_WRITE)),
    db: Session = Depends(get_db),
):
    talent = get_or_404(db, ProjectTalent, talent_id, "Project talent")
    project = talent.project
    check_project_access(user, project)

    changes = data.model_dump(exclude_unset=True)
    old_stage = talent.stage
    new_stage = changes.get("stage")
    becomes_assigned = (
        new_stage == TalentStage.ASSIGNED
        and old_stage != TalentStage.ASSIGNED
        and talent.talent_type == TalentType.ENGINEER
        and talent.engineer is not None
    )
    if becomes_assigned and get_active_assignment(db, talent.engineer_id):
        raise HTTPException(status_code=400, detail=str(AssignmentConflict(talent.engineer_id)))

    before = entity_snapshot(talent)
    applied = apply_changes(talent, changes)
    if "stage" in applied:
        now = datetime.now(timezone.utc)
        talent.last_stage_change_at = now
        if talent.stage == TalentStage.SUBMITTED_TO_CLIENT and talent.submitted_at is None:
            talent.submitted_at = now
    if becomes_assigned:
        start_assignment(db, talent.engineer, project_id=project.id, customer_id=project.customer_id)
    after = entity_snapshot(talent)
    db.commit()

    if talent.stage != old_stage:
        log_activity(db, "ProjectTalent", talent.id, ActivityAction.STAGE_CHANGED, user.id,
                     {"stage": {"old": old_stage, "new": talent.stage}})
        if becomes_assigned:
            log_activity(db, "Engineer", talent.engineer_id, ActivityAction.ASSIGNED, user.id,
                         {"project_id": project.id})
    else:
        diff = create_diff(before, {key: after[key] for key in applied})
        log_activity(db, "ProjectTalent", talent.id, ActivityAction.UPDATED, user.id, diff)
    return talent


@router.delete("/{talent_id}", response_model=MessageResponse)
def delete_project_talent(
    talent_id: str,
    user: User = Depends(require_permission(PROJECTS_WRITE)),
    db: Session = Depends(get_db),
):
    talent = get_or_404(db, ProjectTalent, talent_id, "Project talent")
    check_project_access(user, talent.project)
    db.delete(talent)
    db.commit()

    log_activity(db, "ProjectTalent", talent_id, ActivityAction.DELETED, user.id)
    return MessageResponse(message="Talent removed from project")
