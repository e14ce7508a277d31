"""
Project Candidate Routes

GET /project-candidates - List pipeline entries (filter by project, candidate, stage)
POST /project-candidates - Add a candidate to a project's pipeline
GET /project-candidates/{entry_id} - Get pipeline entry
PUT /project-candidates/{entry_id} - Update stage, notes or client feedback
DELETE /project-candidates/{entry_id} - Remove from pipeline (admin)

The match score is computed once, when the candidate is added.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from staffing_crm.api.deps import PageParams, apply_changes, check_project_access, get_or_404
from staffing_crm.core.auth import require_permission
from staffing_crm.core.permissions import (
    PROJECT_CANDIDATES_DELETE,
    PROJECT_CANDIDATES_READ,
    PROJECT_CANDIDATES_WRITE,
)
from staffing_crm.db.database import get_db
from staffing_crm.models import (
    ActivityAction,
    Candidate,
    CandidateStage,
    Project,
    ProjectCandidate,
    User,
)
from staffing_crm.schemas.schemas import (
    MessageResponse,
    ProjectCandidateCreate,
    ProjectCandidateEdit,
    ProjectCandidateListResponse,
    ProjectCandidateResponse,
)
from staffing_crm.services.activity_service import create_diff, entity_snapshot, log_activity
from staffing_crm.services.matching_service import score_candidate
from staffing_crm.utils.pagination import page_meta, paginate

router = APIRouter(prefix="/project-candidates", tags=["Project Candidates"])


@router.get("", response_model=ProjectCandidateListResponse)
def list_project_candidates(
    project_id: Optional[str] = Query(None),
    candidate_id: Optional[str] = Query(None),
    stage: Optional[CandidateStage] = Query(None),
    paging: PageParams = Depends(),
    user: User = Depends(require_permission(PROJECT_CANDIDATES_READ)),
    db: Session = Depends(get_db),
):
    stmt = select(ProjectCandidate).options(
        selectinload(ProjectCandidate.project),
        selectinload(ProjectCandidate.candidate),
    )
    if project_id:
        stmt = stmt.where(ProjectCandidate.project_id == project_id)
    if candidate_id:
        stmt = stmt.where(ProjectCandidate.candidate_id == candidate_id)
    if stage:
        stmt = stmt.where(ProjectCandidate.stage == stage)

    stmt = stmt.order_by(ProjectCandidate.stage, desc(ProjectCandidate.match_score), desc(ProjectCandidate.created_at))
    entries, total = paginate(db, stmt, paging.page, paging.page_size)
    return ProjectCandidateListResponse(project_candidates=entries, **page_meta(total, paging.page, paging.page_size))


@router.post("", response_model=ProjectCandidateResponse, status_code=201)
def create_project_candidate(
    data: ProjectCandidateCreate,
    user: User = Depends(require_permission(PROJECT_CANDIDATES_WRITE)),
    db: Session = Depends(get_db),
):
    project = get_or_404(db, Project, data.project_id, "Project")
    check_project_access(user, project)
    candidate = get_or_404(db, Candidate, data.candidate_id, "Candidate")

    duplicate = db.scalars(
        select(ProjectCandidate.id).where(
            ProjectCandidate.project_id == project.id,
            ProjectCandidate.candidate_id == candidate.id,
        )
    ).first()
    if duplicate:
        raise HTTPException(status_code=400, detail="Candidate already added to this project")

    match = score_candidate(candidate, project)
    now = datetime.now(timezone.utc)
    entry = ProjectCandidate(
        project_id=project.id,
        candidate_id=candidate.id,
        stage=data.stage,
        match_score=match.score,
        match_reasons=match.reasons,
        recruiter_owner_user_id=data.recruiter_owner_user_id or user.id,
        notes=data.notes,
        last_stage_change_at=now,
        submitted_at=now if data.stage == CandidateStage.SUBMITTED_TO_CLIENT else None,
    )
    db.add(entry)
    db.commit()

    log_activity(db, "ProjectCandidate", entry.id, ActivityAction.CREATED, user.id)
    return entry


@router.get("/{entry_id}", response_model=ProjectCandidateResponse)
def get_project_candidate(
    entry_id: str,
    user: User = Depends(require_permission(PROJECT_CANDIDATES_READ)),
    db: Session = Depends(get_db),
):
    return get_or_404(db, ProjectCandidate, entry_id, "Project candidate")


@router.put("/{entry_id}", response_model=ProjectCandidateResponse)
def update_project_candidate(
    entry_id: str,
    data: ProjectCandidateEdit,
    user: User = Depends(require_permission(PROJECT_CANDIDATES_WRITE)),
    db: Session = Depends(get_db),
):
    """
    Update a pipeline entry.
    Any stage change stamps last_stage_change_at; the first move to
    SUBMITTED_TO_CLIENT also stamps submitted_at.
    """
    entry = get_or_404(db, ProjectCandidate, entry_id, "Project candidate")
    check_project_access(user, entry.project)

    changes = data.model_dump(exclude_unset=True)
    old_stage = entry.stage
    before = entity_snapshot(entry)
    applied = apply_changes(entry, changes)
    if "stage" in applied:
        now = datetime.now(timezone.utc)
        entry.last_stage_change_at = now
        if entry.stage == CandidateStage.SUBMITTED_TO_CLIENT and entry.submitted_at is None:
            entry.submitted_at = now
    after = entity_snapshot(entry)
    db.commit()

    if entry.stage != old_stage:
        log_activity(db, "ProjectCandidate", entry.id, ActivityAction.STAGE_CHANGED, user.id,
                     {"stage": {"old": old_stage, "new": entry.stage}})
    else:
        diff = create_diff(before, {key: after[key] for key in applied})
        log_activity(db, "ProjectCandidate", entry.id, ActivityAction.UPDATED, user.id, diff)
    return entry


@router.delete("/{entry_id}", response_model=MessageResponse)
def delete_project_candidate(
    entry_id: str,
    user: User = Depends(require_permission(PROJECT_CANDIDATES_DELETE)),
    db: Session = Depends(get_db),
):
    entry = get_or_404(db, ProjectCandidate, entry_id, "Project candidate")
    db.delete(entry)
    db.commit()

    log_activity(db, "ProjectCandidate", entry_id, ActivityAction.DELETED, user.id)
    return MessageResponse(message="Candidate removed from project")
