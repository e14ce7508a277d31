"""
Candidate Routes

GET /candidates - List candidates with filters
POST /candidates - Create candidate
GET /candidates/{candidate_id} - Get candidate (full or limited view)
PUT /candidates/{candidate_id} - Update candidate
DELETE /candidates/{candidate_id} - Delete candidate (admin)
POST /candidates/{candidate_id}/interview-notes - Add interview note
POST /candidates/{candidate_id}/resume - Upload resume file
POST /candidates/{candidate_id}/convert - Convert to engineer (admin, recruiter)

Roles without candidates:read:full get the limited view, which leaves out
contact details, internal notes, compensation and resume data. Client
managers also get it for candidates outside their assigned projects.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import desc, or_, select
from sqlalchemy.orm import Session

from staffing_crm.api.deps import PageParams, apply_changes, get_or_404
from staffing_crm.core.auth import require_permission, require_role
from staffing_crm.core.permissions import (
    CANDIDATES_DELETE,
    CANDIDATES_READ,
    CANDIDATES_WRITE,
    can_access_full_candidate_info,
)
from staffing_crm.db.database import get_db
from staffing_crm.models import (
    ActivityAction,
    Candidate,
    Engineer,
    Project,
    ProjectAssignment,
    ProjectCandidate,
    ProjectTalent,
    Role,
    SeniorityLevel,
    User,
)
from staffing_crm.schemas.schemas import (
    CandidateConvertRequest,
    CandidateCreate,
    CandidateDetailResponse,
    CandidateEdit,
    CandidateLimitedResponse,
    CandidateListResponse,
    CandidateResponse,
    EngineerResponse,
    InterviewNote,
    MessageResponse,
)
from staffing_crm.services.activity_service import create_diff, entity_snapshot, log_activity
from staffing_crm.services.conversion_service import ConversionError, convert_candidate_to_engineer
from staffing_crm.utils.file_upload import save_upload
from staffing_crm.utils.pagination import json_array_contains_any, page_meta, paginate, split_csv

router = APIRouter(prefix="/candidates", tags=["Candidates"])


def _in_assigned_project(db: Session, candidate_id: str, user_id: str) -> bool:
    """Whether the candidate sits in the pipeline of a project assigned to the user."""
    assigned = Project.user_assignments.any(ProjectAssignment.user_id == user_id)
    via_candidates = select(ProjectCandidate.id).join(ProjectCandidate.project).where(
        ProjectCandidate.candidate_id == candidate_id, assigned
    )
    via_talents = select(ProjectTalent.id).join(ProjectTalent.project).where(
        ProjectTalent.candidate_id == candidate_id, assigned
    )
    return (
        db.scalars(via_candidates.limit(1)).first() is not None
        or db.scalars(via_talents.limit(1)).first() is not None
    )


def _full_view_allowed(db: Session, user: User, candidate_id: str) -> bool:
    if not can_access_full_candidate_info(user.role):
        return False
    if user.role == Role.CLIENT_MANAGER:
        return _in_assigned_project(db, candidate_id, user.id)
    return True


@router.get("", response_model=None)
def list_candidates(
    search: Optional[str] = Query(None, description="Search in name, title and public summary"),
    technologies: Optional[str] = Query(None, description="Comma separated, matches any"),
    seniority_level: Optional[SeniorityLevel] = Query(None),
    min_years_experience: Optional[int] = Query(None, ge=0),
    max_years_experience: Optional[int] = Query(None, ge=0),
    location: Optional[str] = Query(None),
    paging: PageParams = Depends(),
    user: User = Depends(require_permission(CANDIDATES_READ)),
    db: Session = Depends(get_db),
) -> CandidateListResponse:
    stmt = select(Candidate)
    if search:
        stmt = stmt.where(or_(
            Candidate.full_name.icontains(search, autoescape=True),
            Candidate.title.icontains(search, autoescape=True),
            Candidate.summary_public.icontains(search, autoescape=True),
        ))
    tech_list = split_csv(technologies)
    if tech_list:
        stmt = stmt.where(json_array_contains_any(Candidate.technologies, tech_list))
    if seniority_level:
        stmt = stmt.where(Candidate.seniority_level == seniority_level)
    if min_years_experience is not None:
        stmt = stmt.where(Candidate.years_experience >= min_years_experience)
    if max_years_experience is not None:
        stmt = stmt.where(Candidate.years_experience <= max_years_experience)
    if location:
        stmt = stmt.where(Candidate.location.icontains(location, autoescape=True))

    candidates, total = paginate(db, stmt.order_by(desc(Candidate.updated_at)), paging.page, paging.page_size)

    view = CandidateResponse if can_access_full_candidate_info(user.role) else CandidateLimitedResponse
    return CandidateListResponse(
        candidates=[view.model_validate(c) for c in candidates],
        **page_meta(total, paging.page, paging.page_size),
    )


@router.post("", response_model=CandidateResponse, status_code=201)
def create_candidate(
    data: CandidateCreate,
    user: User = Depends(require_permission(CANDIDATES_WRITE)),
    db: Session = Depends(get_db),
):
    fields = data.model_dump()
    fields["interview_notes"] = jsonable_encoder(data.interview_notes)
    candidate = Candidate(**fields)
    if data.resume_file_url:
        candidate.resume_uploaded_at = datetime.now(timezone.utc)
    db.add(candidate)
    db.commit()

    log_activity(db, "Candidate", candidate.id, ActivityAction.CREATED, user.id)
    return candidate


@router.get("/{candidate_id}", response_model=None)
def get_candidate(
    candidate_id: str,
    user: User = Depends(require_permission(CANDIDATES_READ)),
    db: Session = Depends(get_db),
):
    candidate = get_or_404(db, Candidate, candidate_id, "Candidate")
    if _full_view_allowed(db, user, candidate_id):
        return CandidateDetailResponse.model_validate(candidate)
    return CandidateLimitedResponse.model_validate(candidate)


@router.put("/{candidate_id}", response_model=CandidateResponse)
def update_candidate(
    candidate_id: str,
    data: CandidateEdit,
    user: User = Depends(require_permission(CANDIDATES_WRITE)),
    db: Session = Depends(get_db),
):
    candidate = get_or_404(db, Candidate, candidate_id, "Candidate")

    before = entity_snapshot(candidate)
    old_resume_url = candidate.resume_file_url
    applied = apply_changes(candidate, data.model_dump(exclude_unset=True))
    if candidate.resume_file_url and candidate.resume_file_url != old_resume_url:
        candidate.resume_uploaded_at = datetime.now(timezone.utc)
    after = entity_snapshot(candidate)
    db.commit()

    diff = create_diff(before, {key: after[key] for key in applied})
    log_activity(db, "Candidate", candidate.id, ActivityAction.UPDATED, user.id, diff)
    return candidate


@router.delete("/{candidate_id}", response_model=MessageResponse)
def delete_candidate(
    candidate_id: str,
    user: User = Depends(require_permission(CANDIDATES_DELETE)),
    db: Session = Depends(get_db),
):
    candidate = get_or_404(db, Candidate, candidate_id, "Candidate")
    db.delete(candidate)
    db.commit()

    log_activity(db, "Candidate", candidate_id, ActivityAction.DELETED, user.id)
    return MessageResponse(message="Candidate deleted successfully")


@router.post("/{candidate_id}/interview-notes", response_model=CandidateResponse, status_code=201)
def add_interview_note(
    candidate_id: str,
    note: InterviewNote,
    user: User = Depends(require_permission(CANDIDATES_WRITE)),
    db: Session = Depends(get_db),
):
    candidate = get_or_404(db, Candidate, candidate_id, "Candidate")
    candidate.interview_notes = [*(candidate.interview_notes or []), jsonable_encoder(note)]
    db.commit()

    log_activity(db, "Candidate", candidate.id, ActivityAction.UPDATED, user.id,
                 {"interview_note_added": jsonable_encoder(note)})
    return candidate


@router.post("/{candidate_id}/resume", response_model=CandidateResponse)
def upload_candidate_resume(
    candidate_id: str,
    file: UploadFile = File(...),
    user: User = Depends(require_permission(CANDIDATES_WRITE)),
    db: Session = Depends(get_db),
):
    """Store a PDF/DOCX resume on the candidate and keep its extracted text for matching."""
    candidate = get_or_404(db, Candidate, candidate_id, "Candidate")
    stored = save_upload(file)

    candidate.resume_file_url = stored["url"]
    candidate.resume_original_name = stored["original_name"]
    candidate.resume_extracted_text = stored["extracted_text"]
    candidate.resume_uploaded_at = datetime.now(timezone.utc)
    db.commit()

    log_activity(db, "Candidate", candidate.id, ActivityAction.UPLOADED_RESUME, user.id,
                 {"filename": stored["filename"], "original_name": stored["original_name"]})
    return candidate


@router.post("/{candidate_id}/convert", response_model=EngineerResponse, status_code=201)
def convert_candidate(
    candidate_id: str,
    data: CandidateConvertRequest,
    user: User = Depends(require_role(Role.ADMIN, Role.RECRUITER)),
    db: Session = Depends(get_db),
):
    """Create an engineer from a candidate. A candidate converts at most once."""
    candidate = get_or_404(db, Candidate, candidate_id, "Candidate")
    if data.manager_engineer_id:
        get_or_404(db, Engineer, data.manager_engineer_id, "Manager engineer")

    try:
        engineer = convert_candidate_to_engineer(
            db,
            candidate,
            user,
            employment_status=data.employment_status,
            employment_start_date=data.employment_start_date,
            manager_engineer_id=data.manager_engineer_id,
        )
    except ConversionError as e:
        return JSONResponse(status_code=400, content={"detail": e.message, "engineer_id": e.engineer_id})
    return engineer
