"""
Matching Routes

GET /matching - Rank candidates and engineers for a project

Talent already on the project (as a project candidate or project talent)
and INACTIVE engineers are left out.
"""

from collections import defaultdict
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from staffing_crm.api.deps import get_or_404
from staffing_crm.core.auth import require_permission
from staffing_crm.core.permissions import CANDIDATES_READ, PROJECTS_READ
from staffing_crm.db.database import get_db
from staffing_crm.models import (
    Candidate,
    EmploymentStatus,
    Engineer,
    EngineerAssignment,
    Project,
    ProjectCandidate,
    ProjectTalent,
    SeniorityLevel,
    TalentType,
    User,
)
from staffing_crm.schemas.schemas import MatchingResponse, MatchResultItem, ProjectBrief
from staffing_crm.services.matching_service import rank_all_talent, score_label
from staffing_crm.utils.pagination import json_array_contains_any, split_csv

router = APIRouter(prefix="/matching", tags=["Matching"])


def _excluded_ids(db: Session, project_id: str):
    candidate_ids = set(db.scalars(
        select(ProjectCandidate.candidate_id).where(ProjectCandidate.project_id == project_id)
    ))
    engineer_ids = set()
    talents = db.execute(
        select(ProjectTalent.candidate_id, ProjectTalent.engineer_id).where(ProjectTalent.project_id == project_id)
    )
    for candidate_id, engineer_id in talents:
        if candidate_id:
            candidate_ids.add(candidate_id)
        if engineer_id:
            engineer_ids.add(engineer_id)
    return candidate_ids, engineer_ids


def _to_item(match) -> MatchResultItem:
    talent = match.talent
    return MatchResultItem(
        talent_type=match.talent_type,
        id=talent.id,
        full_name=talent.full_name,
        title=talent.title,
        technologies=talent.technologies or [],
        seniority_level=talent.seniority_level,
        years_experience=talent.years_experience,
        location=talent.location,
        employment_status=getattr(talent, "employment_status", None),
        score=match.score,
        label=score_label(match.score),
        reasons=match.result.reasons,
    )


@router.get("", response_model=MatchingResponse)
def match_talent(
    project_id: str = Query(..., description="Project to match against"),
    min_score: int = Query(0, ge=0, le=100),
    technologies: Optional[str] = Query(None, description="Comma separated, matches any"),
    seniority_level: Optional[SeniorityLevel] = Query(None),
    talent_type: Optional[TalentType] = Query(None, description="Omit for candidates and engineers"),
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(require_permission(PROJECTS_READ, CANDIDATES_READ)),
    db: Session = Depends(get_db),
):
    """
    Rank talent for a project, best first.
    `total` counts every result at or above min_score, `returned` those within limit.
    """
    project = get_or_404(db, Project, project_id, "Project")
    exclude_candidates, exclude_engineers = _excluded_ids(db, project.id)
    tech_list = split_csv(technologies)

    candidates = []
    if talent_type in (None, TalentType.CANDIDATE):
        stmt = select(Candidate)
        if exclude_candidates:
            stmt = stmt.where(Candidate.id.not_in(exclude_candidates))
        if tech_list:
            stmt = stmt.where(json_array_contains_any(Candidate.technologies, tech_list))
        if seniority_level:
            stmt = stmt.where(Candidate.seniority_level == seniority_level)
        candidates = db.scalars(stmt).all()

    engineers = []
    assignments_by_engineer = defaultdict(list)
    if talent_type in (None, TalentType.ENGINEER):
        stmt = select(Engineer).where(Engineer.employment_status != EmploymentStatus.INACTIVE)
        if exclude_engineers:
            stmt = stmt.where(Engineer.id.not_in(exclude_engineers))
        if tech_list:
            stmt = stmt.where(json_array_contains_any(Engineer.technologies, tech_list))
        if seniority_level:
            stmt = stmt.where(Engineer.seniority_level == seniority_level)
        engineers = db.scalars(stmt).all()

        if engineers:
            history = db.scalars(
                select(EngineerAssignment).where(EngineerAssignment.engineer_id.in_([e.id for e in engineers]))
            )
            for assignment in history:
                assignments_by_engineer[assignment.engineer_id].append(assignment)

    ranked = [
        m for m in rank_all_talent(candidates, engineers, project, assignments_by_engineer)
        if m.score >= min_score
    ]
    results = [_to_item(m) for m in ranked[:limit]]

    return MatchingResponse(
        project=ProjectBrief.model_validate(project),
        results=results,
        total=len(ranked),
        returned=len(results),
        filters={
            "talent_type": talent_type.value if talent_type else "ALL",
            "min_score": min_score,
            "seniority_level": seniority_level.value if seniority_level else None,
            "technologies": tech_list or None,
        },
    )
