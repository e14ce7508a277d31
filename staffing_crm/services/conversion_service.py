"""
Conversion Service

Two one-way conversions:
- Candidate -> Engineer: a hired candidate becomes an internal engineer
  record linked back to the candidate.
- Pipeline project -> DevOps project: a won recruiting pipeline becomes a
  delivery project, either in place or as a new linked project, and the
  engineers hired through it get active assignments.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from staffing_crm.models import (
    ActivityAction,
    Candidate,
    CandidateStage,
    DevOpsStatus,
    Engineer,
    Project,
    ProjectAssignment,
    ProjectCategory,
    ProjectStatus,
    TalentStage,
    User,
)
from staffing_crm.services.activity_service import log_activity
from staffing_crm.services.assignment_service import get_active_assignment, start_assignment

logger = logging.getLogger(__name__)


class ConversionError(ValueError):
    """A conversion that is not allowed for the record's current state."""

    def __init__(self, message: str, engineer_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.engineer_id = engineer_id


# ============================================================
# CANDIDATE -> ENGINEER
# ============================================================

def convert_candidate_to_engineer(
    db: Session,
    candidate: Candidate,
    user: User,
    employment_status=None,
    employment_start_date: Optional[datetime] = None,
    manager_engineer_id: Optional[str] = None,
) -> Engineer:
    if candidate.linked_engineer is not None:
        raise ConversionError(
            "Candidate has already been converted to an engineer",
            engineer_id=candidate.linked_engineer.id,
        )

    engineer = Engineer(
        linked_candidate_id=candidate.id,
        full_name=candidate.full_name,
        email=candidate.email,
        phone=candidate.phone,
        location=candidate.location,
        title=candidate.title,
        technologies=list(candidate.technologies or []),
        years_experience=candidate.years_experience,
        seniority_level=candidate.seniority_level,
        employment_start_date=employment_start_date or datetime.now(timezone.utc),
        manager_engineer_id=manager_engineer_id,
    )
    if employment_status is not None:
        engineer.employment_status = employment_status
    db.add(engineer)
    db.commit()
    db.refresh(candidate)

    logger.info("Candidate %s converted to engineer %s", candidate.id, engineer.id)
    log_activity(db, "Candidate", candidate.id, ActivityAction.CONVERTED, user.id,
                 {"converted_to_engineer_id": engineer.id})
    log_activity(db, "Engineer", engineer.id, ActivityAction.CREATED, user.id,
                 {"converted_from_candidate_id": candidate.id})
    return engineer


# ============================================================
# PIPELINE -> DEVOPS
# ============================================================

def hired_engineer_ids(project: Project) -> List[str]:
    """
    Engineers hired through a pipeline project, in discovery order:
    converted candidates from HIRED project candidates, then engineers
    from HIRED project talents.
    """
    engineer_ids: List[str] = []
    for pc in project.project_candidates:
        if pc.stage == CandidateStage.HIRED and pc.candidate.linked_engineer:
            engineer_id = pc.candidate.linked_engineer.id
            if engineer_id not in engineer_ids:
                engineer_ids.append(engineer_id)
    for pt in project.project_talents:
        if pt.stage == TalentStage.HIRED and pt.engineer_id and pt.engineer_id not in engineer_ids:
            engineer_ids.append(pt.engineer_id)
    return engineer_ids


def _assign_hired_engineers(db: Session, engineer_ids: List[str], project: Project) -> List[str]:
    """Start an active assignment for each engineer that has none yet."""
    assigned = []
    for engineer_id in engineer_ids:
        engineer = db.get(Engineer, engineer_id)
        if engineer is None:
            continue
        if get_active_assignment(db, engineer_id):
            logger.info("Engineer %s already has an active assignment, skipping", engineer_id)
            continue
        start_assignment(db, engineer, project_id=project.id, customer_id=project.customer_id)
        assigned.append(engineer_id)
    return assigned


def convert_project_to_devops(
    db: Session,
    project: Project,
    user: User,
    create_new: bool = False,
    new_title: Optional[str] = None,
) -> Tuple[Project, List[str]]:
    """
    Returns (devops_project, engineer ids that received an assignment).
    Raises ConversionError for anything but a PIPELINE project.
    """
    if project.project_category != ProjectCategory.PIPELINE:
        raise ConversionError("Only Pipeline projects can be converted to DevOps")

    engineer_ids = hired_engineer_ids(project)
    old_status = project.status

    if create_new:
        devops = Project(
            customer_id=project.customer_id,
            title=new_title or f"{project.title} - Delivery",
            description=project.description,
            project_category=ProjectCategory.DEVOPS,
            dev_ops_status=DevOpsStatus.ACTIVE,
            technologies=list(project.technologies or []),
            priority=project.priority,
            source_pipeline_project_id=project.id,
        )
        devops.user_assignments = [ProjectAssignment(user_id=uid) for uid in project.assigned_user_ids]
        db.add(devops)
        db.flush()
        project.status = ProjectStatus.CLOSED_WON
    else:
        devops = project
        devops.project_category = ProjectCategory.DEVOPS
        devops.dev_ops_status = DevOpsStatus.ACTIVE
        devops.status = ProjectStatus.CLOSED_WON

    assigned = _assign_hired_engineers(db, engineer_ids, devops)
    db.commit()
    db.refresh(devops)

    if create_new:
        log_activity(db, "Project", devops.id, ActivityAction.CREATED, user.id,
                     {"converted_from": project.id})
        log_activity(db, "Project", project.id, ActivityAction.STAGE_CHANGED, user.id, {
            "status": {"old": old_status, "new": ProjectStatus.CLOSED_WON},
            "converted_to": devops.id,
        })
    else:
        log_activity(db, "Project", devops.id, ActivityAction.UPDATED, user.id, {
            "project_category": {"old": ProjectCategory.PIPELINE, "new": ProjectCategory.DEVOPS},
            "message": "Converted from Pipeline to DevOps",
        })

    return devops, assigned
