"""
Engineer Assignment Service

Keeps engineer employment status in step with assignments:
- an engineer has at most one ACTIVE assignment
- starting an active assignment marks the engineer ASSIGNED
- ending the last active assignment puts the engineer on the BENCH

Functions here stage changes on the session; callers commit.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from staffing_crm.models import AssignmentStatus, EmploymentStatus, Engineer, EngineerAssignment


class AssignmentConflict(Exception):
    """Raised when an engineer would end up with two active assignments."""

    def __init__(self, engineer_id: str):
        super().__init__("Engineer already has an active assignment. Complete or cancel it first.")
        self.engineer_id = engineer_id


def get_active_assignment(
    db: Session, engineer_id: str, exclude_id: Optional[str] = None
) -> Optional[EngineerAssignment]:
    stmt = select(EngineerAssignment).where(
        EngineerAssignment.engineer_id == engineer_id,
        EngineerAssignment.status == AssignmentStatus.ACTIVE,
    )
    if exclude_id:
        stmt = stmt.where(EngineerAssignment.id != exclude_id)
    return db.scalars(stmt.limit(1)).first()


def start_assignment(
    db: Session,
    engineer: Engineer,
    project_id: Optional[str] = None,
    customer_id: Optional[str] = None,
    role_title: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    status: AssignmentStatus = AssignmentStatus.ACTIVE,
    notes: Optional[str] = None,
) -> EngineerAssignment:
    """Create an assignment; raises AssignmentConflict for a second active one."""
    if status == AssignmentStatus.ACTIVE and get_active_assignment(db, engineer.id):
        raise AssignmentConflict(engineer.id)

    assignment = EngineerAssignment(
        engineer_id=engineer.id,
        project_id=project_id,
        customer_id=customer_id,
        role_title=role_title,
        start_date=start_date or datetime.now(timezone.utc),
        end_date=end_date,
        status=status,
        notes=notes,
    )
    db.add(assignment)

    if status == AssignmentStatus.ACTIVE:
        engineer.employment_status = EmploymentStatus.ASSIGNED
    return assignment


def change_assignment_status(
    db: Session, assignment: EngineerAssignment, new_status: AssignmentStatus
) -> None:
    """Move an assignment to a new status and update the engineer to match."""
    old_status = assignment.status
    if new_status == old_status:
        return

    engineer = assignment.engineer
    if new_status == AssignmentStatus.ACTIVE:
        if get_active_assignment(db, assignment.engineer_id, exclude_id=assignment.id):
            raise AssignmentConflict(assignment.engineer_id)
        assignment.status = new_status
        engineer.employment_status = EmploymentStatus.ASSIGNED
        return

    assignment.status = new_status
    if old_status == AssignmentStatus.ACTIVE:
        if not get_active_assignment(db, assignment.engineer_id, exclude_id=assignment.id):
            engineer.employment_status = EmploymentStatus.BENCH
