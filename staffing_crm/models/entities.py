"""
ORM entities.

Every record uses a string UUID primary key. List-valued fields (technologies,
tags, must-haves, ...) are JSON arrays so the same schema runs on PostgreSQL
and SQLite.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffing_crm.db.database import Base
from staffing_crm.models.enums import (
    ActivityAction,
    AssignmentStatus,
    CandidateStage,
    DevOpsStatus,
    EmploymentStatus,
    ProjectCategory,
    ProjectPriority,
    ProjectStatus,
    ProjectUpdateVisibility,
    RemotePolicy,
    Role,
    SeniorityLevel,
    TalentStage,
    TalentType,
    UpdateVisibility,
)


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _id_column() -> Mapped[str]:
    return mapped_column(String(36), primary_key=True, default=_uuid)


def _created_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


def _updated_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


project_update_mentions = Table(
    "project_update_mentions",
    Base.metadata,
    Column("project_update_id", ForeignKey("project_updates.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = _id_column()
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[Role] = mapped_column(Enum(Role, name="role"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[str] = _id_column()
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    industry: Mapped[Optional[str]] = mapped_column(String(120))
    website: Mapped[Optional[str]] = mapped_column(String(500))
    description: Mapped[Optional[str]] = mapped_column(Text)
    contacts: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    owner_user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    owner: Mapped[Optional[User]] = relationship()
    projects: Mapped[List["Project"]] = relationship(
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="desc(Project.created_at)",
        foreign_keys="Project.customer_id",
    )


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = _id_column()
    customer_id: Mapped[str] = mapped_column(ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    project_category: Mapped[ProjectCategory] = mapped_column(
        Enum(ProjectCategory, name="project_category"), default=ProjectCategory.PIPELINE, nullable=False
    )
    technologies: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    must_have: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    nice_to_have: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    seniority_level: Mapped[Optional[SeniorityLevel]] = mapped_column(Enum(SeniorityLevel, name="seniority_level"))
    years_experience_min: Mapped[Optional[int]] = mapped_column(Integer)
    location: Mapped[Optional[str]] = mapped_column(String(200))
    remote_policy: Mapped[Optional[RemotePolicy]] = mapped_column(Enum(RemotePolicy, name="remote_policy"))
    language_requirements: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    headcount: Mapped[Optional[int]] = mapped_column(Integer)
    priority: Mapped[ProjectPriority] = mapped_column(
        Enum(ProjectPriority, name="project_priority"), default=ProjectPriority.MEDIUM, nullable=False
    )
    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status"), default=ProjectStatus.INITIAL, nullable=False
    )
    dev_ops_status: Mapped[Optional[DevOpsStatus]] = mapped_column(Enum(DevOpsStatus, name="dev_ops_status"))
    source_pipeline_project_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    customer: Mapped[Customer] = relationship(back_populates="projects", foreign_keys=[customer_id])
    user_assignments: Mapped[List["ProjectAssignment"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )
    project_candidates: Mapped[List["ProjectCandidate"]] = relationship(
        back_populates="project", cascade="all, delete-orphan", order_by="desc(ProjectCandidate.created_at)"
    )
    project_talents: Mapped[List["ProjectTalent"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )
    updates: Mapped[List["ProjectUpdate"]] = relationship(
        back_populates="project", cascade="all, delete-orphan", order_by="desc(ProjectUpdate.created_at)"
    )
    engineer_assignments: Mapped[List["EngineerAssignment"]] = relationship(back_populates="project")
    source_pipeline_project: Mapped[Optional["Project"]] = relationship(remote_side=[id])

    @property
    def assigned_users(self) -> List[User]:
        return [a.user for a in self.user_assignments]

    @property
    def assigned_user_ids(self) -> List[str]:
        return [a.user_id for a in self.user_assignments]


class ProjectAssignment(Base):
    """A CRM user assigned to work on a project."""

    __tablename__ = "project_assignments"
    __table_args__ = (UniqueConstraint("project_id", "user_id"),)

    id: Mapped[str] = _id_column()
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = _created_at()

    project: Mapped[Project] = relationship(back_populates="user_assignments")
    user: Mapped[User] = relationship()


class Candidate(Base):
    __tablename__ = "candidates"

    id: Mapped[str] = _id_column()
    full_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(320))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    location: Mapped[Optional[str]] = mapped_column(String(200))
    title: Mapped[Optional[str]] = mapped_column(String(200))
    summary_public: Mapped[Optional[str]] = mapped_column(Text)
    summary_internal: Mapped[Optional[str]] = mapped_column(Text)
    technologies: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    years_experience: Mapped[Optional[int]] = mapped_column(Integer)
    seniority_level: Mapped[Optional[SeniorityLevel]] = mapped_column(Enum(SeniorityLevel, name="seniority_level"))
    languages: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    availability: Mapped[Optional[str]] = mapped_column(String(200))
    salary_expectation: Mapped[Optional[str]] = mapped_column(String(200))
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    interview_notes: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    resume_file_url: Mapped[Optional[str]] = mapped_column(String(500))
    resume_original_name: Mapped[Optional[str]] = mapped_column(String(300))
    resume_extracted_text: Mapped[Optional[str]] = mapped_column(Text)
    resume_uploaded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    project_candidates: Mapped[List["ProjectCandidate"]] = relationship(
        back_populates="candidate", cascade="all, delete-orphan", order_by="desc(ProjectCandidate.created_at)"
    )
    project_talents: Mapped[List["ProjectTalent"]] = relationship(
        back_populates="candidate", cascade="all, delete-orphan"
    )
    linked_engineer: Mapped[Optional["Engineer"]] = relationship(back_populates="linked_candidate", uselist=False)

    @property
    def linked_engineer_id(self) -> Optional[str]:
        return self.linked_engineer.id if self.linked_engineer else None


class Engineer(Base):
    __tablename__ = "engineers"

    id: Mapped[str] = _id_column()
    linked_candidate_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("candidates.id", ondelete="SET NULL"), unique=True
    )
    full_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(320))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    location: Mapped[Optional[str]] = mapped_column(String(200))
    title: Mapped[Optional[str]] = mapped_column(String(200))
    technologies: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    years_experience: Mapped[Optional[int]] = mapped_column(Integer)
    seniority_level: Mapped[Optional[SeniorityLevel]] = mapped_column(Enum(SeniorityLevel, name="seniority_level"))
    employment_status: Mapped[EmploymentStatus] = mapped_column(
        Enum(EmploymentStatus, name="employment_status"), default=EmploymentStatus.ACTIVE, nullable=False
    )
    employment_start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    manager_engineer_id: Mapped[Optional[str]] = mapped_column(ForeignKey("engineers.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    linked_candidate: Mapped[Optional[Candidate]] = relationship(back_populates="linked_engineer")
    manager: Mapped[Optional["Engineer"]] = relationship(remote_side=[id], back_populates="direct_reports")
    direct_reports: Mapped[List["Engineer"]] = relationship(back_populates="manager")
    assignments: Mapped[List["EngineerAssignment"]] = relationship(
        back_populates="engineer", cascade="all, delete-orphan", order_by="desc(EngineerAssignment.start_date)"
    )
    updates: Mapped[List["EngineerUpdate"]] = relationship(
        back_populates="engineer", cascade="all, delete-orphan", order_by="desc(EngineerUpdate.created_at)"
    )
    project_talents: Mapped[List["ProjectTalent"]] = relationship(
        back_populates="engineer", cascade="all, delete-orphan"
    )


class EngineerAssignment(Base):
    __tablename__ = "engineer_assignments"

    id: Mapped[str] = _id_column()
    engineer_id: Mapped[str] = mapped_column(ForeignKey("engineers.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id: Mapped[Optional[str]] = mapped_column(ForeignKey("projects.id", ondelete="SET NULL"))
    customer_id: Mapped[Optional[str]] = mapped_column(ForeignKey("customers.id", ondelete="SET NULL"))
    role_title: Mapped[Optional[str]] = mapped_column(String(200))
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    status: Mapped[AssignmentStatus] = mapped_column(
        Enum(AssignmentStatus, name="assignment_status"), default=AssignmentStatus.ACTIVE, nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    engineer: Mapped[Engineer] = relationship(back_populates="assignments")
    project: Mapped[Optional[Project]] = relationship(back_populates="engineer_assignments")
    customer: Mapped[Optional[Customer]] = relationship()


class EngineerUpdate(Base):
    __tablename__ = "engineer_updates"

    id: Mapped[str] = _id_column()
    engineer_id: Mapped[str] = mapped_column(ForeignKey("engineers.id", ondelete="CASCADE"), nullable=False, index=True)
    author_user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[UpdateVisibility] = mapped_column(
        Enum(UpdateVisibility, name="update_visibility"), default=UpdateVisibility.INTERNAL, nullable=False
    )
    created_at: Mapped[datetime] = _created_at()

    engineer: Mapped[Engineer] = relationship(back_populates="updates")
    author: Mapped[User] = relationship()


class ProjectCandidate(Base):
    __tablename__ = "project_candidates"
    __table_args__ = (UniqueConstraint("project_id", "candidate_id"),)

    id: Mapped[str] = _id_column()
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id: Mapped[str] = mapped_column(ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False)
    stage: Mapped[CandidateStage] = mapped_column(
        Enum(CandidateStage, name="candidate_stage"), default=CandidateStage.SHORTLISTED, nullable=False
    )
    match_score: Mapped[Optional[int]] = mapped_column(Integer)
    match_reasons: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    recruiter_owner_user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    client_feedback: Mapped[Optional[str]] = mapped_column(Text)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    last_stage_change_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    project: Mapped[Project] = relationship(back_populates="project_candidates")
    candidate: Mapped[Candidate] = relationship(back_populates="project_candidates")
    recruiter_owner: Mapped[Optional[User]] = relationship()


class ProjectTalent(Base):
    __tablename__ = "project_talents"
    __table_args__ = (
        UniqueConstraint("project_id", "candidate_id"),
        UniqueConstraint("project_id", "engineer_id"),
    )

    id: Mapped[str] = _id_column()
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    talent_type: Mapped[TalentType] = mapped_column(Enum(TalentType, name="talent_type"), nullable=False)
    candidate_id: Mapped[Optional[str]] = mapped_column(ForeignKey("candidates.id", ondelete="CASCADE"))
    engineer_id: Mapped[Optional[str]] = mapped_column(ForeignKey("engineers.id", ondelete="CASCADE"))
    stage: Mapped[TalentStage] = mapped_column(
        Enum(TalentStage, name="talent_stage"), default=TalentStage.SHORTLISTED, nullable=False
    )
    match_score: Mapped[Optional[int]] = mapped_column(Integer)
    match_reasons: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    owner_user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    client_feedback: Mapped[Optional[str]] = mapped_column(Text)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    last_stage_change_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    project: Mapped[Project] = relationship(back_populates="project_talents")
    candidate: Mapped[Optional[Candidate]] = relationship(back_populates="project_talents")
    engineer: Mapped[Optional[Engineer]] = relationship(back_populates="project_talents")
    owner: Mapped[Optional[User]] = relationship()


class ProjectUpdate(Base):
    __tablename__ = "project_updates"

    id: Mapped[str] = _id_column()
    project_id: Mapped[str] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    author_user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    visibility: Mapped[ProjectUpdateVisibility] = mapped_column(
        Enum(ProjectUpdateVisibility, name="project_update_visibility"),
        default=ProjectUpdateVisibility.INTERNAL,
        nullable=False,
    )
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    project: Mapped[Project] = relationship(back_populates="updates")
    author: Mapped[User] = relationship()
    mentioned_users: Mapped[List[User]] = relationship(secondary=project_update_mentions)
    notifications: Mapped[List["Notification"]] = relationship(
        back_populates="project_update", cascade="all, delete-orphan"
    )


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = _id_column()
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    link_url: Mapped[Optional[str]] = mapped_column(String(500))
    project_update_id: Mapped[Optional[str]] = mapped_column(ForeignKey("project_updates.id", ondelete="CASCADE"))
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = _created_at()

    project_update: Mapped[Optional[ProjectUpdate]] = relationship(back_populates="notifications")


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id: Mapped[str] = _id_column()
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    action: Mapped[ActivityAction] = mapped_column(Enum(ActivityAction, name="activity_action"), nullable=False)
    performed_by_user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    diff: Mapped[Optional[dict]] = mapped_column(JSON)
    created_at: Mapped[datetime] = _created_at()

    performed_by: Mapped[Optional[User]] = relationship()
