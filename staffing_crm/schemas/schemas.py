"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Response models read straight from ORM objects (from_attributes).
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

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


def _clean_list(values: Optional[List[str]]) -> List[str]:
    """Strip entries and drop blanks."""
    if not values:
        return []
    return [v.strip() for v in values if v and v.strip()]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PageMeta(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int


# ============================================================
# USER SCHEMAS
# ============================================================

class UserBrief(ORMModel):
    id: str
    full_name: str
    email: str
    role: Role

class UserCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Role = Role.RECRUITER
    is_active: bool = True

class UserEdit(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)
    role: Optional[Role] = None
    is_active: Optional[bool] = None

class UserResponse(ORMModel):
    id: str
    full_name: str
    email: str
    role: Role
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

class UserListResponse(PageMeta):
    users: List[UserResponse]


# ============================================================
# AUTH SCHEMAS
# ============================================================

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

class PermissionsResponse(BaseModel):
    role: Role
    role_display_name: str
    permissions: List[str]


# ============================================================
# CUSTOMER SCHEMAS
# ============================================================

class ContactPerson(BaseModel):
    name: str = Field(..., min_length=1)
    title: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None

class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    industry: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    contacts: List[ContactPerson] = []
    notes: Optional[str] = None
    tags: List[str] = []
    owner_user_id: Optional[str] = None

    clean_tags = field_validator("tags")(_clean_list)

class CustomerEdit(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    industry: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    contacts: Optional[List[ContactPerson]] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    owner_user_id: Optional[str] = None

class CustomerBrief(ORMModel):
    id: str
    name: str

class CustomerResponse(ORMModel):
    id: str
    name: str
    industry: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    contacts: List[ContactPerson] = []
    notes: Optional[str] = None
    tags: List[str] = []
    owner_user_id: Optional[str] = None
    owner: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime

class CustomerListResponse(PageMeta):
    customers: List[CustomerResponse]


# ============================================================
# PROJECT SCHEMAS
# ============================================================

class ProjectCreate(BaseModel):
    customer_id: str
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    project_category: ProjectCategory = ProjectCategory.PIPELINE
    technologies: List[str] = []
    must_have: List[str] = []
    nice_to_have: List[str] = []
    seniority_level: Optional[SeniorityLevel] = None
    years_experience_min: Optional[int] = Field(None, ge=0, le=60)
    location: Optional[str] = None
    remote_policy: Optional[RemotePolicy] = None
    language_requirements: List[str] = []
    headcount: Optional[int] = Field(None, ge=1)
    priority: ProjectPriority = ProjectPriority.MEDIUM
    status: ProjectStatus = ProjectStatus.INITIAL
    dev_ops_status: Optional[DevOpsStatus] = None
    assigned_user_ids: List[str] = []

    clean_lists = field_validator(
        "technologies", "must_have", "nice_to_have", "language_requirements"
    )(_clean_list)

class ProjectEdit(BaseModel):
    customer_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    project_category: Optional[ProjectCategory] = None
    technologies: Optional[List[str]] = None
    must_have: Optional[List[str]] = None
    nice_to_have: Optional[List[str]] = None
    seniority_level: Optional[SeniorityLevel] = None
    years_experience_min: Optional[int] = Field(None, ge=0, le=60)
    location: Optional[str] = None
    remote_policy: Optional[RemotePolicy] = None
    language_requirements: Optional[List[str]] = None
    headcount: Optional[int] = Field(None, ge=1)
    priority: Optional[ProjectPriority] = None
    status: Optional[ProjectStatus] = None
    dev_ops_status: Optional[DevOpsStatus] = None
    assigned_user_ids: Optional[List[str]] = None

class ProjectBrief(ORMModel):
    id: str
    title: str
    project_category: ProjectCategory
    status: ProjectStatus
    dev_ops_status: Optional[DevOpsStatus] = None
    priority: ProjectPriority
    customer_id: str

class ProjectResponse(ORMModel):
    id: str
    customer_id: str
    customer: Optional[CustomerBrief] = None
    title: str
    description: Optional[str] = None
    project_category: ProjectCategory
    technologies: List[str] = []
    must_have: List[str] = []
    nice_to_have: List[str] = []
    seniority_level: Optional[SeniorityLevel] = None
    years_experience_min: Optional[int] = None
    location: Optional[str] = None
    remote_policy: Optional[RemotePolicy] = None
    language_requirements: List[str] = []
    headcount: Optional[int] = None
    priority: ProjectPriority
    status: ProjectStatus
    dev_ops_status: Optional[DevOpsStatus] = None
    source_pipeline_project_id: Optional[str] = None
    assigned_users: List[UserBrief] = []
    created_at: datetime
    updated_at: datetime

class ProjectListResponse(PageMeta):
    projects: List[ProjectResponse]

class CustomerDetailResponse(CustomerResponse):
    projects: List[ProjectBrief] = []

class ProjectConvertRequest(BaseModel):
    create_new: bool = False
    new_title: Optional[str] = Field(None, min_length=1, max_length=300)

class ProjectConvertResponse(BaseModel):
    project: ProjectResponse
    source_project_id: str
    created_new: bool
    engineer_ids: List[str] = []
    message: str


# ============================================================
# PROJECT UPDATE SCHEMAS
# ============================================================

class ProjectUpdateCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    visibility: ProjectUpdateVisibility = ProjectUpdateVisibility.INTERNAL
    tags: List[str] = []
    mentioned_user_ids: List[str] = []

    clean_tags = field_validator("tags")(_clean_list)

class ProjectUpdateResponse(ORMModel):
    id: str
    project_id: str
    author: UserBrief
    content: str
    visibility: ProjectUpdateVisibility
    tags: List[str] = []
    mentioned_users: List[UserBrief] = []
    created_at: datetime

class ProjectUpdateListResponse(PageMeta):
    updates: List[ProjectUpdateResponse]


# ============================================================
# CANDIDATE SCHEMAS
# ============================================================

class InterviewNote(BaseModel):
    interviewer_name: str = Field(..., min_length=1)
    date: date
    notes: str = Field(..., min_length=1)
    score: Optional[int] = Field(None, ge=1, le=5)

class CandidateCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    summary_public: Optional[str] = None
    summary_internal: Optional[str] = None
    technologies: List[str] = []
    years_experience: Optional[int] = Field(None, ge=0, le=60)
    seniority_level: Optional[SeniorityLevel] = None
    languages: List[str] = []
    availability: Optional[str] = None
    salary_expectation: Optional[str] = None
    tags: List[str] = []
    interview_notes: List[InterviewNote] = []
    resume_file_url: Optional[str] = None
    resume_original_name: Optional[str] = None
    resume_extracted_text: Optional[str] = None

    clean_lists = field_validator("technologies", "languages", "tags")(_clean_list)

class CandidateEdit(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    summary_public: Optional[str] = None
    summary_internal: Optional[str] = None
    technologies: Optional[List[str]] = None
    years_experience: Optional[int] = Field(None, ge=0, le=60)
    seniority_level: Optional[SeniorityLevel] = None
    languages: Optional[List[str]] = None
    availability: Optional[str] = None
    salary_expectation: Optional[str] = None
    tags: Optional[List[str]] = None
    interview_notes: Optional[List[InterviewNote]] = None
    resume_file_url: Optional[str] = None
    resume_original_name: Optional[str] = None
    resume_extracted_text: Optional[str] = None

class CandidateBrief(ORMModel):
    id: str
    full_name: str
    title: Optional[str] = None
    technologies: List[str] = []
    seniority_level: Optional[SeniorityLevel] = None
    years_experience: Optional[int] = None

class CandidatePipelineEntry(ORMModel):
    id: str
    project_id: str
    stage: CandidateStage
    match_score: Optional[int] = None

class CandidateLimitedResponse(ORMModel):
    """Candidate fields visible to every role."""
    id: str
    full_name: str
    location: Optional[str] = None
    title: Optional[str] = None
    summary_public: Optional[str] = None
    technologies: List[str] = []
    years_experience: Optional[int] = None
    seniority_level: Optional[SeniorityLevel] = None
    languages: List[str] = []
    tags: List[str] = []
    is_limited_view: bool = True
    created_at: datetime
    updated_at: datetime

class CandidateResponse(CandidateLimitedResponse):
    email: Optional[str] = None
    phone: Optional[str] = None
    summary_internal: Optional[str] = None
    availability: Optional[str] = None
    salary_expectation: Optional[str] = None
    interview_notes: List[InterviewNote] = []
    resume_file_url: Optional[str] = None
    resume_original_name: Optional[str] = None
    resume_extracted_text: Optional[str] = None
    resume_uploaded_at: Optional[datetime] = None
    is_limited_view: bool = False

class CandidateDetailResponse(CandidateResponse):
    linked_engineer_id: Optional[str] = None
    project_candidates: List[CandidatePipelineEntry] = []

class CandidateListResponse(PageMeta):
    candidates: List[Union[CandidateResponse, CandidateLimitedResponse]]

class CandidateConvertRequest(BaseModel):
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE
    employment_start_date: Optional[datetime] = None
    manager_engineer_id: Optional[str] = None


# ============================================================
# ENGINEER SCHEMAS
# ============================================================

class EngineerCreate(BaseModel):
    linked_candidate_id: Optional[str] = None
    full_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    technologies: List[str] = []
    years_experience: Optional[int] = Field(None, ge=0, le=60)
    seniority_level: Optional[SeniorityLevel] = None
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE
    employment_start_date: Optional[datetime] = None
    manager_engineer_id: Optional[str] = None

    clean_techs = field_validator("technologies")(_clean_list)

class EngineerEdit(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    technologies: Optional[List[str]] = None
    years_experience: Optional[int] = Field(None, ge=0, le=60)
    seniority_level: Optional[SeniorityLevel] = None
    employment_status: Optional[EmploymentStatus] = None
    employment_start_date: Optional[datetime] = None
    manager_engineer_id: Optional[str] = None

class EngineerBrief(ORMModel):
    id: str
    full_name: str
    title: Optional[str] = None
    technologies: List[str] = []
    seniority_level: Optional[SeniorityLevel] = None
    years_experience: Optional[int] = None
    employment_status: EmploymentStatus

class AssignmentCreate(BaseModel):
    project_id: Optional[str] = None
    customer_id: Optional[str] = None
    role_title: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    notes: Optional[str] = None

class AssignmentEdit(BaseModel):
    project_id: Optional[str] = None
    customer_id: Optional[str] = None
    role_title: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[AssignmentStatus] = None
    notes: Optional[str] = None

class AssignmentResponse(ORMModel):
    id: str
    engineer_id: str
    project_id: Optional[str] = None
    customer_id: Optional[str] = None
    project: Optional[ProjectBrief] = None
    customer: Optional[CustomerBrief] = None
    role_title: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    status: AssignmentStatus
    notes: Optional[str] = None
    created_at: datetime

class AssignmentListResponse(BaseModel):
    assignments: List[AssignmentResponse]
    total: int

class EngineerUpdateCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    visibility: UpdateVisibility = UpdateVisibility.INTERNAL

class EngineerUpdateResponse(ORMModel):
    id: str
    engineer_id: str
    author: UserBrief
    content: str
    visibility: UpdateVisibility
    created_at: datetime

class EngineerUpdateListResponse(BaseModel):
    updates: List[EngineerUpdateResponse]
    total: int

class EngineerResponse(ORMModel):
    id: str
    linked_candidate_id: Optional[str] = None
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    technologies: List[str] = []
    years_experience: Optional[int] = None
    seniority_level: Optional[SeniorityLevel] = None
    employment_status: EmploymentStatus
    employment_start_date: Optional[datetime] = None
    manager_engineer_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class EngineerDetailResponse(EngineerResponse):
    manager: Optional[EngineerBrief] = None
    direct_reports: List[EngineerBrief] = []
    assignments: List[AssignmentResponse] = []
    updates: List[EngineerUpdateResponse] = []

class EngineerListResponse(PageMeta):
    engineers: List[EngineerResponse]


# ============================================================
# PROJECT CANDIDATE SCHEMAS
# ============================================================

class ProjectCandidateCreate(BaseModel):
    project_id: str
    candidate_id: str
    stage: CandidateStage = CandidateStage.SHORTLISTED
    recruiter_owner_user_id: Optional[str] = None
    notes: Optional[str] = None

class ProjectCandidateEdit(BaseModel):
    stage: Optional[CandidateStage] = None
    recruiter_owner_user_id: Optional[str] = None
    notes: Optional[str] = None
    client_feedback: Optional[str] = None

class ProjectCandidateResponse(ORMModel):
    id: str
    project_id: str
    candidate_id: str
    project: Optional[ProjectBrief] = None
    candidate: Optional[CandidateBrief] = None
    stage: CandidateStage
    match_score: Optional[int] = None
    match_reasons: List[str] = []
    recruiter_owner_user_id: Optional[str] = None
    notes: Optional[str] = None
    client_feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    last_stage_change_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

class ProjectCandidateListResponse(PageMeta):
    project_candidates: List[ProjectCandidateResponse]


# ============================================================
# PROJECT TALENT SCHEMAS
# ============================================================

class ProjectTalentCreate(BaseModel):
    project_id: str
    talent_type: TalentType
    candidate_id: Optional[str] = None
    engineer_id: Optional[str] = None
    stage: TalentStage = TalentStage.SHORTLISTED
    owner_user_id: Optional[str] = None
    notes: Optional[str] = None

class ProjectTalentEdit(BaseModel):
    stage: Optional[TalentStage] = None
    owner_user_id: Optional[str] = None
    notes: Optional[str] = None
    client_feedback: Optional[str] = None

class ProjectTalentResponse(ORMModel):
    id: str
    project_id: str
    talent_type: TalentType
    candidate_id: Optional[str] = None
    engineer_id: Optional[str] = None
    candidate: Optional[CandidateBrief] = None
    engineer: Optional[EngineerBrief] = None
    stage: TalentStage
    match_score: Optional[int] = None
    match_reasons: List[str] = []
    owner_user_id: Optional[str] = None
    notes: Optional[str] = None
    client_feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    last_stage_change_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

class ProjectTalentListResponse(PageMeta):
    project_talents: List[ProjectTalentResponse]

class ProjectDetailResponse(ProjectResponse):
    project_candidates: List[ProjectCandidateResponse] = []
    project_talents: List[ProjectTalentResponse] = []
    engineer_assignments: List[AssignmentResponse] = []


# ============================================================
# MATCHING SCHEMAS
# ============================================================

class MatchResultItem(BaseModel):
    talent_type: TalentType
    id: str
    full_name: str
    title: Optional[str] = None
    technologies: List[str] = []
    seniority_level: Optional[SeniorityLevel] = None
    years_experience: Optional[int] = None
    location: Optional[str] = None
    employment_status: Optional[EmploymentStatus] = None
    score: int
    label: str
    reasons: List[str] = []

class MatchingResponse(BaseModel):
    project: ProjectBrief
    results: List[MatchResultItem]
    total: int
    returned: int
    filters: Dict[str, Any]


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationResponse(ORMModel):
    id: str
    type: str
    title: str
    message: str
    link_url: Optional[str] = None
    project_update_id: Optional[str] = None
    is_read: bool
    created_at: datetime

class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int

class NotificationMarkRequest(BaseModel):
    notification_ids: Optional[List[str]] = None
    mark_all_as_read: bool = False

class NotificationMarkResponse(BaseModel):
    updated: int
    unread_count: int


# ============================================================
# ACTIVITY SCHEMAS
# ============================================================

class ActivityLogResponse(ORMModel):
    id: str
    entity_type: str
    entity_id: str
    action: ActivityAction
    action_label: str = ""
    performed_by: Optional[UserBrief] = None
    diff: Optional[Dict[str, Any]] = None
    created_at: datetime

class ActivityListResponse(PageMeta):
    activities: List[ActivityLogResponse]


# ============================================================
# SEARCH SCHEMAS
# ============================================================

class CustomerSearchResult(BaseModel):
    id: str
    type: str = "customer"
    name: str
    industry: Optional[str] = None
    description: Optional[str] = None

class ProjectSearchResult(BaseModel):
    id: str
    type: str = "project"
    title: str
    status: ProjectStatus
    customer: CustomerBrief

class CandidateSearchResult(BaseModel):
    id: str
    type: str = "candidate"
    full_name: str
    title: Optional[str] = None
    technologies: List[str] = []
    resume_match: bool = False

class EngineerSearchResult(BaseModel):
    id: str
    type: str = "engineer"
    full_name: str
    title: Optional[str] = None
    employment_status: EmploymentStatus
    technologies: List[str] = []

class UserSearchResult(BaseModel):
    id: str
    type: str = "user"
    full_name: str
    email: str
    role: Role

class SearchResults(BaseModel):
    customers: List[CustomerSearchResult] = []
    projects: List[ProjectSearchResult] = []
    candidates: List[CandidateSearchResult] = []
    engineers: List[EngineerSearchResult] = []
    users: List[UserSearchResult] = []

class SearchMeta(BaseModel):
    total_count: int
    query_time_ms: int

class SearchResponse(BaseModel):
    results: SearchResults
    meta: SearchMeta


# ============================================================
# UPLOAD SCHEMAS
# ============================================================

class UploadResponse(BaseModel):
    filename: str
    url: str
    original_name: str
    size: int
    content_type: str
    extracted_text: str = ""


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str

class HealthResponse(BaseModel):
    status: str
    database: str
