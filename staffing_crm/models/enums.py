from enum import Enum

__all__ = [
    "Role",
    "ProjectCategory",
    "ProjectStatus",
    "DevOpsStatus",
    "ProjectPriority",
    "SeniorityLevel",
    "RemotePolicy",
    "CandidateStage",
    "TalentStage",
    "TalentType",
    "EmploymentStatus",
    "AssignmentStatus",
    "UpdateVisibility",
    "ProjectUpdateVisibility",
    "ActivityAction",
    "SENIORITY_ORDER",
]


class Role(str, Enum):
    ADMIN = "ADMIN"
    SALES = "SALES"
    RECRUITER = "RECRUITER"
    CLIENT_MANAGER = "CLIENT_MANAGER"


class ProjectCategory(str, Enum):
    PIPELINE = "PIPELINE"
    DEVOPS = "DEVOPS"
    DEVELOPERS = "DEVELOPERS"


class ProjectStatus(str, Enum):
    INITIAL = "INITIAL"
    SOURCING = "SOURCING"
    INTERVIEWS = "INTERVIEWS"
    CLOSED_WON = "CLOSED_WON"
    CLOSED_LOST = "CLOSED_LOST"


class DevOpsStatus(str, Enum):
    ACTIVE = "ACTIVE"
    AT_RISK = "AT_RISK"
    BLOCKED = "BLOCKED"
    COMPLETED = "COMPLETED"


class ProjectPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class SeniorityLevel(str, Enum):
    JUNIOR = "JUNIOR"
    MID = "MID"
    SENIOR = "SENIOR"
    LEAD = "LEAD"


SENIORITY_ORDER = {
    SeniorityLevel.JUNIOR: 1,
    SeniorityLevel.MID: 2,
    SeniorityLevel.SENIOR: 3,
    SeniorityLevel.LEAD: 4,
}


class RemotePolicy(str, Enum):
    ONSITE = "ONSITE"
    HYBRID = "HYBRID"
    REMOTE = "REMOTE"


class CandidateStage(str, Enum):
    SHORTLISTED = "SHORTLISTED"
    CONTACTED = "CONTACTED"
    SUBMITTED_TO_CLIENT = "SUBMITTED_TO_CLIENT"
    INTERVIEWING = "INTERVIEWING"
    REJECTED = "REJECTED"
    HIRED = "HIRED"


class TalentStage(str, Enum):
    SHORTLISTED = "SHORTLISTED"
    CONTACTED = "CONTACTED"
    SUBMITTED_TO_CLIENT = "SUBMITTED_TO_CLIENT"
    INTERVIEWING = "INTERVIEWING"
    REJECTED = "REJECTED"
    HIRED = "HIRED"
    ASSIGNED = "ASSIGNED"


class TalentType(str, Enum):
    CANDIDATE = "CANDIDATE"
    ENGINEER = "ENGINEER"


class EmploymentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    BENCH = "BENCH"
    ASSIGNED = "ASSIGNED"
    ON_LEAVE = "ON_LEAVE"
    INACTIVE = "INACTIVE"


class AssignmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class UpdateVisibility(str, Enum):
    INTERNAL = "INTERNAL"
    MANAGER_ONLY = "MANAGER_ONLY"


class ProjectUpdateVisibility(str, Enum):
    INTERNAL = "INTERNAL"
    CUSTOMER_FACING = "CUSTOMER_FACING"


class ActivityAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    STAGE_CHANGED = "STAGE_CHANGED"
    UPLOADED_RESUME = "UPLOADED_RESUME"
    ASSIGNED = "ASSIGNED"
    UNASSIGNED = "UNASSIGNED"
    LOGIN = "LOGIN"
    CONVERTED = "CONVERTED"
    UPDATE_ADDED = "UPDATE_ADDED"
