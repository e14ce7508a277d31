"""
Models module - ORM entities and the enum types they share with the API schemas.
"""

from staffing_crm.models.enums import *  # noqa: F401,F403
from staffing_crm.models.entities import (  # noqa: F401
    ActivityLog,
    Candidate,
    Customer,
    Engineer,
    EngineerAssignment,
    EngineerUpdate,
    Notification,
    Project,
    ProjectAssignment,
    ProjectCandidate,
    ProjectTalent,
    ProjectUpdate,
    User,
)
