"""
Staffing CRM
Internal tool for customers, recruitment pipelines, candidates and engineers.

Architecture:
- PostgreSQL (via SQLAlchemy ORM): all records
- FastAPI: JSON API with JWT authentication and role-based permissions
- Match scoring: deterministic rubric for talent vs. project requirements
"""

__version__ = "1.0.0"
