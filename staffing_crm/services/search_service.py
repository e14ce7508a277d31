"""
Global Search Service

One search box across customers, projects, candidates, engineers and users.
Each entity search is a plain case-insensitive substring match ordered by
recency. Candidates additionally try PostgreSQL full-text search over the
resume text first, and fall back to substring matching when the database
is not PostgreSQL or the full-text query finds nothing.
"""

import logging
import time
from typing import Dict, List

from sqlalchemy import desc, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from staffing_crm.core.permissions import (
    CANDIDATES_READ,
    CUSTOMERS_READ,
    ENGINEERS_READ,
    PROJECTS_READ,
    USERS_READ,
    has_permission,
)
from staffing_crm.models import Candidate, Customer, Engineer, Project, Role, User
from staffing_crm.utils.pagination import json_array_contains

logger = logging.getLogger(__name__)


def search_customers(db: Session, query: str, limit: int) -> List[dict]:
    stmt = (
        select(Customer)
        .where(or_(Customer.name.icontains(query, autoescape=True),
                   Customer.description.icontains(query, autoescape=True)))
        .order_by(desc(Customer.updated_at))
        .limit(limit)
    )
    return [
        {"id": c.id, "type": "customer", "name": c.name, "industry": c.industry, "description": c.description}
        for c in db.scalars(stmt)
    ]


def search_projects(db: Session, query: str, limit: int) -> List[dict]:
    stmt = (
        select(Project)
        .options(joinedload(Project.customer))
        .where(or_(Project.title.icontains(query, autoescape=True),
                   Project.description.icontains(query, autoescape=True)))
        .order_by(desc(Project.updated_at))
        .limit(limit)
    )
    return [
        {
            "id": p.id,
            "type": "project",
            "title": p.title,
            "status": p.status,
            "customer": {"id": p.customer.id, "name": p.customer.name},
        }
        for p in db.scalars(stmt)
    ]


def _full_text_candidates(db: Session, query: str, limit: int) -> List[dict]:
    vector = func.to_tsvector("english", func.coalesce(Candidate.resume_extracted_text, ""))
    ts_query = func.websearch_to_tsquery("english", query)
    rank = func.ts_rank(vector, ts_query).label("rank")
    stmt = (
        select(Candidate.id, Candidate.full_name, Candidate.title, Candidate.technologies, rank)
        .where(vector.op("@@")(ts_query))
        .order_by(desc("rank"))
        .limit(limit)
    )
    return [
        {
            "id": row.id,
            "type": "candidate",
            "full_name": row.full_name,
            "title": row.title,
            "technologies": row.technologies or [],
            "resume_match": True,
        }
        for row in db.execute(stmt)
    ]


def search_candidates(db: Session, query: str, limit: int) -> List[dict]:
    if db.get_bind().dialect.name == "postgresql":
        try:
            results = _full_text_candidates(db, query, limit)
            if results:
                return results
        except SQLAlchemyError:
            db.rollback()
            logger.warning("Full-text candidate search failed, using substring search", exc_info=True)

    stmt = (
        select(Candidate)
        .where(or_(
            Candidate.full_name.icontains(query, autoescape=True),
            Candidate.title.icontains(query, autoescape=True),
            json_array_contains(Candidate.technologies, query),
            Candidate.summary_public.icontains(query, autoescape=True),
            Candidate.resume_extracted_text.icontains(query, autoescape=True),
        ))
        .order_by(desc(Candidate.updated_at))
        .limit(limit)
    )
    lowered = query.lower()
    return [
        {
            "id": c.id,
            "type": "candidate",
            "full_name": c.full_name,
            "title": c.title,
            "technologies": c.technologies or [],
            "resume_match": lowered in (c.resume_extracted_text or "").lower(),
        }
        for c in db.scalars(stmt)
    ]


def search_engineers(db: Session, query: str, limit: int) -> List[dict]:
    stmt = (
        select(Engineer)
        .where(or_(
            Engineer.full_name.icontains(query, autoescape=True),
            Engineer.title.icontains(query, autoescape=True),
            json_array_contains(Engineer.technologies, query),
        ))
        .order_by(desc(Engineer.updated_at))
        .limit(limit)
    )
    return [
        {
            "id": e.id,
            "type": "engineer",
            "full_name": e.full_name,
            "title": e.title,
            "employment_status": e.employment_status,
            "technologies": e.technologies or [],
        }
        for e in db.scalars(stmt)
    ]


def search_users(db: Session, query: str, limit: int) -> List[dict]:
    stmt = (
        select(User)
        .where(User.is_active.is_(True))
        .where(or_(User.full_name.icontains(query, autoescape=True),
                   User.email.icontains(query, autoescape=True)))
        .order_by(User.full_name)
        .limit(limit)
    )
    return [
        {"id": u.id, "type": "user", "full_name": u.full_name, "email": u.email, "role": u.role}
        for u in db.scalars(stmt)
    ]


# Result section -> (permission required, search function)
SEARCH_SECTIONS = {
    "customers": (CUSTOMERS_READ, search_customers),
    "projects": (PROJECTS_READ, search_projects),
    "candidates": (CANDIDATES_READ, search_candidates),
    "engineers": (ENGINEERS_READ, search_engineers),
    "users": (USERS_READ, search_users),
}


def global_search(db: Session, role: Role, query: str, limit: int = 5) -> Dict:
    """
    Run every section search the role is allowed to read.
    Sections the role cannot read come back empty.
    """
    started = time.perf_counter()
    results: Dict[str, List[dict]] = {section: [] for section in SEARCH_SECTIONS}

    for section, (permission, search) in SEARCH_SECTIONS.items():
        if has_permission(role, permission):
            results[section] = search(db, query, limit)

    total_count = sum(len(items) for items in results.values())
    return {
        "results": results,
        "meta": {
            "total_count": total_count,
            "query_time_ms": int((time.perf_counter() - started) * 1000),
        },
    }
