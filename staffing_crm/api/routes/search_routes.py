"""
Search Routes

GET /search - Search across customers, projects, candidates, engineers and users
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from staffing_crm.core.auth import get_current_user
from staffing_crm.db.database import get_db
from staffing_crm.models import User
from staffing_crm.schemas.schemas import SearchResponse
from staffing_crm.services.search_service import global_search

router = APIRouter(prefix="/search", tags=["Search"])


@router.get("", response_model=SearchResponse)
def search(
    q: str = Query(..., min_length=2, description="Search text"),
    limit: int = Query(5, ge=1, le=20, description="Results per section"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Only sections the caller's role may read are searched; the rest come back empty."""
    return global_search(db, user.role, q.strip(), limit)
