"""
Shared route dependencies and lookups.
"""

from typing import Any, Dict, Type, TypeVar

from fastapi import HTTPException, Query
from fastapi.encoders import jsonable_encoder
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from staffing_crm.db.database import Base
from staffing_crm.models import Role
from staffing_crm.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

ModelT = TypeVar("ModelT", bound=Base)


def get_or_404(db: Session, model: Type[ModelT], entity_id: str, name: str) -> ModelT:
    """Load an entity by primary key or raise 404 '<name> not found'."""
    entity = db.get(model, entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"{name} not found")
    return entity


class PageParams:
    """page / page_size query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    ):
        self.page = page
        self.page_size = page_size


def apply_changes(entity, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Set attributes from a partial update and return what was applied.
    Nulls for NOT NULL columns are ignored; list/dict values are stored JSON-ready.
    """
    columns = inspect(entity).mapper.columns
    applied = {}
    for key, value in changes.items():
        if value is None and key in columns and not columns[key].nullable:
            continue
        if isinstance(value, (list, dict)):
            value = jsonable_encoder(value)
        setattr(entity, key, value)
        applied[key] = value
    return applied


def check_project_access(user, project) -> None:
    """Client managers only reach projects they are assigned to."""
    if user.role == Role.CLIENT_MANAGER and user.id not in project.assigned_user_ids:
        raise HTTPException(status_code=403, detail="Forbidden")
