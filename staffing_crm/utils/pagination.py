"""
Query helpers - pagination and JSON array filters.
"""

import math
from typing import Iterable, List, Tuple

from sqlalchemy import String, cast, false, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from staffing_crm.db.database import json_dumps

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0


def page_meta(total: int, page: int, page_size: int) -> dict:
    return {
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages(total, page_size),
    }


def paginate(db: Session, stmt: Select, page: int, page_size: int) -> Tuple[List, int]:
    """
    Run a select for one page of ORM entities.
    Returns (items, total) where total ignores the page window.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = db.scalar(count_stmt) or 0
    items = db.scalars(stmt.offset((page - 1) * page_size).limit(page_size)).unique().all()
    return list(items), total


def split_csv(value: str) -> List[str]:
    """'React, Node ,,' -> ['React', 'Node']"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def json_array_contains(column, value: str):
    """
    Case-insensitive element match on a JSON array of strings.
    The value is encoded the way the engine writes JSON columns.
    """
    return cast(column, String).icontains(json_dumps(value), autoescape=True)


def json_array_contains_any(column, values: Iterable[str]):
    clauses = [json_array_contains(column, v) for v in values]
    if not clauses:
        return false()
    return or_(*clauses)
