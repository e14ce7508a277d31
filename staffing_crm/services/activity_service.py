"""
Activity Log Service

Records who did what to which entity, with a field-level diff for updates.
Logging is best effort: a failed insert is rolled back and logged, never
raised to the caller.
"""

import json
import logging
from typing import Any, Dict, Iterable, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from staffing_crm.models import ActivityAction, ActivityLog

logger = logging.getLogger(__name__)

IGNORED_DIFF_FIELDS = ("id", "created_at", "updated_at")

ACTION_LABELS: Dict[ActivityAction, str] = {
    ActivityAction.CREATED: "Created",
    ActivityAction.UPDATED: "Updated",
    ActivityAction.DELETED: "Deleted",
    ActivityAction.STAGE_CHANGED: "Stage Changed",
    ActivityAction.UPLOADED_RESUME: "Uploaded Resume",
    ActivityAction.ASSIGNED: "Assigned",
    ActivityAction.UNASSIGNED: "Unassigned",
    ActivityAction.LOGIN: "Logged In",
    ActivityAction.CONVERTED: "Converted to Engineer",
    ActivityAction.UPDATE_ADDED: "Added Update",
}


def entity_snapshot(entity, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """Column values of an ORM instance as JSON-ready data."""
    mapper = inspect(entity).mapper
    data = {
        attr.key: getattr(entity, attr.key)
        for attr in mapper.column_attrs
        if attr.key not in exclude
    }
    return jsonable_encoder(data)


def create_diff(old_data: Dict[str, Any], new_data: Dict[str, Any]) -> Optional[Dict[str, Dict[str, Any]]]:
    """
    Field-level diff between two snapshots.

    Only keys present in new_data are compared; values are compared by
    their JSON form. Returns None when nothing changed.
    """
    diff = {}
    for key, new_value in new_data.items():
        if key in IGNORED_DIFF_FIELDS:
            continue
        old_value = old_data.get(key)
        if _json_form(old_value) != _json_form(new_value):
            diff[key] = {"old": old_value, "new": new_value}
    return diff or None


def _json_form(value: Any) -> str:
    return json.dumps(jsonable_encoder(value), sort_keys=True)


def log_activity(
    db: Session,
    entity_type: str,
    entity_id: str,
    action: ActivityAction,
    performed_by_user_id: Optional[str] = None,
    diff: Optional[Dict[str, Any]] = None,
) -> Optional[ActivityLog]:
    """Insert and commit an activity log row. Returns None if it failed."""
    entry = ActivityLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        performed_by_user_id=performed_by_user_id,
        diff=jsonable_encoder(diff) if diff else None,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to log activity %s on %s %s", action, entity_type, entity_id)
        return None
    return entry


def format_action_label(action: ActivityAction) -> str:
    try:
        return ACTION_LABELS[ActivityAction(action)]
    except ValueError:
        return str(action)
