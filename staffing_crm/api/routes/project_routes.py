"""
Project Routes

GET /projects - List projects with filters
POST /projects - Create project
GET /projects/{project_id} - Get project with its pipeline and assignments
PUT /projects/{project_id} - Update project
DELETE /projects/{project_id} - Delete project (admin)
POST /projects/{project_id}/convert - Convert pipeline project to DevOps
GET /projects/{project_id}/updates - List project updates
POST /projects/{project_id}/updates - Post project update, notify mentions

Client managers only see and edit projects they are assigned to.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import desc, or_, select
from sqlalchemy.orm import Session, selectinload

from staffing_crm.api.deps import PageParams, apply_changes, check_project_access, get_or_404
from staffing_crm.core.auth import require_permission
from staffing_crm.core.permissions import (
    PROJECT_UPDATES_READ,
    PROJECT_UPDATES_WRITE,
    PROJECTS_DELETE,
    PROJECTS_READ,
    PROJECTS_WRITE,
)
from staffing_crm.db.database import get_db
from staffing_crm.models import (
    ActivityAction,
    Customer,
    DevOpsStatus,
    Notification,
    Project,
    ProjectAssignment,
    ProjectCategory,
    ProjectPriority,
    ProjectStatus,
    Role,
    User,
)
from staffing_crm.models import ProjectUpdate as ProjectUpdateEntry
from staffing_crm.schemas.schemas import (
    MessageResponse,
    ProjectConvertRequest,
    ProjectConvertResponse,
    ProjectCreate,
    ProjectDetailResponse,
    ProjectEdit,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdateCreate,
    ProjectUpdateListResponse,
    ProjectUpdateResponse,
)
from staffing_crm.services.activity_service import create_diff, entity_snapshot, log_activity
from staffing_crm.services.conversion_service import ConversionError, convert_project_to_devops
from staffing_crm.utils.pagination import page_meta, paginate

router = APIRouter(prefix="/projects", tags=["Projects"])


def _load_users(db: Session, user_ids: List[str]) -> List[User]:
    """Users for the given ids, 400 if any id is unknown."""
    unique_ids = list(dict.fromkeys(user_ids))
    if not unique_ids:
        return []
    users = db.scalars(select(User).where(User.id.in_(unique_ids))).all()
    if len(users) != len(unique_ids):
        raise HTTPException(status_code=400, detail="Unknown user id in assigned users")
    return list(users)


def _set_assigned_users(project: Project, user_ids: List[str]) -> None:
    """Replace the project's assigned users, keeping rows for users that stay."""
    wanted = list(dict.fromkeys(user_ids))
    project.user_assignments = [a for a in project.user_assignments if a.user_id in wanted]
    present = set(project.assigned_user_ids)
    for user_id in wanted:
        if user_id not in present:
            project.user_assignments.append(ProjectAssignment(user_id=user_id))


# ============================================================
# PROJECT CRUD
# ============================================================

@router.get("", response_model=ProjectListResponse)
def list_projects(
    search: Optional[str] = Query(None, description="Search in title and description"),
    customer_id: Optional[str] = Query(None),
    category: Optional[ProjectCategory] = Query(None),
    status: Optional[ProjectStatus] = Query(None),
    dev_ops_status: Optional[DevOpsStatus] = Query(None),
    priority: Optional[ProjectPriority] = Query(None),
    assigned_user_id: Optional[str] = Query(None),
    paging: PageParams = Depends(),
    user: User = Depends(require_permission(PROJECTS_READ)),
    db: Session = Depends(get_db),
):
    stmt = select(Project).options(
        selectinload(Project.customer),
        selectinload(Project.user_assignments).selectinload(ProjectAssignment.user),
    )
    if search:
        stmt = stmt.where(or_(Project.title.icontains(search, autoescape=True),
                              Project.description.icontains(search, autoescape=True)))
    if customer_id:
        stmt = stmt.where(Project.customer_id == customer_id)
    if category:
        stmt = stmt.where(Project.project_category == category)
    if status:
        stmt = stmt.where(Project.status == status)
    if dev_ops_status:
        stmt = stmt.where(Project.dev_ops_status == dev_ops_status)
    if priority:
        stmt = stmt.where(Project.priority == priority)

    # Client managers only ever see their own projects
    if user.role == Role.CLIENT_MANAGER:
        assigned_user_id = user.id
    if assigned_user_id:
        stmt = stmt.where(Project.user_assignments.any(ProjectAssignment.user_id == assigned_user_id))

    projects, total = paginate(db, stmt.order_by(desc(Project.updated_at)), paging.page, paging.page_size)
    return ProjectListResponse(projects=projects, **page_meta(total, paging.page, paging.page_size))


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(
    data: ProjectCreate,
    user: User = Depends(require_permission(PROJECTS_WRITE)),
    db: Session = Depends(get_db),
):
    """Create a project. Without assigned_user_ids the creator is assigned."""
    get_or_404(db, Customer, data.customer_id, "Customer")

    dev_ops_status = None
    if data.project_category == ProjectCategory.DEVOPS:
        dev_ops_status = data.dev_ops_status or DevOpsStatus.ACTIVE

    project = Project(
        customer_id=data.customer_id,
        title=data.title,
        description=data.description,
        project_category=data.project_category,
        technologies=data.technologies,
        must_have=data.must_have,
        nice_to_have=data.nice_to_have,
        seniority_level=data.seniority_level,
        years_experience_min=data.years_experience_min,
        location=data.location,
        remote_policy=data.remote_policy,
        language_requirements=data.language_requirements,
        headcount=data.headcount,
        priority=data.priority,
        status=data.status,
        dev_ops_status=dev_ops_status,
    )
    assignee_ids = [u.id for u in _load_users(db, data.assigned_user_ids)] or [user.id]
    _set_assigned_users(project, assignee_ids)
    db.add(project)
    db.commit()

    log_activity(db, "Project", project.id, ActivityAction.CREATED, user.id)
    return project


@router.get("/{project_id}", response_model=ProjectDetailResponse)
def get_project(
    project_id: str,
    user: User = Depends(require_permission(PROJECTS_READ)),
    db: Session = Depends(get_db),
):
    project = get_or_404(db, Project, project_id, "Project")
    check_project_access(user, project)
    return project


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    data: ProjectEdit,
    user: User = Depends(require_permission(PROJECTS_WRITE)),
    db: Session = Depends(get_db),
):
    """
    Update a project.
    Logged with the field diff: STAGE_CHANGED when status moved, UPDATED otherwise.
    """
    project = get_or_404(db, Project, project_id, "Project")
    check_project_access(user, project)

    changes = data.model_dump(exclude_unset=True)
    assigned_user_ids = changes.pop("assigned_user_ids", None)
    if changes.get("customer_id"):
        get_or_404(db, Customer, changes["customer_id"], "Customer")

    before = entity_snapshot(project)
    old_assignees = sorted(project.assigned_user_ids)

    applied = apply_changes(project, changes)
    if assigned_user_ids is not None:
        _set_assigned_users(project, [u.id for u in _load_users(db, assigned_user_ids)])
    after = entity_snapshot(project)
    db.commit()

    diff = create_diff(before, {key: after[key] for key in applied}) or {}
    new_assignees = sorted(project.assigned_user_ids)
    if assigned_user_ids is not None and new_assignees != old_assignees:
        diff["assigned_user_ids"] = {"old": old_assignees, "new": new_assignees}
    action = ActivityAction.STAGE_CHANGED if "status" in diff else ActivityAction.UPDATED
    log_activity(db, "Project", project.id, action, user.id, diff or None)

    return project


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    user: User = Depends(require_permission(PROJECTS_DELETE)),
    db: Session = Depends(get_db),
):
    project = get_or_404(db, Project, project_id, "Project")
    db.delete(project)
    db.commit()

    log_activity(db, "Project", project_id, ActivityAction.DELETED, user.id)
    return MessageResponse(message="Project deleted successfully")


@router.post("/{project_id}/convert", response_model=ProjectConvertResponse)
def convert_project(
    project_id: str,
    data: ProjectConvertRequest,
    user: User = Depends(require_permission(PROJECTS_WRITE)),
    db: Session = Depends(get_db),
):
    """
    Convert a PIPELINE project to DEVOPS.

    create_new=true creates a linked delivery project (title defaults to
    "<title> - Delivery") and closes the pipeline as won; otherwise the
    project is converted in place. Engineers hired through the pipeline get
    active assignments.
    """
    project = get_or_404(db, Project, project_id, "Project")
    check_project_access(user, project)

    try:
        devops, engineer_ids = convert_project_to_devops(
            db, project, user, create_new=data.create_new, new_title=data.new_title
        )
    except ConversionError as e:
        raise HTTPException(status_code=400, detail=e.message)

    message = (
        "Created new DevOps project from Pipeline"
        if data.create_new
        else "Converted Pipeline project to DevOps"
    )
    return ProjectConvertResponse(
        project=ProjectResponse.model_validate(devops),
        source_project_id=project.id,
        created_new=data.create_new,
        engineer_ids=engineer_ids,
        message=message,
    )


# ============================================================
# PROJECT UPDATES
# ============================================================

@router.get("/{project_id}/updates", response_model=ProjectUpdateListResponse)
def list_project_updates(
    project_id: str,
    paging: PageParams = Depends(),
    user: User = Depends(require_permission(PROJECT_UPDATES_READ)),
    db: Session = Depends(get_db),
):
    get_or_404(db, Project, project_id, "Project")

    stmt = (
        select(ProjectUpdateEntry)
        .options(selectinload(ProjectUpdateEntry.author), selectinload(ProjectUpdateEntry.mentioned_users))
        .where(ProjectUpdateEntry.project_id == project_id)
        .order_by(desc(ProjectUpdateEntry.created_at))
    )
    updates, total = paginate(db, stmt, paging.page, paging.page_size)
    return ProjectUpdateListResponse(updates=updates, **page_meta(total, paging.page, paging.page_size))


@router.post("/{project_id}/updates", response_model=ProjectUpdateResponse, status_code=201)
def create_project_update(
    project_id: str,
    data: ProjectUpdateCreate,
    user: User = Depends(require_permission(PROJECT_UPDATES_WRITE)),
    db: Session = Depends(get_db),
):
    """Post an update. Every mentioned user except the author gets a MENTION notification."""
    project = get_or_404(db, Project, project_id, "Project")
    mentioned = _load_users(db, data.mentioned_user_ids)

    update = ProjectUpdateEntry(
        project_id=project.id,
        author_user_id=user.id,
        content=data.content,
        visibility=data.visibility,
        tags=data.tags,
        mentioned_users=mentioned,
    )
    db.add(update)
    db.flush()

    for mentioned_user in mentioned:
        if mentioned_user.id == user.id:
            continue
        db.add(Notification(
            user_id=mentioned_user.id,
            type="MENTION",
            title="You were mentioned in a project update",
            message=f'{user.full_name} mentioned you in an update on "{project.title}"',
            link_url=f"/projects/{project.id}?tab=updates",
            project_update_id=update.id,
        ))
    db.commit()

    log_activity(db, "Project", project.id, ActivityAction.UPDATE_ADDED, user.id, {"update_id": update.id})
    return update
