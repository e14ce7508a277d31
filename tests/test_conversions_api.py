from datetime import datetime, timezone

from sqlalchemy import select

from staffing_crm.models import (
    ActivityAction,
    ActivityLog,
    AssignmentStatus,
    Candidate,
    CandidateStage,
    EmploymentStatus,
    Engineer,
    EngineerAssignment,
    Project,
    ProjectCandidate,
    ProjectCategory,
    ProjectTalent,
    Role,
    TalentStage,
    TalentType,
)
from tests.conftest import auth_headers


def hired_pipeline(db, project):
    """A converted candidate and a bench engineer, both HIRED on the project."""
    candidate = Candidate(full_name="Converted Candidate")
    db.add(candidate)
    db.flush()
    from_candidate = Engineer(full_name="Converted Candidate", linked_candidate_id=candidate.id)
    from_talent = Engineer(full_name="Bench Engineer", employment_status=EmploymentStatus.BENCH)
    db.add_all([from_candidate, from_talent])
    db.flush()
    db.add_all([
        ProjectCandidate(project_id=project.id, candidate_id=candidate.id, stage=CandidateStage.HIRED),
        ProjectTalent(project_id=project.id, talent_type=TalentType.ENGINEER, engineer_id=from_talent.id,
                      stage=TalentStage.HIRED),
    ])
    db.commit()
    return from_candidate, from_talent


def test_convert_in_place_assigns_hired_engineers(client, db, admin_headers, customer, make_project):
    project = make_project(title="Cloud Team")
    from_candidate, from_talent = hired_pipeline(db, project)

    response = client.post(f"/api/projects/{project.id}/convert", headers=admin_headers, json={})
    assert response.status_code == 200
    body = response.json()
    assert body["created_new"] is False
    assert body["source_project_id"] == project.id
    assert body["project"]["id"] == project.id
    assert body["project"]["project_category"] == "DEVOPS"
    assert body["project"]["dev_ops_status"] == "ACTIVE"
    assert body["project"]["status"] == "CLOSED_WON"
    assert body["engineer_ids"] == [from_candidate.id, from_talent.id]
    assert body["message"] == "Converted Pipeline project to DevOps"

    db.expire_all()
    assignments = db.scalars(select(EngineerAssignment)).all()
    assert {a.engineer_id for a in assignments} == {from_candidate.id, from_talent.id}
    assert all(a.project_id == project.id and a.customer_id == customer.id for a in assignments)
    assert all(a.status == AssignmentStatus.ACTIVE for a in assignments)
    assert db.get(Engineer, from_talent.id).employment_status == EmploymentStatus.ASSIGNED

    log = db.scalars(select(ActivityLog).where(ActivityLog.entity_id == project.id)).one()
    assert log.action == ActivityAction.UPDATED
    assert log.diff["project_category"] == {"old": "PIPELINE", "new": "DEVOPS"}


def test_convert_create_new(client, db, admin, admin_headers, make_project):
    project = make_project(title="Cloud Team", technologies=["AWS"], assigned_users=[admin])
    hired_pipeline(db, project)

    response = client.post(f"/api/projects/{project.id}/convert", headers=admin_headers,
                           json={"create_new": True})
    assert response.status_code == 200
    body = response.json()
    devops = body["project"]
    assert body["created_new"] is True
    assert devops["id"] != project.id
    assert devops["title"] == "Cloud Team - Delivery"
    assert devops["source_pipeline_project_id"] == project.id
    assert devops["technologies"] == ["AWS"]
    assert [u["id"] for u in devops["assigned_users"]] == [admin.id]
    assert len(body["engineer_ids"]) == 2

    db.expire_all()
    source = db.get(Project, project.id)
    assert source.project_category == ProjectCategory.PIPELINE
    assert source.status.value == "CLOSED_WON"
    assignments = db.scalars(select(EngineerAssignment)).all()
    assert {a.project_id for a in assignments} == {devops["id"]}

    created = db.scalars(select(ActivityLog).where(ActivityLog.entity_id == devops["id"])).one()
    assert created.action == ActivityAction.CREATED
    assert created.diff == {"converted_from": project.id}
    closed = db.scalars(select(ActivityLog).where(ActivityLog.entity_id == project.id)).one()
    assert closed.action == ActivityAction.STAGE_CHANGED
    assert closed.diff["converted_to"] == devops["id"]


def test_convert_with_custom_title(client, admin_headers, make_project):
    project = make_project()
    response = client.post(f"/api/projects/{project.id}/convert", headers=admin_headers,
                           json={"create_new": True, "new_title": "Platform Delivery"})
    assert response.json()["project"]["title"] == "Platform Delivery"
    assert response.json()["engineer_ids"] == []


def test_engineer_with_active_assignment_is_skipped(client, db, admin_headers, make_project):
    project = make_project()
    elsewhere = make_project(title="Elsewhere")
    _, busy = hired_pipeline(db, project)
    db.add(EngineerAssignment(engineer_id=busy.id, project_id=elsewhere.id, status=AssignmentStatus.ACTIVE,
                              start_date=datetime.now(timezone.utc)))
    db.commit()

    body = client.post(f"/api/projects/{project.id}/convert", headers=admin_headers, json={}).json()
    assert busy.id not in body["engineer_ids"]
    assert len(body["engineer_ids"]) == 1

    db.expire_all()
    busy_assignments = db.scalars(select(EngineerAssignment).where(EngineerAssignment.engineer_id == busy.id)).all()
    assert [a.project_id for a in busy_assignments] == [elsewhere.id]


def test_only_pipeline_projects_convert(client, admin_headers, make_project):
    project = make_project(project_category=ProjectCategory.DEVOPS)
    response = client.post(f"/api/projects/{project.id}/convert", headers=admin_headers, json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "Only Pipeline projects can be converted to DevOps"


def test_convert_permissions(client, make_user, make_project):
    project = make_project()
    recruiter = auth_headers(make_user(Role.RECRUITER))
    manager = auth_headers(make_user(Role.CLIENT_MANAGER))

    assert client.post(f"/api/projects/{project.id}/convert", headers=recruiter, json={}).status_code == 403
    assert client.post(f"/api/projects/{project.id}/convert", headers=manager, json={}).status_code == 403
