from datetime import datetime, timezone

from sqlalchemy import select

from staffing_crm.models import (
    ActivityAction,
    ActivityLog,
    AssignmentStatus,
    Candidate,
    EmploymentStatus,
    Engineer,
    EngineerAssignment,
    Role,
    SeniorityLevel,
)
from staffing_crm.services.matching_service import score_candidate, score_engineer
from tests.conftest import auth_headers


def add(db, entity):
    db.add(entity)
    db.commit()
    return entity


# ============================================================
# PROJECT CANDIDATES
# ============================================================

class TestProjectCandidates:
    def test_add_scores_candidate(self, client, db, make_user, make_project):
        recruiter = make_user(Role.RECRUITER)
        project = make_project(technologies=["React", "TypeScript"], seniority_level=SeniorityLevel.SENIOR,
                               years_experience_min=5)
        candidate = add(db, Candidate(full_name="Alex", technologies=["React", "TypeScript"],
                                      seniority_level=SeniorityLevel.SENIOR, years_experience=6))

        response = client.post(
            "/api/project-candidates",
            headers=auth_headers(recruiter),
            json={"project_id": project.id, "candidate_id": candidate.id},
        )
        assert response.status_code == 201
        body = response.json()
        expected = score_candidate(candidate, project)
        assert body["match_score"] == expected.score
        assert body["match_reasons"] == expected.reasons
        assert body["stage"] == "SHORTLISTED"
        assert body["recruiter_owner_user_id"] == recruiter.id
        assert body["last_stage_change_at"] is not None
        assert body["submitted_at"] is None
        assert body["candidate"]["full_name"] == "Alex"

    def test_duplicate_rejected(self, client, db, admin_headers, make_project):
        project = make_project()
        candidate = add(db, Candidate(full_name="Alex"))
        payload = {"project_id": project.id, "candidate_id": candidate.id}

        assert client.post("/api/project-candidates", headers=admin_headers, json=payload).status_code == 201
        again = client.post("/api/project-candidates", headers=admin_headers, json=payload)
        assert again.status_code == 400
        assert again.json()["detail"] == "Candidate already added to this project"

    def test_sales_cannot_add(self, client, db, make_user, make_project):
        project = make_project()
        candidate = add(db, Candidate(full_name="Alex"))
        response = client.post(
            "/api/project-candidates",
            headers=auth_headers(make_user(Role.SALES)),
            json={"project_id": project.id, "candidate_id": candidate.id},
        )
        assert response.status_code == 403

    def test_client_manager_limited_to_assigned_projects(self, client, db, make_user, make_project):
        manager = make_user(Role.CLIENT_MANAGER)
        project = make_project()
        candidate = add(db, Candidate(full_name="Alex"))
        response = client.post(
            "/api/project-candidates",
            headers=auth_headers(manager),
            json={"project_id": project.id, "candidate_id": candidate.id},
        )
        assert response.status_code == 403

    def test_stage_changes_stamp_dates(self, client, db, admin_headers, make_project):
        project = make_project()
        candidate = add(db, Candidate(full_name="Alex"))
        entry = client.post("/api/project-candidates", headers=admin_headers,
                            json={"project_id": project.id, "candidate_id": candidate.id}).json()
        url = f"/api/project-candidates/{entry['id']}"

        submitted = client.put(url, headers=admin_headers, json={"stage": "SUBMITTED_TO_CLIENT"}).json()
        assert submitted["submitted_at"] is not None
        first_submitted_at = client.get(url, headers=admin_headers).json()["submitted_at"]

        client.put(url, headers=admin_headers, json={"stage": "INTERVIEWING"})
        assert client.get(url, headers=admin_headers).json()["submitted_at"] == first_submitted_at

        db.expire_all()
        log = db.scalars(
            select(ActivityLog).where(ActivityLog.entity_id == entry["id"],
                                      ActivityLog.action == ActivityAction.STAGE_CHANGED)
            .order_by(ActivityLog.created_at)
        ).first()
        assert log.diff == {"stage": {"old": "SHORTLISTED", "new": "SUBMITTED_TO_CLIENT"}}

    def test_feedback_update_logs_diff(self, client, db, admin_headers, make_project):
        project = make_project()
        candidate = add(db, Candidate(full_name="Alex"))
        entry = client.post("/api/project-candidates", headers=admin_headers,
                            json={"project_id": project.id, "candidate_id": candidate.id}).json()

        client.put(f"/api/project-candidates/{entry['id']}", headers=admin_headers,
                   json={"client_feedback": "Strong communicator"})

        db.expire_all()
        log = db.scalars(
            select(ActivityLog).where(ActivityLog.entity_id == entry["id"],
                                      ActivityLog.action == ActivityAction.UPDATED)
        ).one()
        assert log.diff == {"client_feedback": {"old": None, "new": "Strong communicator"}}

    def test_list_filters_by_stage(self, client, db, admin_headers, make_project):
        project = make_project()
        for name, stage in (("A", "SHORTLISTED"), ("B", "HIRED")):
            candidate = add(db, Candidate(full_name=name))
            client.post("/api/project-candidates", headers=admin_headers,
                        json={"project_id": project.id, "candidate_id": candidate.id, "stage": stage})

        body = client.get("/api/project-candidates", headers=admin_headers,
                          params={"project_id": project.id, "stage": "HIRED"}).json()
        assert body["total"] == 1
        assert body["project_candidates"][0]["candidate"]["full_name"] == "B"

    def test_delete_admin_only(self, client, db, admin_headers, make_user, make_project):
        project = make_project()
        candidate = add(db, Candidate(full_name="Alex"))
        entry = client.post("/api/project-candidates", headers=admin_headers,
                            json={"project_id": project.id, "candidate_id": candidate.id}).json()
        url = f"/api/project-candidates/{entry['id']}"

        assert client.delete(url, headers=auth_headers(make_user(Role.RECRUITER))).status_code == 403
        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=admin_headers).status_code == 404


# ============================================================
# PROJECT TALENTS
# ============================================================

class TestProjectTalents:
    def test_type_requires_matching_id(self, client, admin_headers, make_project):
        project = make_project()
        response = client.post("/api/project-talents", headers=admin_headers,
                               json={"project_id": project.id, "talent_type": "ENGINEER"})
        assert response.status_code == 400
        assert response.json()["detail"] == "engineer_id is required for ENGINEER talent"

        response = client.post("/api/project-talents", headers=admin_headers,
                               json={"project_id": project.id, "talent_type": "CANDIDATE"})
        assert response.status_code == 400

    def test_add_engineer_and_duplicate(self, client, db, admin_headers, make_project):
        project = make_project(technologies=["Go"])
        engineer = add(db, Engineer(full_name="Noa", technologies=["Go"], employment_status=EmploymentStatus.BENCH))
        payload = {"project_id": project.id, "talent_type": "ENGINEER", "engineer_id": engineer.id}

        response = client.post("/api/project-talents", headers=admin_headers, json=payload)
        assert response.status_code == 201
        body = response.json()
        assert body["engineer"]["full_name"] == "Noa"
        expected = score_engineer(engineer, project, [])
        assert body["match_score"] == expected.score
        assert body["match_reasons"] == expected.reasons

        again = client.post("/api/project-talents", headers=admin_headers, json=payload)
        assert again.status_code == 400

    def test_recruiter_cannot_add(self, client, db, make_user, make_project):
        project = make_project()
        candidate = add(db, Candidate(full_name="Alex"))
        response = client.post(
            "/api/project-talents",
            headers=auth_headers(make_user(Role.RECRUITER)),
            json={"project_id": project.id, "talent_type": "CANDIDATE", "candidate_id": candidate.id},
        )
        assert response.status_code == 403

    def test_assigned_stage_starts_assignment(self, client, db, admin_headers, customer, make_project):
        project = make_project()
        engineer = add(db, Engineer(full_name="Noa", employment_status=EmploymentStatus.BENCH))
        talent = client.post("/api/project-talents", headers=admin_headers,
                             json={"project_id": project.id, "talent_type": "ENGINEER",
                                   "engineer_id": engineer.id}).json()

        response = client.put(f"/api/project-talents/{talent['id']}", headers=admin_headers,
                              json={"stage": "ASSIGNED"})
        assert response.status_code == 200
        assert response.json()["stage"] == "ASSIGNED"

        db.expire_all()
        assignment = db.scalars(select(EngineerAssignment).where(EngineerAssignment.engineer_id == engineer.id)).one()
        assert assignment.status == AssignmentStatus.ACTIVE
        assert assignment.project_id == project.id
        assert assignment.customer_id == customer.id
        assert db.get(Engineer, engineer.id).employment_status == EmploymentStatus.ASSIGNED

        actions = db.scalars(select(ActivityLog.action).where(ActivityLog.entity_id == engineer.id)).all()
        assert actions == [ActivityAction.ASSIGNED]

    def test_assigned_stage_conflict(self, client, db, admin_headers, make_project):
        project = make_project()
        other = make_project(title="Other")
        engineer = add(db, Engineer(full_name="Noa"))
        add(db, EngineerAssignment(engineer_id=engineer.id, project_id=other.id, status=AssignmentStatus.ACTIVE,
                                   start_date=datetime.now(timezone.utc)))
        talent = client.post("/api/project-talents", headers=admin_headers,
                             json={"project_id": project.id, "talent_type": "ENGINEER",
                                   "engineer_id": engineer.id}).json()

        response = client.put(f"/api/project-talents/{talent['id']}", headers=admin_headers,
                              json={"stage": "ASSIGNED"})
        assert response.status_code == 400
        assert "already has an active assignment" in response.json()["detail"]

        fetched = client.get(f"/api/project-talents/{talent['id']}", headers=admin_headers).json()
        assert fetched["stage"] == "SHORTLISTED"

    def test_list_by_type(self, client, db, admin_headers, make_project):
        project = make_project()
        candidate = add(db, Candidate(full_name="Alex"))
        engineer = add(db, Engineer(full_name="Noa"))
        client.post("/api/project-talents", headers=admin_headers,
                    json={"project_id": project.id, "talent_type": "CANDIDATE", "candidate_id": candidate.id})
        client.post("/api/project-talents", headers=admin_headers,
                    json={"project_id": project.id, "talent_type": "ENGINEER", "engineer_id": engineer.id})

        body = client.get("/api/project-talents", headers=admin_headers,
                          params={"project_id": project.id, "talent_type": "CANDIDATE"}).json()
        assert body["total"] == 1
        assert body["project_talents"][0]["candidate"]["full_name"] == "Alex"
