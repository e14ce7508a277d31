from datetime import datetime, timezone

import pytest

from staffing_crm.models import (
    AssignmentStatus,
    Candidate,
    EmploymentStatus,
    Engineer,
    EngineerAssignment,
    ProjectCandidate,
    ProjectTalent,
    Role,
    SeniorityLevel,
    TalentType,
)
from staffing_crm.services.matching_service import score_candidate, score_engineer, score_label
from tests.conftest import auth_headers


@pytest.fixture()
def pool(db, make_project):
    """A React project with two candidates and three engineers of varying fit."""
    project = make_project(technologies=["React", "TypeScript"], seniority_level=SeniorityLevel.SENIOR,
                           years_experience_min=4)
    talent = {
        "strong_candidate": Candidate(full_name="Strong Candidate", technologies=["React", "TypeScript"],
                                      seniority_level=SeniorityLevel.SENIOR, years_experience=6,
                                      location="Tel Aviv"),
        "weak_candidate": Candidate(full_name="Weak Candidate", technologies=["PHP"],
                                    seniority_level=SeniorityLevel.JUNIOR, years_experience=1),
        "bench_engineer": Engineer(full_name="Bench Engineer", technologies=["React"],
                                   seniority_level=SeniorityLevel.SENIOR, years_experience=8,
                                   employment_status=EmploymentStatus.BENCH),
        "inactive_engineer": Engineer(full_name="Inactive Engineer", technologies=["React", "TypeScript"],
                                      seniority_level=SeniorityLevel.SENIOR, years_experience=9,
                                      employment_status=EmploymentStatus.INACTIVE),
        "mid_engineer": Engineer(full_name="Mid Engineer", technologies=["Go"],
                                 seniority_level=SeniorityLevel.MID, years_experience=3),
    }
    db.add_all(talent.values())
    db.commit()
    return project, talent


def names(body):
    return [r["full_name"] for r in body["results"]]


def test_ranks_candidates_and_engineers_together(client, admin_headers, pool):
    project, talent = pool
    response = client.get("/api/matching", headers=admin_headers, params={"project_id": project.id})
    assert response.status_code == 200
    body = response.json()

    assert body["project"]["id"] == project.id
    assert "Inactive Engineer" not in names(body)
    assert body["total"] == body["returned"] == 4

    scores = [r["score"] for r in body["results"]]
    assert scores == sorted(scores, reverse=True)

    strong = next(r for r in body["results"] if r["id"] == talent["strong_candidate"].id)
    expected = score_candidate(talent["strong_candidate"], project)
    assert strong["talent_type"] == "CANDIDATE"
    assert strong["score"] == expected.score
    assert strong["label"] == score_label(expected.score)
    assert strong["location"] == "Tel Aviv"

    bench = next(r for r in body["results"] if r["id"] == talent["bench_engineer"].id)
    assert bench["talent_type"] == "ENGINEER"
    assert bench["employment_status"] == "BENCH"
    assert bench["score"] == score_engineer(talent["bench_engineer"], project, []).score

    assert body["filters"] == {"talent_type": "ALL", "min_score": 0, "seniority_level": None,
                               "technologies": None}


def test_excludes_talent_already_on_project(client, db, admin_headers, pool):
    project, talent = pool
    db.add_all([
        ProjectCandidate(project_id=project.id, candidate_id=talent["strong_candidate"].id),
        ProjectTalent(project_id=project.id, talent_type=TalentType.ENGINEER,
                      engineer_id=talent["bench_engineer"].id),
    ])
    db.commit()

    body = client.get("/api/matching", headers=admin_headers, params={"project_id": project.id}).json()
    assert sorted(names(body)) == ["Mid Engineer", "Weak Candidate"]


def test_customer_history_bonus(client, db, admin_headers, customer, pool):
    project, talent = pool
    engineer = talent["mid_engineer"]
    before = client.get("/api/matching", headers=admin_headers, params={"project_id": project.id}).json()
    db.add(EngineerAssignment(engineer_id=engineer.id, customer_id=customer.id, status=AssignmentStatus.COMPLETED,
                              start_date=datetime.now(timezone.utc)))
    db.commit()
    after = client.get("/api/matching", headers=admin_headers, params={"project_id": project.id}).json()

    def score_of(body):
        return next(r["score"] for r in body["results"] if r["id"] == engineer.id)

    assert score_of(after) == score_of(before) + 5
    assert "Previously worked with this customer" in next(
        r["reasons"] for r in after["results"] if r["id"] == engineer.id
    )


def test_filters(client, admin_headers, pool):
    project, _ = pool

    engineers = client.get("/api/matching", headers=admin_headers,
                           params={"project_id": project.id, "talent_type": "ENGINEER"}).json()
    assert sorted(names(engineers)) == ["Bench Engineer", "Mid Engineer"]
    assert engineers["filters"]["talent_type"] == "ENGINEER"

    react = client.get("/api/matching", headers=admin_headers,
                       params={"project_id": project.id, "technologies": "react"}).json()
    assert sorted(names(react)) == ["Bench Engineer", "Strong Candidate"]
    assert react["filters"]["technologies"] == ["react"]

    seniors = client.get("/api/matching", headers=admin_headers,
                         params={"project_id": project.id, "seniority_level": "SENIOR"}).json()
    assert sorted(names(seniors)) == ["Bench Engineer", "Strong Candidate"]


def test_min_score_and_limit(client, admin_headers, pool):
    project, _ = pool
    everything = client.get("/api/matching", headers=admin_headers, params={"project_id": project.id}).json()
    threshold = everything["results"][1]["score"]

    above = client.get("/api/matching", headers=admin_headers,
                       params={"project_id": project.id, "min_score": threshold}).json()
    assert all(r["score"] >= threshold for r in above["results"])
    assert above["total"] >= 2

    limited = client.get("/api/matching", headers=admin_headers,
                         params={"project_id": project.id, "limit": 1}).json()
    assert limited["returned"] == 1
    assert limited["total"] == 4
    assert limited["results"][0]["id"] == everything["results"][0]["id"]


def test_validation_and_errors(client, admin_headers):
    assert client.get("/api/matching", headers=admin_headers).status_code == 400
    assert client.get("/api/matching", headers=admin_headers,
                      params={"project_id": "x", "min_score": 101}).status_code == 400
    assert client.get("/api/matching", headers=admin_headers, params={"project_id": "missing"}).status_code == 404


def test_every_role_can_match(client, make_user, pool):
    project, _ = pool
    for role in Role:
        response = client.get("/api/matching", headers=auth_headers(make_user(role)),
                              params={"project_id": project.id})
        assert response.status_code == 200
