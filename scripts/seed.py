#!/usr/bin/env python3
"""
Demo Data Seed Script

Creates:
1. One user per role (password: admin123)
2. Customers with contacts
3. Pipeline and DevOps projects with assigned users
4. Candidates, a few already shortlisted on the pipeline project
5. Engineers, one on an active assignment

Safe to re-run: does nothing if the admin user already exists.

Run: python scripts/seed.py
"""
import sys
sys.path.insert(0, '.')

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from staffing_crm.core.auth import hash_password
from staffing_crm.core.logging import configure_logging
from staffing_crm.db.database import get_db_session, init_db
from staffing_crm.models import (
    CandidateStage,
    Customer,
    DevOpsStatus,
    EmploymentStatus,
    Engineer,
    Project,
    ProjectAssignment,
    ProjectCandidate,
    ProjectCategory,
    ProjectPriority,
    ProjectStatus,
    RemotePolicy,
    Role,
    SeniorityLevel,
    User,
    Candidate,
)
from staffing_crm.services.assignment_service import start_assignment
from staffing_crm.services.matching_service import score_candidate

DEMO_PASSWORD = "admin123"

USERS = [
    ("Admin User", "admin@example.com", Role.ADMIN),
    ("Sarah Sales", "sarah@example.com", Role.SALES),
    ("Rachel Recruiter", "rachel@example.com", Role.RECRUITER),
    ("Michael Manager", "michael@example.com", Role.CLIENT_MANAGER),
]

CANDIDATES = [
    dict(full_name="Alex Johnson", title="Senior Full Stack Developer", location="Tel Aviv",
         technologies=["React", "Node.js", "TypeScript", "PostgreSQL"], years_experience=7,
         seniority_level=SeniorityLevel.SENIOR, languages=["English", "Hebrew"],
         summary_public="Full stack developer focused on web platforms."),
    dict(full_name="Maya Cohen", title="DevOps Engineer", location="Haifa",
         technologies=["Kubernetes", "AWS", "Terraform", "Python"], years_experience=5,
         seniority_level=SeniorityLevel.MID, languages=["English", "Hebrew"],
         summary_public="Cloud infrastructure and CI/CD pipelines."),
    dict(full_name="Daniel Levi", title="Backend Developer", location="Remote",
         technologies=["Python", "FastAPI", "PostgreSQL", "Redis"], years_experience=4,
         seniority_level=SeniorityLevel.MID, languages=["English"],
         summary_public="API and data services in Python."),
    dict(full_name="Noa Shapira", title="Frontend Developer", location="Tel Aviv",
         technologies=["React", "TypeScript", "CSS"], years_experience=2,
         seniority_level=SeniorityLevel.JUNIOR, languages=["Hebrew"],
         summary_public="Frontend developer with a design background."),
]

ENGINEERS = [
    dict(full_name="David Chen", title="Lead Backend Engineer", email="david.chen@example.com",
         technologies=["Java", "Spring", "Kafka", "PostgreSQL"], years_experience=12,
         seniority_level=SeniorityLevel.LEAD, employment_status=EmploymentStatus.ACTIVE),
    dict(full_name="Maria Rodriguez", title="Senior Frontend Engineer", email="maria.r@example.com",
         technologies=["React", "TypeScript", "Next.js"], years_experience=8,
         seniority_level=SeniorityLevel.SENIOR, employment_status=EmploymentStatus.BENCH),
    dict(full_name="Oren Levy", title="DevOps Engineer", email="oren.l@example.com",
         technologies=["Kubernetes", "AWS", "Terraform"], years_experience=6,
         seniority_level=SeniorityLevel.SENIOR, employment_status=EmploymentStatus.ACTIVE),
]


def seed_users(db):
    print("\n[1] Creating users...")
    users = {}
    for full_name, email, role in USERS:
        user = User(full_name=full_name, email=email, password_hash=hash_password(DEMO_PASSWORD), role=role)
        db.add(user)
        users[role] = user
        print(f"    ✅ {email} ({role.value})")
    db.flush()
    return users


def seed_customers(db, owner):
    print("\n[2] Creating customers...")
    techcorp = Customer(
        name="TechCorp Ltd",
        industry="Technology",
        website="https://techcorp.example.com",
        description="Enterprise software company",
        contacts=[{"name": "John Smith", "title": "CTO", "email": "john@techcorp.example.com", "phone": None}],
        tags=["enterprise", "saas"],
        owner_user_id=owner.id,
    )
    financehub = Customer(
        name="FinanceHub",
        industry="Finance",
        description="Digital banking platform",
        contacts=[{"name": "David Cohen", "title": "VP Engineering", "email": None, "phone": None}],
        tags=["fintech"],
        owner_user_id=owner.id,
    )
    db.add_all([techcorp, financehub])
    db.flush()
    print("    ✅ TechCorp Ltd, FinanceHub")
    return techcorp, financehub


def seed_projects(db, techcorp, financehub, users):
    print("\n[3] Creating projects...")
    pipeline = Project(
        customer_id=techcorp.id,
        title="Senior React Developers",
        description="Two senior full stack developers for the customer portal",
        project_category=ProjectCategory.PIPELINE,
        technologies=["React", "Node.js", "TypeScript"],
        must_have=["React", "TypeScript"],
        nice_to_have=["PostgreSQL"],
        seniority_level=SeniorityLevel.SENIOR,
        years_experience_min=5,
        remote_policy=RemotePolicy.HYBRID,
        headcount=2,
        priority=ProjectPriority.HIGH,
        status=ProjectStatus.SOURCING,
    )
    devops = Project(
        customer_id=financehub.id,
        title="Cloud Platform Team",
        description="Ongoing infrastructure delivery",
        project_category=ProjectCategory.DEVOPS,
        dev_ops_status=DevOpsStatus.ACTIVE,
        technologies=["Kubernetes", "AWS", "Terraform"],
        priority=ProjectPriority.MEDIUM,
        status=ProjectStatus.CLOSED_WON,
    )
    for project in (pipeline, devops):
        project.user_assignments = [
            ProjectAssignment(user_id=users[Role.SALES].id),
            ProjectAssignment(user_id=users[Role.CLIENT_MANAGER].id),
        ]
    db.add_all([pipeline, devops])
    db.flush()
    print(f"    ✅ {pipeline.title} (PIPELINE), {devops.title} (DEVOPS)")
    return pipeline, devops


def seed_candidates(db, pipeline, recruiter):
    print("\n[4] Creating candidates...")
    candidates = [Candidate(**data) for data in CANDIDATES]
    db.add_all(candidates)
    db.flush()

    for candidate, stage in zip(candidates[:2], (CandidateStage.SHORTLISTED, CandidateStage.SUBMITTED_TO_CLIENT)):
        match = score_candidate(candidate, pipeline)
        now = datetime.now(timezone.utc)
        db.add(ProjectCandidate(
            project_id=pipeline.id,
            candidate_id=candidate.id,
            stage=stage,
            match_score=match.score,
            match_reasons=match.reasons,
            recruiter_owner_user_id=recruiter.id,
            last_stage_change_at=now,
            submitted_at=now if stage == CandidateStage.SUBMITTED_TO_CLIENT else None,
        ))
        print(f"    ✅ {candidate.full_name} -> {pipeline.title} ({match.score})")
    print(f"    ✅ {len(candidates)} candidates")


def seed_engineers(db, devops):
    print("\n[5] Creating engineers...")
    engineers = [Engineer(employment_start_date=datetime.now(timezone.utc) - timedelta(days=365), **data)
                 for data in ENGINEERS]
    db.add_all(engineers)
    db.flush()

    # Oren runs the cloud platform
    start_assignment(db, engineers[2], project_id=devops.id, customer_id=devops.customer_id,
                     role_title="DevOps Engineer")
    print(f"    ✅ {len(engineers)} engineers, {engineers[2].full_name} assigned to {devops.title}")


def main():
    configure_logging()
    print("=" * 50)
    print("Staffing CRM - Seeding demo data")
    print("=" * 50)

    init_db()
    with get_db_session() as db:
        if db.scalars(select(User.id).where(User.email == USERS[0][1])).first():
            print("\n⚠️  Demo data already present, skipping")
            return

        users = seed_users(db)
        techcorp, financehub = seed_customers(db, users[Role.SALES])
        pipeline, devops = seed_projects(db, techcorp, financehub, users)
        seed_candidates(db, pipeline, users[Role.RECRUITER])
        seed_engineers(db, devops)

    print("\n✅ Done. Log in as admin@example.com / " + DEMO_PASSWORD)


if __name__ == "__main__":
    main()
