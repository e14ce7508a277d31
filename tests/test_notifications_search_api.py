from staffing_crm.models import Candidate, Customer, Engineer, Notification, Project, Role
from tests.conftest import auth_headers


def notify(db, user, title, is_read=False):
    notification = Notification(user_id=user.id, type="MENTION", title=title, message=f"{title} message",
                                is_read=is_read)
    db.add(notification)
    db.commit()
    return notification


# ============================================================
# NOTIFICATIONS
# ============================================================

class TestNotifications:
    def test_list_own_notifications(self, client, db, make_user):
        me = make_user(Role.RECRUITER)
        other = make_user(Role.RECRUITER)
        notify(db, me, "First")
        notify(db, me, "Seen", is_read=True)
        notify(db, other, "Not mine")

        body = client.get("/api/notifications", headers=auth_headers(me)).json()
        assert {n["title"] for n in body["notifications"]} == {"First", "Seen"}
        assert body["unread_count"] == 1

        unread = client.get("/api/notifications", headers=auth_headers(me), params={"unread_only": True}).json()
        assert [n["title"] for n in unread["notifications"]] == ["First"]

    def test_mark_selected_as_read(self, client, db, make_user):
        me = make_user(Role.SALES)
        other = make_user(Role.SALES)
        first = notify(db, me, "First")
        notify(db, me, "Second")
        foreign = notify(db, other, "Foreign")

        response = client.patch("/api/notifications", headers=auth_headers(me),
                                json={"notification_ids": [first.id, foreign.id]})
        assert response.status_code == 200
        assert response.json() == {"updated": 1, "unread_count": 1}

        db.expire_all()
        assert db.get(Notification, foreign.id).is_read is False

    def test_mark_all_as_read(self, client, db, make_user):
        me = make_user(Role.CLIENT_MANAGER)
        notify(db, me, "First")
        notify(db, me, "Second")

        response = client.patch("/api/notifications", headers=auth_headers(me), json={"mark_all_as_read": True})
        assert response.json() == {"updated": 2, "unread_count": 0}

    def test_mark_requires_target(self, client, make_user):
        response = client.patch("/api/notifications", headers=auth_headers(make_user(Role.SALES)), json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "Provide notification_ids or mark_all_as_read"

    def test_mention_shows_up_for_recipient(self, client, admin_headers, make_user, make_project):
        recruiter = make_user(Role.RECRUITER)
        project = make_project()
        client.post(f"/api/projects/{project.id}/updates", headers=admin_headers,
                    json={"content": "Please review", "mentioned_user_ids": [recruiter.id]})

        body = client.get("/api/notifications", headers=auth_headers(recruiter)).json()
        assert body["unread_count"] == 1
        assert body["notifications"][0]["link_url"] == f"/projects/{project.id}?tab=updates"


# ============================================================
# SEARCH
# ============================================================

class TestSearch:
    def seed(self, db, customer):
        db.add_all([
            Project(customer_id=customer.id, title="Kubernetes Platform"),
            Candidate(full_name="Dana Kube", technologies=["Go"]),
            Candidate(full_name="Resume Person", resume_extracted_text="Certified Kubernetes administrator"),
            Engineer(full_name="Eli Ops", title="Kubernetes Engineer", technologies=["Terraform"]),
            Customer(name="KubeWorks", description="Cloud consultancy"),
        ])
        db.commit()

    def test_admin_sees_every_section(self, client, db, admin_headers, customer, make_user):
        self.seed(db, customer)
        make_user(Role.SALES, full_name="Kubernetes Fan")

        response = client.get("/api/search", headers=admin_headers, params={"q": "kube"})
        assert response.status_code == 200
        body = response.json()
        results = body["results"]

        assert [c["name"] for c in results["customers"]] == ["KubeWorks"]
        assert [p["title"] for p in results["projects"]] == ["Kubernetes Platform"]
        assert results["projects"][0]["customer"]["name"] == "TechCorp Ltd"
        assert sorted(c["full_name"] for c in results["candidates"]) == ["Dana Kube", "Resume Person"]
        resume_hit = next(c for c in results["candidates"] if c["full_name"] == "Resume Person")
        assert resume_hit["resume_match"] is True
        assert [e["full_name"] for e in results["engineers"]] == ["Eli Ops"]
        assert [u["full_name"] for u in results["users"]] == ["Kubernetes Fan"]
        assert body["meta"]["total_count"] == 6

    def test_users_section_admin_only(self, client, db, make_user):
        make_user(Role.SALES, full_name="Kubernetes Fan")
        recruiter = make_user(Role.RECRUITER)

        body = client.get("/api/search", headers=auth_headers(recruiter), params={"q": "kubernetes"}).json()
        assert body["results"]["users"] == []

    def test_limit_per_section(self, client, db, admin_headers):
        db.add_all([Candidate(full_name=f"Python Dev {i}") for i in range(4)])
        db.commit()

        body = client.get("/api/search", headers=admin_headers, params={"q": "python", "limit": 2}).json()
        assert len(body["results"]["candidates"]) == 2

    def test_query_too_short(self, client, admin_headers):
        assert client.get("/api/search", headers=admin_headers, params={"q": "k"}).status_code == 400

    def test_requires_login(self, client):
        assert client.get("/api/search", params={"q": "kube"}).status_code == 401
