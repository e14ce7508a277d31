from staffing_crm.models import Role
from tests.conftest import auth_headers


def test_admin_creates_and_lists_users(client, admin_headers):
    response = client.post(
        "/api/users",
        headers=admin_headers,
        json={"full_name": "New Recruiter", "email": "New.Recruiter@Example.com",
              "password": "longpassword", "role": "RECRUITER"},
    )
    assert response.status_code == 201
    assert response.json()["email"] == "new.recruiter@example.com"
    assert "password_hash" not in response.json()

    listing = client.get("/api/users", headers=admin_headers, params={"role": "RECRUITER"})
    assert listing.status_code == 200
    body = listing.json()
    assert body["total"] == 1
    assert body["users"][0]["full_name"] == "New Recruiter"
    assert body["page"] == 1 and body["total_pages"] == 1


def test_duplicate_email_rejected(client, admin_headers, make_user):
    make_user(Role.SALES, email="taken@example.com")
    response = client.post(
        "/api/users",
        headers=admin_headers,
        json={"full_name": "Copy", "email": "TAKEN@example.com", "password": "longpassword"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already in use"


def test_short_password_is_validation_error(client, admin_headers):
    response = client.post(
        "/api/users",
        headers=admin_headers,
        json={"full_name": "Short", "email": "short@example.com", "password": "123"},
    )
    assert response.status_code == 400


def test_non_admin_cannot_list_users(client, make_user):
    response = client.get("/api/users", headers=auth_headers(make_user(Role.SALES)))
    assert response.status_code == 403


def test_user_reads_self_but_not_others(client, make_user):
    me = make_user(Role.SALES)
    other = make_user(Role.SALES)
    headers = auth_headers(me)

    assert client.get(f"/api/users/{me.id}", headers=headers).status_code == 200
    assert client.get(f"/api/users/{other.id}", headers=headers).status_code == 403


def test_self_update_limited_to_name_and_password(client, make_user):
    me = make_user(Role.RECRUITER)
    headers = auth_headers(me)

    ok = client.put(f"/api/users/{me.id}", headers=headers, json={"full_name": "Renamed"})
    assert ok.status_code == 200
    assert ok.json()["full_name"] == "Renamed"

    escalate = client.put(f"/api/users/{me.id}", headers=headers, json={"role": "ADMIN"})
    assert escalate.status_code == 403


def test_admin_updates_role(client, admin_headers, make_user):
    user = make_user(Role.SALES)
    response = client.put(f"/api/users/{user.id}", headers=admin_headers, json={"role": "RECRUITER"})
    assert response.status_code == 200
    assert response.json()["role"] == "RECRUITER"


def test_delete_deactivates(client, admin_headers, make_user):
    user = make_user(Role.SALES)
    response = client.delete(f"/api/users/{user.id}", headers=admin_headers)
    assert response.status_code == 200

    fetched = client.get(f"/api/users/{user.id}", headers=admin_headers).json()
    assert fetched["is_active"] is False


def test_admin_cannot_delete_self(client, admin, admin_headers):
    response = client.delete(f"/api/users/{admin.id}", headers=admin_headers)
    assert response.status_code == 400


def test_unknown_user_404(client, admin_headers):
    assert client.get("/api/users/does-not-exist", headers=admin_headers).status_code == 404
