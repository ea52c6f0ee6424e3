from conftest import PASSWORD, auth_headers

from trombinoscope.models.user import User, UserRole


def test_health_is_public(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_login_with_username(client, basic_user):
    response = client.post("/api/auth/login", json={"username": "user", "password": PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["token"]
    assert body["data"]["user"]["username"] == "user"
    assert body["data"]["user"]["role"] == "user"
    assert "passwordHash" not in body["data"]["user"]


def test_login_with_email_is_case_insensitive(client, basic_user):
    response = client.post("/api/auth/login", json={"username": "USER@Example.com", "password": PASSWORD})
    assert response.status_code == 200


def test_login_wrong_password(client, basic_user):
    response = client.post("/api/auth/login", json={"username": "user", "password": "Wrong123!"})
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": "Identifiants incorrects",
        "code": "INVALID_CREDENTIALS",
    }


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"username": "nobody", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_login_inactive_account(client, make_user):
    make_user("ghost", is_active=False)
    response = client.post("/api/auth/login", json={"username": "ghost", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json()["code"] == "ACCOUNT_INACTIVE"


def test_login_validation_error_is_400(client):
    response = client.post("/api/auth/login", json={"username": "ab", "password": "123"})
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert {detail["field"] for detail in body["details"]} == {"username", "password"}


def test_register_requires_admin(client, user_headers):
    payload = {"username": "newbie", "email": "newbie@example.com", "password": "Newbie123!"}
    response = client.post("/api/auth/register", json=payload, headers=user_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "AUTH_INSUFFICIENT_PERMISSIONS"


def test_register_by_admin(client, admin_headers, db):
    payload = {"username": "newbie", "email": "newbie@example.com", "password": "Newbie123!", "role": "manager"}
    response = client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["role"] == "manager"
    assert data["isActive"] is True

    login = client.post("/api/auth/login", json={"username": "newbie", "password": "Newbie123!"})
    assert login.status_code == 200


def test_register_weak_password(client, admin_headers):
    payload = {"username": "newbie", "email": "newbie@example.com", "password": "password"}
    response = client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert response.status_code == 400


def test_register_invalid_role(client, admin_headers):
    payload = {"username": "newbie", "email": "newbie@example.com", "password": "Newbie123!", "role": "boss"}
    response = client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert response.status_code == 400


def test_register_duplicate_username(client, admin_headers, basic_user):
    payload = {"username": "USER", "email": "other@example.com", "password": "Newbie123!"}
    response = client.post("/api/auth/register", json=payload, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "USER_ALREADY_EXISTS"


def test_missing_token(client):
    response = client.get("/api/auth/profile")
    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_TOKEN_MISSING"
    assert response.headers["www-authenticate"] == "Bearer"


def test_wrong_scheme(client, basic_user):
    token = auth_headers(basic_user)["Authorization"].split()[1]
    response = client.get("/api/auth/profile", headers={"Authorization": f"Basic {token}"})
    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_TOKEN_INVALID"


def test_token_of_deactivated_user(client, basic_user, user_headers, db):
    db.query(User).filter(User.id == basic_user.id).update({"is_active": False})
    db.commit()
    response = client.get("/api/auth/profile", headers=user_headers)
    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_USER_INACTIVE"


def test_token_of_deleted_user(client, basic_user, user_headers, db):
    db.query(User).filter(User.id == basic_user.id).delete()
    db.commit()
    response = client.get("/api/auth/profile", headers=user_headers)
    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_USER_NOT_FOUND"


def test_role_is_reloaded_on_each_request(client, basic_user, user_headers, db):
    db.query(User).filter(User.id == basic_user.id).update({"role": UserRole.ADMIN})
    db.commit()
    response = client.get("/api/auth/users", headers=user_headers)
    assert response.status_code == 200


def test_get_profile(client, user_headers):
    response = client.get("/api/auth/profile", headers=user_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "user"
    assert data["email"] == "user@example.com"
    assert "memberSince" in data


def test_update_profile_email(client, user_headers):
    response = client.put("/api/auth/profile", json={"email": "new@example.com"}, headers=user_headers)
    assert response.status_code == 200
    assert response.json()["data"]["email"] == "new@example.com"


def test_update_profile_without_fields(client, user_headers):
    response = client.put("/api/auth/profile", json={"role": "admin"}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "NOTHING_TO_UPDATE"


def test_update_profile_duplicate_email(client, user_headers, admin_user):
    response = client.put("/api/auth/profile", json={"email": "admin@example.com"}, headers=user_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_ALREADY_USED"


def test_change_password(client, user_headers):
    response = client.put(
        "/api/auth/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "Changed456?"},
        headers=user_headers,
    )
    assert response.status_code == 200

    assert client.post("/api/auth/login", json={"username": "user", "password": PASSWORD}).status_code == 401
    assert client.post("/api/auth/login", json={"username": "user", "password": "Changed456?"}).status_code == 200


def test_change_password_wrong_current(client, user_headers):
    response = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "Nope1234!", "newPassword": "Changed456?"},
        headers=user_headers,
    )
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CURRENT_PASSWORD"


def test_logout(client, user_headers):
    response = client.post("/api/auth/logout", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_admin_deactivates_and_reactivates_account(client, admin_headers, basic_user):
    response = client.post(f"/api/auth/users/{basic_user.id}/deactivate", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["isActive"] is False

    login = client.post("/api/auth/login", json={"username": "user", "password": PASSWORD})
    assert login.json()["code"] == "ACCOUNT_INACTIVE"

    response = client.post(f"/api/auth/users/{basic_user.id}/activate", headers=admin_headers)
    assert response.json()["data"]["isActive"] is True


def test_admin_cannot_deactivate_itself(client, admin_user, admin_headers):
    response = client.post(f"/api/auth/users/{admin_user.id}/deactivate", headers=admin_headers)
    assert response.status_code == 400


def test_list_users_admin_only(client, admin_headers, manager_headers):
    assert client.get("/api/auth/users", headers=manager_headers).status_code == 403
    response = client.get("/api/auth/users", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["count"] == 2


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json()["success"] is False
