from datetime import timedelta

from coursemarket.core.security import create_access_token
from coursemarket.models.user import UserRole

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"
ME_URL = "/api/v1/auth/me"

def _payload(**overrides):
    data = {
        "username": "jane.doe",
        "email": "jane@example.com",
        "password": "secret123",
        "full_name": "Jane Doe",
    }
    data.update(overrides)
    return data

def test_register_returns_user_and_token(client):
    response = client.post(REGISTER_URL, json=_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["token"]
    assert body["user"]["username"] == "jane.doe"
    assert body["user"]["role"] == "student"
    assert "hashed_password" not in body["user"]
    assert "session_id" in response.cookies

def test_register_duplicate_email_rejected(client):
    client.post(REGISTER_URL, json=_payload())
    response = client.post(REGISTER_URL, json=_payload(username="other"))

    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email or username already exists"

def test_register_validation_errors(client):
    for overrides in ({"username": "ab"}, {"password": "123"}, {"full_name": "J"}, {"email": "nope"}):
        response = client.post(REGISTER_URL, json=_payload(**overrides))
        assert response.status_code == 400, overrides
        assert response.json()["detail"] == "Validation error"

def test_register_cannot_claim_admin(client):
    response = client.post(REGISTER_URL, json=_payload(role="admin"))
    assert response.status_code == 400

def test_register_instructor(client):
    response = client.post(REGISTER_URL, json=_payload(role="instructor"))
    assert response.status_code == 201
    assert response.json()["user"]["role"] == UserRole.INSTRUCTOR.value

def test_login_and_me_with_bearer(client):
    client.post(REGISTER_URL, json=_payload())
    client.cookies.clear()

    response = client.post(LOGIN_URL, json={"email": "jane@example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["token"]

    client.cookies.clear()
    me = client.get(ME_URL, headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "jane@example.com"

def test_login_invalid_credentials(client, make_user):
    user = make_user()
    response = client.post(LOGIN_URL, json={"email": user.email, "password": "wrong-password"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"

def test_session_cookie_authenticates_until_logout(client):
    client.post(REGISTER_URL, json=_payload())

    assert client.get(ME_URL).status_code == 200

    client.post("/api/v1/auth/logout")
    response = client.get(ME_URL)
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized: No token provided"

def test_me_requires_token(client):
    response = client.get(ME_URL)
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

def test_me_rejects_invalid_token(client):
    response = client.get(ME_URL, headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized: Invalid token"

def test_me_rejects_expired_token(client, make_user, settings):
    user = make_user()
    token = create_access_token(user.id, settings, expires_delta=timedelta(minutes=-5))

    response = client.get(ME_URL, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized: Token expired"

def test_token_for_deleted_user_rejected(client, settings):
    token = create_access_token(9999, settings)
    response = client.get(ME_URL, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
