# tests/test_auth_api.py
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tasky.auth.security import create_access_token
from tasky.users.models import User


def test_register_returns_token_and_user(client: TestClient, db_session: Session):
    response = client.post(
        "/api/auth/register",
        json={"name": "Ann", "email": "Ann@X.com", "password": "secret1"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["token"]
    assert body["user"]["name"] == "Ann"
    assert body["user"]["email"] == "ann@x.com"
    assert body["user"]["accountType"] == "local"
    assert "password" not in body["user"] and "password_hash" not in body["user"]

    stored = db_session.query(User).filter(User.email == "ann@x.com").one()
    assert stored.password_hash and stored.password_hash != "secret1"


def test_register_duplicate_email_conflicts_and_keeps_hash(client: TestClient, db_session: Session, register_user):
    register_user(email="ann@x.com", password="secret1")
    original_hash = db_session.query(User).filter(User.email == "ann@x.com").one().password_hash

    response = client.post(
        "/api/auth/register",
        json={"name": "Impostor", "email": "ANN@x.com", "password": "other-password"},
    )

    assert response.status_code == 400
    assert response.json() == {"message": "User already exists"}
    db_session.expire_all()
    assert db_session.query(User).filter(User.email == "ann@x.com").one().password_hash == original_hash


def test_register_validation_errors_are_400_with_fields(client: TestClient):
    response = client.post("/api/auth/register", json={"name": "Ann", "email": "not-an-email", "password": "123"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    fields = {err["field"] for err in body["errors"]}
    assert {"email", "password"} <= fields


def test_register_then_login_scenario(client: TestClient, register_user):
    register_user(name="Ann", email="ann@x.com", password="secret1")

    ok = client.post("/api/auth/login", json={"email": "ann@x.com", "password": "secret1"})
    assert ok.status_code == 200
    assert ok.json()["message"] == "Login successful"
    assert ok.json()["user"]["email"] == "ann@x.com"

    wrong = client.post("/api/auth/login", json={"email": "ann@x.com", "password": "wrong"})
    assert wrong.status_code == 401
    assert wrong.json() == {"message": "Invalid credentials"}


def test_login_unknown_email_is_unauthorized(client: TestClient):
    response = client.post("/api/auth/login", json={"email": "nobody@x.com", "password": "secret1"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_login_rejects_google_account(client: TestClient, db_session: Session):
    db_session.add(User(name="Gail", email="gail@x.com", account_type="google", google_id="g-1"))
    db_session.commit()

    response = client.post("/api/auth/login", json={"email": "gail@x.com", "password": "anything"})

    assert response.status_code == 401
    assert "Google" in response.json()["message"]


def test_profile_returns_token_owner(client: TestClient, register_user):
    ann = register_user(name="Ann", email="ann@x.com")
    bob = register_user(name="Bob", email="bob@x.com")

    response = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {ann['token']}"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == ann["user"]["id"]
    assert response.json()["user"]["id"] != bob["user"]["id"]


def test_profile_requires_token(client: TestClient):
    response = client.get("/api/auth/profile")
    assert response.status_code == 401
    assert response.json() == {"message": "Access token required"}


def test_profile_rejects_wrong_scheme_and_garbage(client: TestClient, register_user):
    body = register_user()

    assert client.get("/api/auth/profile", headers={"Authorization": f"Basic {body['token']}"}).status_code == 401
    assert client.get("/api/auth/profile", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_profile_rejects_token_for_missing_user(client: TestClient):
    token = create_access_token("no-such-user")
    response = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_logout_acknowledges(client: TestClient):
    response = client.post("/api/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out"}
