# tests/test_auth_google.py
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture
from sqlalchemy.orm import Session

from tasky.auth.schemas import GoogleProfile
from tasky.auth.security import decode_access_token
from tasky.auth.service import AuthService, OAuthError
from tasky.core.config import settings
from tasky.users.models import User

GOOGLE_PROFILE = GoogleProfile(google_id="google-sub-1", email="gail@x.com", name="Gail")


def _query(location: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlparse(location).query).items()}


def test_google_start_redirects_to_consent_screen(client: TestClient):
    response = client.get("/api/auth/google", follow_redirects=False)

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith("https://accounts.google.com/")
    query = _query(location)
    assert query["client_id"] == settings.GOOGLE_CLIENT_ID
    assert "email" in query["scope"] and "profile" in query["scope"]


def test_google_start_without_credentials_redirects_with_error(client: TestClient, mocker: MockerFixture):
    mocker.patch.object(settings, "GOOGLE_CLIENT_ID", "")

    response = client.get("/api/auth/google", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == f"{settings.CLIENT_URL}/login?error=oauth_unavailable"


def test_callback_without_code_reports_oauth_failed(client: TestClient):
    response = client.get("/api/auth/google/callback?error=access_denied", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == f"{settings.CLIENT_URL}/login?error=oauth_failed"


def test_callback_creates_google_user_and_redirects_with_token(
    client: TestClient, db_session: Session, mocker: MockerFixture
):
    exchange = mocker.patch.object(AuthService, "exchange_oauth_code", return_value=GOOGLE_PROFILE)

    response = client.get("/api/auth/google/callback?code=abc", follow_redirects=False)

    exchange.assert_called_once_with("abc")
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(f"{settings.CLIENT_URL}/auth/callback?")
    token = _query(location)["token"]

    user = db_session.query(User).filter(User.google_id == "google-sub-1").one()
    assert user.account_type == "google"
    assert user.password_hash is None
    assert decode_access_token(token) == user.id


def test_callback_reuses_existing_google_user(client: TestClient, db_session: Session, mocker: MockerFixture):
    mocker.patch.object(AuthService, "exchange_oauth_code", return_value=GOOGLE_PROFILE)

    client.get("/api/auth/google/callback?code=first", follow_redirects=False)
    client.get("/api/auth/google/callback?code=second", follow_redirects=False)

    assert db_session.query(User).filter(User.google_id == "google-sub-1").count() == 1


def test_callback_refuses_email_of_local_account(client: TestClient, register_user, mocker: MockerFixture):
    register_user(email="gail@x.com")
    mocker.patch.object(AuthService, "exchange_oauth_code", return_value=GOOGLE_PROFILE)

    response = client.get("/api/auth/google/callback?code=abc", follow_redirects=False)

    assert response.headers["location"] == f"{settings.CLIENT_URL}/login?error=email_in_use"


def test_callback_exchange_failure_reports_oauth_error(client: TestClient, mocker: MockerFixture):
    mocker.patch.object(AuthService, "exchange_oauth_code", side_effect=OAuthError("oauth_error", "invalid_grant"))

    response = client.get("/api/auth/google/callback?code=stale", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == f"{settings.CLIENT_URL}/login?error=oauth_error"


def test_exchange_oauth_code_verifies_id_token(db_session: Session, mocker: MockerFixture):
    flow = mocker.MagicMock()
    flow.credentials.id_token = "raw-id-token"
    mocker.patch("tasky.auth.service.Flow.from_client_config", return_value=flow)
    verify = mocker.patch(
        "tasky.auth.service.id_token.verify_oauth2_token",
        return_value={"iss": "https://accounts.google.com", "sub": "s-1", "email": "gail@x.com", "name": "Gail"},
    )

    profile = AuthService(db_session).exchange_oauth_code("abc")

    flow.fetch_token.assert_called_once_with(code="abc")
    assert verify.call_args.args[0] == "raw-id-token"
    assert profile == GoogleProfile(google_id="s-1", email="gail@x.com", name="Gail")


def test_exchange_oauth_code_rejects_wrong_issuer(db_session: Session, mocker: MockerFixture):
    flow = mocker.MagicMock()
    flow.credentials.id_token = "raw-id-token"
    mocker.patch("tasky.auth.service.Flow.from_client_config", return_value=flow)
    mocker.patch(
        "tasky.auth.service.id_token.verify_oauth2_token",
        return_value={"iss": "evil.example", "sub": "s-1", "email": "gail@x.com"},
    )

    with pytest.raises(OAuthError) as exc_info:
        AuthService(db_session).exchange_oauth_code("abc")
    assert exc_info.value.code == "oauth_error"
