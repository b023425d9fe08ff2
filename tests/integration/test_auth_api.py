"""
Integration tests - sign-up, sign-in, sessions and password recovery.
"""

import re
from datetime import timedelta

from conftest import PASSWORD, sign_in, sign_up

from pos_admin.infrastructure.database.models import AuthUser, utcnow


def _reset_token(mailer) -> str:
    body = mailer.outbox[-1].get_content()
    return re.search(r"reset-password\?token=(\S+)", body).group(1)


class TestSignUp:
    """Test account registration."""

    def test_first_account_is_superadmin(self, client):
        first = sign_up(client, "owner@example.com", full_name="Sari")
        second = sign_up(client, "kasir@example.com")
        assert first["role"] == "superadmin"
        assert first["email"] == "owner@example.com"
        assert second["role"] == "staff"

    def test_duplicate_email_conflicts(self, client):
        sign_up(client, "owner@example.com")
        response = client.post(
            "/api/v1/auth/sign-up", json={"email": "Owner@Example.com", "password": PASSWORD}
        )
        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_ALREADY_REGISTERED"

    def test_short_password_rejected(self, client):
        response = client.post("/api/v1/auth/sign-up", json={"email": "a@example.com", "password": "12345"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Password must be at least 6 characters"


class TestSignIn:
    """Test sign-in, lockout and sessions."""

    def test_token_response_shape(self, client):
        sign_up(client, "owner@example.com")
        response = client.post(
            "/api/v1/auth/sign-in", json={"email": "owner@example.com", "password": PASSWORD}
        )
        body = response.json()
        assert response.status_code == 200
        assert body["token_type"] == "Bearer"
        assert body["expires_in"] == 8 * 3600

    def test_wrong_password(self, client):
        sign_up(client, "owner@example.com")
        response = client.post(
            "/api/v1/auth/sign-in", json={"email": "owner@example.com", "password": "wrong-one"}
        )
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    def test_five_failures_lock_the_account(self, client):
        """The fifth failure locks the account, even for the right password."""
        sign_up(client, "owner@example.com")
        codes = []
        for _ in range(5):
            response = client.post(
                "/api/v1/auth/sign-in", json={"email": "owner@example.com", "password": "wrong-one"}
            )
            codes.append(response.json()["code"])
        assert codes[:4] == ["INVALID_CREDENTIALS"] * 4
        assert codes[4] == "ACCOUNT_LOCKED"

        response = client.post(
            "/api/v1/auth/sign-in", json={"email": "owner@example.com", "password": PASSWORD}
        )
        assert response.status_code == 401
        assert response.json()["code"] == "ACCOUNT_LOCKED"

    def _lock(self, client) -> None:
        for _ in range(5):
            client.post("/api/v1/auth/sign-in", json={"email": "owner@example.com", "password": "wrong-one"})

    def test_lock_expires(self, client, db_session):
        sign_up(client, "owner@example.com")
        self._lock(client)
        user = db_session.query(AuthUser).filter(AuthUser.email == "owner@example.com").one()
        assert user.locked_until is not None
        user.locked_until = utcnow() - timedelta(minutes=1)
        db_session.commit()

        sign_in(client, "owner@example.com")
        db_session.refresh(user)
        assert user.locked_until is None
        assert user.failed_login_attempts == 0

    def test_reset_clears_lock(self, client, mailer):
        sign_up(client, "owner@example.com")
        self._lock(client)
        client.post("/api/v1/auth/forgot-password", json={"email": "owner@example.com"})
        response = client.post(
            "/api/v1/auth/reset-password",
            json={"token": _reset_token(mailer), "password": "brand-new", "confirm_password": "brand-new"},
        )
        assert response.status_code == 200
        sign_in(client, "owner@example.com", "brand-new")

    def test_oauth2_token_form(self, client):
        sign_up(client, "owner@example.com")
        response = client.post(
            "/api/v1/auth/token", data={"username": "owner@example.com", "password": PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_me_and_permissions(self, client):
        sign_up(client, "owner@example.com", full_name="Sari")
        headers = sign_in(client, "owner@example.com")

        me = client.get("/api/v1/auth/me", headers=headers).json()
        assert me["full_name"] == "Sari"
        assert me["outlet_id"] is None

        permissions = client.get("/api/v1/auth/permissions", headers=headers).json()
        assert permissions["role"] == "superadmin"
        assert permissions["can_view_all_outlets"] is True
        assert "USER_MANAGE" in permissions["permissions"]

    def test_missing_token(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401

    def test_sign_out_revokes_session(self, client):
        sign_up(client, "owner@example.com")
        headers = sign_in(client, "owner@example.com")
        assert client.post("/api/v1/auth/sign-out", headers=headers).status_code == 200
        assert client.get("/api/v1/auth/me", headers=headers).status_code == 401


class TestPasswordRecovery:
    """Test forgot/reset/change password."""

    def test_forgot_password_does_not_reveal_email(self, client, mailer):
        sign_up(client, "owner@example.com")
        known = client.post("/api/v1/auth/forgot-password", json={"email": "owner@example.com"})
        unknown = client.post("/api/v1/auth/forgot-password", json={"email": "ghost@example.com"})
        assert known.json() == unknown.json()
        assert len(mailer.outbox) == 1
        assert mailer.outbox[0]["To"] == "owner@example.com"

    def test_reset_flow(self, client, mailer):
        """Reset sets the password, burns the token and signs out every session."""
        sign_up(client, "owner@example.com")
        old_headers = sign_in(client, "owner@example.com")
        client.post("/api/v1/auth/forgot-password", json={"email": "owner@example.com"})
        token = _reset_token(mailer)

        response = client.post(
            "/api/v1/auth/reset-password",
            json={"token": token, "password": "brand-new", "confirm_password": "brand-new"},
        )
        assert response.status_code == 200
        assert client.get("/api/v1/auth/me", headers=old_headers).status_code == 401
        sign_in(client, "owner@example.com", "brand-new")

        again = client.post(
            "/api/v1/auth/reset-password",
            json={"token": token, "password": "another1", "confirm_password": "another1"},
        )
        assert again.status_code == 401

    def test_reset_rejects_mismatch_and_short_password(self, client, mailer):
        sign_up(client, "owner@example.com")
        client.post("/api/v1/auth/forgot-password", json={"email": "owner@example.com"})
        token = _reset_token(mailer)

        mismatch = client.post(
            "/api/v1/auth/reset-password",
            json={"token": token, "password": "abcdef", "confirm_password": "abcdeg"},
        )
        assert mismatch.status_code == 400
        assert mismatch.json()["detail"] == "Passwords do not match"

        short = client.post(
            "/api/v1/auth/reset-password",
            json={"token": token, "password": "abc", "confirm_password": "abc"},
        )
        assert short.json()["detail"] == "Password must be at least 6 characters"

    def test_change_password(self, client):
        sign_up(client, "owner@example.com")
        headers = sign_in(client, "owner@example.com")

        wrong = client.post(
            "/api/v1/auth/change-password",
            json={"old_password": "nope-nope", "new_password": "changed1"},
            headers=headers,
        )
        assert wrong.status_code == 400

        ok = client.post(
            "/api/v1/auth/change-password",
            json={"old_password": PASSWORD, "new_password": "changed1"},
            headers=headers,
        )
        assert ok.status_code == 200
        sign_in(client, "owner@example.com", "changed1")
