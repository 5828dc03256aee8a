"""Integration tests for auth API endpoints."""

from datetime import timedelta

from authentication.auth import create_access_token
from repositories.user_repository import UserRepository
from services.password_reset_service import PasswordResetService

REGISTER_PAYLOAD = {
    "username": "newuser",
    "email": "newuser@example.com",
    "password": "SecurePassword123!",
}


class TestRegister:
    """Test cases for POST /api/auth/register."""

    def test_register_new_user(self, client, db_session):
        response = client.post("/api/auth/register", json=REGISTER_PAYLOAD)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == (
            "User registered successfully! Please check your email to verify your account."
        )
        user = body["data"]["user"]
        assert user["username"] == "newuser"
        assert user["isVerified"] is False
        assert user["isAdmin"] is False
        assert user["reputation"] == 0
        assert "hashedPassword" not in user
        assert body["data"]["token"]

        stored = UserRepository(db_session).get_by_email("newuser@example.com")
        assert stored.verification_token is not None
        assert stored.hashed_password != REGISTER_PAYLOAD["password"]

    def test_register_missing_fields(self, client):
        response = client.post("/api/auth/register", json={"username": "x"})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Please provide username, email, and password",
            "correlationId": response.json()["correlationId"],
        }

    def test_register_duplicate_email(self, client, test_user):
        response = client.post(
            "/api/auth/register",
            json={**REGISTER_PAYLOAD, "email": test_user.email},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email already registered"

    def test_register_duplicate_username(self, client, test_user):
        response = client.post(
            "/api/auth/register",
            json={**REGISTER_PAYLOAD, "username": test_user.username},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Username already taken"

    def test_register_existing_verified_account(self, client, test_user):
        response = client.post(
            "/api/auth/register",
            json={
                "username": test_user.username,
                "email": test_user.email,
                "password": "SecurePassword123!",
            },
        )

        assert response.status_code == 400
        assert "Please login instead" in response.json()["message"]

    def test_register_existing_unverified_account(self, client, unverified_user):
        response = client.post(
            "/api/auth/register",
            json={
                "username": unverified_user.username,
                "email": unverified_user.email,
                "password": "SecurePassword123!",
            },
        )

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Account already exists but email is not verified."
        )

    def test_register_is_rate_limited(self, client):
        statuses = [
            client.post(
                "/api/auth/register",
                json={
                    "username": f"user{i}",
                    "email": f"user{i}@example.com",
                    "password": "SecurePassword123!",
                },
            ).status_code
            for i in range(6)
        ]

        assert statuses[:5] == [201] * 5
        assert statuses[5] == 429


class TestLogin:
    """Test cases for POST /api/auth/login."""

    def test_login_success(self, client, test_user):
        response = client.post(
            "/api/auth/login",
            json={"email": test_user.email, "password": "Password123!"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["id"] == test_user.id
        assert "profile" in body["data"]["user"]
        assert body["data"]["token"]

    def test_login_wrong_password_and_unknown_email_share_message(
        self, client, test_user
    ):
        wrong_password = client.post(
            "/api/auth/login",
            json={"email": test_user.email, "password": "Nope123!"},
        )
        unknown_email = client.post(
            "/api/auth/login",
            json={"email": "ghost@example.com", "password": "Password123!"},
        )

        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json()["message"] == "Invalid email or password"
        assert unknown_email.json()["message"] == "Invalid email or password"

    def test_login_missing_fields(self, client):
        response = client.post("/api/auth/login", json={"email": "a@b.c"})

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide email and password"

    def test_login_unverified_user_forbidden(self, client, unverified_user):
        response = client.post(
            "/api/auth/login",
            json={"email": unverified_user.email, "password": "Password123!"},
        )

        assert response.status_code == 403
        assert response.json()["message"] == (
            "Please verify your email address before logging in."
        )

    def test_login_banned_user_forbidden(self, client, make_user):
        banned = make_user("banned", is_banned=True)

        response = client.post(
            "/api/auth/login",
            json={"email": banned.email, "password": "Password123!"},
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Account has been banned"


class TestEmailVerification:
    def test_verify_email(self, client, db_session):
        client.post("/api/auth/register", json=REGISTER_PAYLOAD)
        user = UserRepository(db_session).get_by_email("newuser@example.com")
        token = user.verification_token

        response = client.get(f"/api/auth/verify/{token}")

        assert response.status_code == 200
        db_session.refresh(user)
        assert user.is_verified is True
        assert user.verification_token is None
        assert user.email_verified_at is not None

    def test_verify_email_invalid_token(self, client):
        response = client.get("/api/auth/verify/not-a-token")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired verification token"

    def test_resend_verification_missing_email(self, client):
        response = client.post("/api/auth/resend-verification", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide email address"

    def test_resend_verification_unknown_email(self, client):
        response = client.post(
            "/api/auth/resend-verification", json={"email": "ghost@example.com"}
        )

        assert response.status_code == 404
        assert response.json()["message"] == "No account found with this email address"

    def test_resend_verification_already_verified(self, client, test_user):
        response = client.post(
            "/api/auth/resend-verification", json={"email": test_user.email}
        )

        assert response.status_code == 400
        assert "already verified" in response.json()["message"]

    def test_resend_verification_issues_token_when_missing(
        self, client, db_session, unverified_user
    ):
        response = client.post(
            "/api/auth/resend-verification", json={"email": unverified_user.email}
        )

        assert response.status_code == 200
        db_session.refresh(unverified_user)
        assert unverified_user.verification_token is not None


class TestProtectedRoutes:
    def test_me_requires_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token provided"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_me_with_bad_token(self, client):
        response = client.get(
            "/api/auth/me", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"

    def test_me_with_expired_token(self, client, test_user):
        token = create_access_token(test_user.id, expires_delta=timedelta(minutes=-1))

        response = client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Token expired"

    def test_me_for_deleted_user(self, client):
        token = create_access_token(9999)

        response = client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "User not found, token invalid"

    def test_me_returns_current_user_without_password(
        self, client, test_user, auth_headers
    ):
        response = client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["email"] == test_user.email
        assert "hashedPassword" not in user
        assert "hashed_password" not in user

    def test_suspended_user_rejected(self, client, make_user, headers_for):
        suspended = make_user("suspended", is_suspended=True)

        response = client.get("/api/auth/me", headers=headers_for(suspended))

        assert response.status_code == 403
        assert response.json()["message"] == "Account is suspended"

    def test_update_profile_strips_markup(self, client, auth_headers):
        response = client.put(
            "/api/auth/profile",
            json={
                "bio": "<script>x</script>Backend dev",
                "location": " Montreal ",
                "website": "https://example.com",
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        profile = response.json()["data"]["user"]["profile"]
        assert "<script>" not in profile["bio"]
        assert profile["location"] == "Montreal"
        assert profile["website"] == "https://example.com"


class TestPasswordReset:
    def test_forgot_password_same_answer_for_unknown_email(self, client, test_user):
        known = client.post(
            "/api/auth/forgot-password", json={"email": test_user.email}
        )
        unknown = client.post(
            "/api/auth/forgot-password", json={"email": "ghost@example.com"}
        )

        assert known.status_code == unknown.status_code == 200
        assert known.json()["message"] == unknown.json()["message"]

    def test_forgot_password_stores_token_hash(self, client, db_session, test_user):
        client.post("/api/auth/forgot-password", json={"email": test_user.email})

        db_session.refresh(test_user)
        assert test_user.reset_password_token is not None
        assert len(test_user.reset_password_token) == 64

    def test_reset_password_success(self, client, db_session, test_user):
        token = PasswordResetService.issue_reset_token(db_session, test_user)

        response = client.post(
            f"/api/auth/reset-password/{token}", json={"password": "BrandNew123!"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Password has been reset successfully"
        assert response.json()["data"]["token"]

        login = client.post(
            "/api/auth/login",
            json={"email": test_user.email, "password": "BrandNew123!"},
        )
        assert login.status_code == 200

    def test_reset_password_token_is_single_use(self, client, db_session, test_user):
        token = PasswordResetService.issue_reset_token(db_session, test_user)
        client.post(
            f"/api/auth/reset-password/{token}", json={"password": "BrandNew123!"}
        )

        again = client.post(
            f"/api/auth/reset-password/{token}", json={"password": "Another123!"}
        )

        assert again.status_code == 400
        assert again.json()["message"] == (
            "Password reset token is invalid or has expired"
        )

    def test_reset_password_rejects_weak_password(self, client, db_session, test_user):
        token = PasswordResetService.issue_reset_token(db_session, test_user)

        response = client.post(
            f"/api/auth/reset-password/{token}", json={"password": "weak"}
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith(
            "Password must be at least 8 characters long"
        )
