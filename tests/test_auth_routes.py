from datetime import timedelta

import pytest

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, PASSWORD, login, register_verified, registration
from foodshare.models import utcnow

pytestmark = pytest.mark.anyio


async def test_register_creates_unverified_user_and_mails_link(client, repo, mailer):
    r = await client.post("/api/register", json=registration("Vol@FoodShare.org"))

    assert r.status_code == 201, r.text
    assert "verify" in r.json()["message"].lower()
    user = await repo.get_user_by_email("vol@foodshare.org")
    assert user.email == "vol@foodshare.org"
    assert user.is_verified is False
    assert user.password_hash != PASSWORD
    token = mailer.token_for("vol@foodshare.org", "verify-email")
    assert token == user.verification_token
    assert "http://foodshare.test/verify-email?token=" in mailer.to("vol@foodshare.org")[0]["html"]


async def test_register_ngo_creates_unapproved_organization(client, repo):
    r = await client.post("/api/register", json=registration("ngo@foodshare.org", "ngo", website="https://pantry.org"))

    assert r.status_code == 201, r.text
    user = await repo.get_user_by_email("ngo@foodshare.org")
    org = await repo.get_organization_by_user(user.id)
    assert org.organization_name == "ngo pantry"
    assert org.website == "https://pantry.org"
    assert org.is_approved is False


async def test_register_rejects_email_differing_only_in_case(client):
    assert (await client.post("/api/register", json=registration("dup@foodshare.org"))).status_code == 201

    r = await client.post("/api/register", json=registration("DUP@foodshare.org"))

    assert r.status_code == 400
    assert r.json() == {"message": "Email already registered"}


@pytest.mark.parametrize(
    "overrides",
    [
        {"role": "admin"},
        {"confirmPassword": "something-else"},
        {"password": "short", "confirmPassword": "short"},
        {"email": "not-an-email"},
        {"firstName": ""},
    ],
)
async def test_register_validation_failures_are_400(client, overrides):
    r = await client.post("/api/register", json={**registration("bad@foodshare.org"), **overrides})

    assert r.status_code == 400
    assert r.json()["message"] == "Validation error"


async def test_failed_verification_mail_leaves_address_free(client, mailer, repo):
    mailer.failures = 1

    first = await client.post("/api/register", json=registration("retry@foodshare.org"))

    assert first.status_code == 502
    assert first.json() == {"message": "Failed to send email"}
    assert await repo.get_user_by_email("retry@foodshare.org") is None

    retry = await client.post("/api/register", json=registration("retry@foodshare.org"))
    assert retry.status_code == 201
    assert mailer.token_for("retry@foodshare.org", "verify-email")


async def test_register_ngo_requires_organization_name(client):
    body = registration("ngo@foodshare.org", "ngo")
    del body["organizationName"]

    r = await client.post("/api/register", json=body)

    assert r.status_code == 400


async def test_login_requires_verified_email(client, mailer):
    await client.post("/api/register", json=registration("late@foodshare.org"))

    r = await client.post("/api/login", json={"email": "late@foodshare.org", "password": PASSWORD})
    assert r.status_code == 401
    assert r.json() == {"message": "Please verify your email before logging in"}

    token = mailer.token_for("late@foodshare.org", "verify-email")
    assert (await client.get("/api/verify-email", params={"token": token})).status_code == 200

    user = await login(client, "late@foodshare.org")
    assert user["email"] == "late@foodshare.org"
    assert user["isVerified"] is True


async def test_login_with_wrong_password_or_unknown_email(client, mailer):
    await register_verified(client, mailer, "v@foodshare.org")

    wrong = await client.post("/api/login", json={"email": "v@foodshare.org", "password": "not-the-password"})
    unknown = await client.post("/api/login", json={"email": "nobody@foodshare.org", "password": PASSWORD})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"message": "Incorrect email or password"}


async def test_login_with_malformed_email_is_401(client):
    r = await client.post("/api/login", json={"email": "not-an-email", "password": PASSWORD})

    assert r.status_code == 401
    assert r.json() == {"message": "Incorrect email or password"}


async def test_login_response_hides_credentials_and_sets_http_only_cookie(client, mailer, settings):
    await register_verified(client, mailer, "v@foodshare.org")

    r = await client.post("/api/login", json={"email": "V@foodshare.org", "password": PASSWORD})

    body = r.json()
    for secret in ("password", "passwordHash", "verificationToken", "resetToken", "resetTokenExpiry"):
        assert secret not in body
    cookie = r.headers["set-cookie"]
    assert cookie.startswith(f"{settings.session_cookie_name}=")
    assert "httponly" in cookie.lower()
    assert f"Max-Age={7 * 24 * 60 * 60}" in cookie


async def test_verify_email_token_is_single_use(client, mailer):
    await client.post("/api/register", json=registration("v@foodshare.org"))
    token = mailer.token_for("v@foodshare.org", "verify-email")

    assert (await client.get("/api/verify-email", params={"token": token})).status_code == 200
    again = await client.get("/api/verify-email", params={"token": token})

    assert again.status_code == 400
    assert again.json() == {"message": "Invalid or expired token"}


async def test_verify_email_without_token(client):
    r = await client.get("/api/verify-email")

    assert r.status_code == 400
    assert r.json() == {"message": "Invalid token"}


async def test_current_user_needs_a_session(client, mailer):
    assert (await client.get("/api/user")).status_code == 401

    await register_verified(client, mailer, "v@foodshare.org")
    await login(client, "v@foodshare.org")
    me = await client.get("/api/user")

    assert me.status_code == 200
    assert me.json()["role"] == "volunteer"
    assert me.json()["ngo"] is None


async def test_current_user_includes_ngo_for_representatives(client, mailer):
    await register_verified(client, mailer, "ngo@foodshare.org", "ngo")
    await login(client, "ngo@foodshare.org")

    me = (await client.get("/api/user")).json()

    assert me["ngo"]["organizationName"] == "ngo pantry"
    assert me["ngo"]["isApproved"] is False


async def test_tampered_cookie_is_anonymous(client, settings):
    client.cookies.set(settings.session_cookie_name, "not-a-valid-token")

    assert (await client.get("/api/user")).status_code == 401


async def test_logout_destroys_session(client, mailer):
    await register_verified(client, mailer, "v@foodshare.org")
    await login(client, "v@foodshare.org")
    stolen = dict(client.cookies)

    r = await client.post("/api/logout")

    assert r.status_code == 200
    assert (await client.get("/api/user")).status_code == 401
    # the old cookie no longer maps to a server-side session
    for name, value in stolen.items():
        client.cookies.set(name, value)
    assert (await client.get("/api/user")).status_code == 401


async def test_session_sees_changes_to_user_immediately(client, repo, mailer):
    await register_verified(client, mailer, "v@foodshare.org")
    user = await login(client, "v@foodshare.org")

    await repo.update_user(user["id"], {"first_name": "Renamed"})

    assert (await client.get("/api/user")).json()["firstName"] == "Renamed"


async def test_forgot_password_does_not_reveal_registration(client, mailer):
    await register_verified(client, mailer, "v@foodshare.org")
    before = len(mailer.sent)

    known = await client.post("/api/forgot-password", json={"email": "v@foodshare.org"})
    unknown = await client.post("/api/forgot-password", json={"email": "ghost@foodshare.org"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len(mailer.sent) == before + 1
    assert mailer.sent[-1]["to"] == "v@foodshare.org"


async def test_reset_password_flow(client, repo, mailer):
    await register_verified(client, mailer, "v@foodshare.org")
    await client.post("/api/forgot-password", json={"email": "v@foodshare.org"})
    token = mailer.token_for("v@foodshare.org", "reset-password")
    user = await repo.get_user_by_email("v@foodshare.org")
    assert user.reset_token_expiry - utcnow() <= timedelta(hours=1)

    r = await client.post("/api/reset-password", json={"token": token, "password": "brand-new-pass"})

    assert r.status_code == 200
    assert (await client.post("/api/login", json={"email": "v@foodshare.org", "password": PASSWORD})).status_code == 401
    await login(client, "v@foodshare.org", "brand-new-pass")
    user = await repo.get_user_by_email("v@foodshare.org")
    assert user.reset_token is None and user.reset_token_expiry is None
    # single use
    again = await client.post("/api/reset-password", json={"token": token, "password": "another-pass"})
    assert again.status_code == 400


async def test_reset_password_rejects_expired_token(client, repo, mailer):
    await register_verified(client, mailer, "v@foodshare.org")
    await client.post("/api/forgot-password", json={"email": "v@foodshare.org"})
    token = mailer.token_for("v@foodshare.org", "reset-password")
    user = await repo.get_user_by_email("v@foodshare.org")
    await repo.update_user(user.id, {"reset_token_expiry": utcnow() - timedelta(minutes=1)})

    r = await client.post("/api/reset-password", json={"token": token, "password": "brand-new-pass"})

    assert r.status_code == 400
    assert r.json() == {"message": "Invalid or expired token"}


async def test_reset_password_checks_confirmation(client):
    r = await client.post(
        "/api/reset-password",
        json={"token": "t", "password": "brand-new-pass", "confirmPassword": "different-pass"},
    )

    assert r.status_code == 400


async def test_seeded_admin_can_log_in(client):
    admin = await login(client, ADMIN_EMAIL, ADMIN_PASSWORD)

    assert admin["role"] == "admin"
