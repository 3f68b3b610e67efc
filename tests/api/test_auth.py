"""API tests for the user lifecycle under /api/v1/auth."""

from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from libris.infrastructure.persistence import database
from libris.infrastructure.persistence.models import User
from libris.infrastructure.persistence.repositories import AccountRepository
from tests.conftest import STRONG_PASSWORD, InMemoryRevocationStore, link_token

AUTH = "/api/v1/auth"
BROWSER = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Accept-Language": "en-GB,en;q=0.8",
}


def _signup_body(email: str = "a@test.com") -> dict:
    return {
        "name": "Ada",
        "email": email,
        "password": STRONG_PASSWORD,
        "confirmPassword": STRONG_PASSWORD,
    }


def _assert_envelope(body: dict, status: int, success: bool) -> None:
    assert set(body) == {"timeStamp", "success", "data", "message", "status"}
    assert body["status"] == status
    assert body["success"] is success
    assert isinstance(body["message"], str) and body["message"]


async def _signup_and_verify(client: AsyncClient, notifier, dispatcher, email: str = "a@test.com") -> None:
    r = await client.post(f"{AUTH}/signup", json=_signup_body(email))
    assert r.status_code == 201, r.text
    await notifier.drain()
    token = link_token(dispatcher.last_to(email)["html"], "/auth/verify/")
    r = await client.get(f"{AUTH}/verify/{token}")
    assert r.status_code == 200, r.text


async def _login(client: AsyncClient, email: str = "a@test.com", password: str = STRONG_PASSWORD):
    return await client.post(
        f"{AUTH}/login", json={"email": email, "password": password}, headers=BROWSER
    )


async def test_signup_verify_login_scenario(client: AsyncClient, notifier, dispatcher) -> None:
    """Signup, verify once, reject replay and unverified login, then log in."""
    r = await client.post(f"{AUTH}/signup", json=_signup_body())
    assert r.status_code == 201
    body = r.json()
    _assert_envelope(body, 201, True)
    assert body["data"]["account"]["email"] == "a@test.com"
    assert body["data"]["account"]["is_email_verified"] is False
    assert "hashed_password" not in body["data"]["account"]

    r = await _login(client)
    assert r.status_code == 401
    _assert_envelope(r.json(), 401, False)

    await notifier.drain()
    token = link_token(dispatcher.last_to("a@test.com")["html"], "/auth/verify/")
    r = await client.get(f"{AUTH}/verify/{token}")
    assert r.status_code == 200
    assert r.json()["message"] == "Email has been successfully verified."

    r = await client.get(f"{AUTH}/verify/{token}")
    assert r.status_code == 403
    _assert_envelope(r.json(), 403, False)

    r = await _login(client)
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["token_type"] == "bearer"
    assert data["account"]["is_email_verified"] is True


async def test_wrong_password_is_401_and_recorded(
    client: AsyncClient, notifier, dispatcher, session_factory
) -> None:
    from libris.infrastructure.persistence.models import User
    from libris.infrastructure.persistence.repositories import AccountRepository

    await _signup_and_verify(client, notifier, dispatcher)
    r = await _login(client, password="Wrong123!")
    assert r.status_code == 401
    assert r.json()["data"]["error"] == "INVALID_CREDENTIALS"

    async with session_factory() as session:
        account = await AccountRepository(session, User).get_by_email("a@test.com")
        assert account.failed_login_attempts == 1
        assert account.failed_logins[0]["device"]["browser"] == "Firefox"
        assert account.failed_logins[0]["device"]["os"] == "Linux"


async def test_duplicate_signup_is_409(client: AsyncClient) -> None:
    assert (await client.post(f"{AUTH}/signup", json=_signup_body())).status_code == 201
    r = await client.post(f"{AUTH}/signup", json=_signup_body())
    assert r.status_code == 409
    _assert_envelope(r.json(), 409, False)


async def test_policy_violation_is_400_with_field(client: AsyncClient) -> None:
    body = _signup_body()
    body["confirmPassword"] = "Different1!"
    r = await client.post(f"{AUTH}/signup", json=body)
    assert r.status_code == 400
    assert r.json()["data"]["field"] == "confirm_password"


async def test_request_validation_is_400_envelope(client: AsyncClient) -> None:
    r = await client.post(f"{AUTH}/signup", json={"name": "Ada"})
    assert r.status_code == 400
    body = r.json()
    _assert_envelope(body, 400, False)
    assert body["data"]["error"] == "VALIDATION_ERROR"
    fields = {e["field"] for e in body["data"]["errors"]}
    assert "email" in fields


async def test_resend_verification(client: AsyncClient, notifier, dispatcher) -> None:
    r = await client.post(f"{AUTH}/signup", json=_signup_body())
    account_id = r.json()["data"]["account"]["id"]
    await notifier.drain()
    first = link_token(dispatcher.last_to("a@test.com")["html"], "/auth/verify/")

    r = await client.get(f"{AUTH}/resend-verification/{account_id}")
    assert r.status_code == 200
    await notifier.drain()
    second = link_token(dispatcher.last_to("a@test.com")["html"], "/auth/verify/")

    assert (await client.get(f"{AUTH}/verify/{first}")).status_code == 403
    assert (await client.get(f"{AUTH}/verify/{second}")).status_code == 200
    assert (await client.get(f"{AUTH}/resend-verification/{account_id}")).status_code == 403
    assert (await client.get(f"{AUTH}/resend-verification/unknown-id")).status_code == 404


async def test_password_reset_over_http(client: AsyncClient, notifier, dispatcher) -> None:
    await _signup_and_verify(client, notifier, dispatcher)

    r = await client.post(f"{AUTH}/request-new-password", json={"email": "a@test.com"})
    assert r.status_code == 200
    await notifier.drain()
    token = link_token(dispatcher.last_to("a@test.com")["html"], "/auth/reset-password/")

    r = await client.put(
        f"{AUTH}/reset-password/{token}",
        json={"oldPassword": STRONG_PASSWORD, "newPassword": "Xyz987$k", "confirmNewPassword": "Xyz987$k"},
    )
    assert r.status_code == 200, r.text
    assert (await _login(client)).status_code == 401
    assert (await _login(client, password="Xyz987$k")).status_code == 200

    r = await client.post(f"{AUTH}/request-new-password", json={"email": "nobody@test.com"})
    assert r.status_code == 404


async def test_me_requires_bearer(client: AsyncClient, notifier, dispatcher) -> None:
    r = await client.get(f"{AUTH}/me")
    assert r.status_code == 401
    assert r.json()["message"] == "Please login first."

    await _signup_and_verify(client, notifier, dispatcher)
    access = (await _login(client)).json()["data"]["access_token"]
    r = await client.get(f"{AUTH}/me", headers={"Authorization": f"Bearer {access}"})
    assert r.status_code == 200
    assert r.json()["data"]["account"]["email"] == "a@test.com"

    r = await client.get(f"{AUTH}/admin/me", headers={"Authorization": f"Bearer {access}"})
    assert r.status_code == 403


async def test_refresh(client: AsyncClient, notifier, dispatcher) -> None:
    await _signup_and_verify(client, notifier, dispatcher)
    tokens = (await _login(client)).json()["data"]

    r = await client.post(f"{AUTH}/refresh", json={"refreshToken": tokens["refresh_token"]})
    assert r.status_code == 200
    assert r.json()["data"]["access_token"]

    r = await client.post(f"{AUTH}/refresh", json={"refreshToken": tokens["access_token"]})
    assert r.status_code == 401


async def test_logout(client: AsyncClient, app, notifier, dispatcher) -> None:
    r = await client.post(f"{AUTH}/logout")
    assert r.status_code == 401

    store = InMemoryRevocationStore()
    app.state.revocation_store = store
    await _signup_and_verify(client, notifier, dispatcher)
    access = (await _login(client)).json()["data"]["access_token"]
    headers = {"Authorization": f"Bearer {access}"}

    r = await client.post(f"{AUTH}/logout", headers=headers)
    assert r.status_code == 200
    assert r.json()["message"] == "You have been logged out successfully."
    assert store.revoked

    r = await client.get(f"{AUTH}/me", headers=headers)
    assert r.status_code == 401


async def test_request_id_header_is_echoed(client: AsyncClient) -> None:
    r = await client.get("/api/v1/health", headers={"X-Request-ID": "req-abc-123"})
    assert r.headers["X-Request-ID"] == "req-abc-123"
    r = await client.get("/api/v1/health")
    assert r.headers["X-Request-ID"]


async def test_logout_also_revokes_refresh_token(
    client: AsyncClient, app, notifier, dispatcher
) -> None:
    app.state.revocation_store = InMemoryRevocationStore()
    await _signup_and_verify(client, notifier, dispatcher)
    tokens = (await _login(client)).json()["data"]

    r = await client.post(
        f"{AUTH}/logout", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )
    assert r.status_code == 200

    r = await client.post(f"{AUTH}/refresh", json={"refreshToken": tokens["refresh_token"]})
    assert r.status_code == 401
    _assert_envelope(r.json(), 401, False)


async def test_failed_commit_sends_no_email(
    app, notifier, dispatcher, session_factory
) -> None:
    async def _db_commit_fails():
        async with session_factory() as session:
            yield session
            await session.rollback()
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

    app.dependency_overrides[database.get_db_transactional] = _db_commit_fails
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        await ac.post(f"{AUTH}/signup", json=_signup_body("locked@test.com"))

    await notifier.drain()
    assert dispatcher.to("locked@test.com") == []
    async with session_factory() as session:
        assert await AccountRepository(session, User).get_by_email("locked@test.com") is None
