"""API tests for admin onboarding under /api/v1/auth/admin."""

from httpx import AsyncClient

from tests.conftest import STRONG_PASSWORD, link_token, temp_password

ADMIN = "/api/v1/auth/admin"
STAFF_PROFILE = {"designation": "Librarian", "permissions": ["loans:write"]}


async def _create_admin(
    client: AsyncClient, email: str = "staff@test.com", headers=None, profile=None
):
    return await client.post(
        ADMIN,
        json={"name": "Staff", "email": email, **(profile or {})},
        headers=headers,
    )


async def _onboard(client: AsyncClient, notifier, dispatcher, email: str = "staff@test.com") -> str:
    """Create, verify and reset an admin; return its new password."""
    assert (await _create_admin(client, email)).status_code == 201
    await notifier.drain()
    token = link_token(dispatcher.last_to(email)["html"], "/auth/admin/verify/")
    assert (await client.get(f"{ADMIN}/verify/{token}")).status_code == 200

    await notifier.drain()
    welcome = dispatcher.last_to(email)
    password = temp_password(welcome["html"])
    reset_token = link_token(welcome["html"], "/auth/admin/reset-password/")

    r = await client.post(f"{ADMIN}/login", json={"email": email, "password": password})
    assert r.status_code == 403

    r = await client.put(
        f"{ADMIN}/reset-password/{reset_token}",
        json={"oldPassword": password, "newPassword": "N3w!Passw0rd", "confirmNewPassword": "N3w!Passw0rd"},
    )
    assert r.status_code == 200, r.text
    return "N3w!Passw0rd"


async def _admin_bearer(client: AsyncClient, notifier, dispatcher) -> tuple[str, dict[str, str]]:
    password = await _onboard(client, notifier, dispatcher)
    r = await client.post(f"{ADMIN}/login", json={"email": "staff@test.com", "password": password})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    return data["account"]["id"], {"Authorization": f"Bearer {data['access_token']}"}


async def test_admin_onboarding_flow(client: AsyncClient, notifier, dispatcher) -> None:
    r = await _create_admin(client)
    assert r.status_code == 201
    account = r.json()["data"]["account"]
    assert account["kind"] == "admin"
    assert not account["designation"]

    await notifier.drain()
    assert dispatcher.last_to("staff@test.com")["subject"] == "Confirm Your Email Address"
    token = link_token(dispatcher.last_to("staff@test.com")["html"], "/auth/admin/verify/")
    assert (await client.get(f"{ADMIN}/verify/{token}")).status_code == 200

    await notifier.drain()
    welcome = dispatcher.last_to("staff@test.com")
    assert welcome["subject"] == "Welcome Email"
    password = temp_password(welcome["html"])
    reset_token = link_token(welcome["html"], "/auth/admin/reset-password/")

    r = await client.post(f"{ADMIN}/login", json={"email": "staff@test.com", "password": password})
    assert r.status_code == 403

    r = await client.put(
        f"{ADMIN}/reset-password/{reset_token}",
        json={"oldPassword": password, "newPassword": "N3w!Passw0rd", "confirmNewPassword": "N3w!Passw0rd"},
    )
    assert r.status_code == 200

    r = await client.post(f"{ADMIN}/login", json={"email": "staff@test.com", "password": "N3w!Passw0rd"})
    assert r.status_code == 200
    access = r.json()["data"]["access_token"]

    r = await client.get(f"{ADMIN}/me", headers={"Authorization": f"Bearer {access}"})
    assert r.status_code == 200
    assert r.json()["data"]["account"]["permissions"] == []


async def test_anonymous_create_cannot_assign_permissions(
    client: AsyncClient, dispatcher, notifier, session_factory
) -> None:
    from libris.infrastructure.persistence.models import Admin
    from libris.infrastructure.persistence.repositories import AccountRepository

    r = await _create_admin(client, "rogue@test.com", profile={"permissions": ["*"]})
    assert r.status_code == 403
    assert r.json()["success"] is False

    r = await _create_admin(
        client,
        "rogue@test.com",
        headers={"Authorization": "Bearer not-a-token"},
        profile=STAFF_PROFILE,
    )
    assert r.status_code == 403

    await notifier.drain()
    assert dispatcher.to("rogue@test.com") == []
    async with session_factory() as session:
        assert await AccountRepository(session, Admin).get_by_email("rogue@test.com") is None


async def test_admin_session_can_assign_permissions(
    client: AsyncClient, notifier, dispatcher
) -> None:
    _, headers = await _admin_bearer(client, notifier, dispatcher)

    r = await _create_admin(client, "second@test.com", headers=headers, profile=STAFF_PROFILE)
    assert r.status_code == 201, r.text
    account = r.json()["data"]["account"]
    assert account["designation"] == "Librarian"
    assert account["permissions"] == ["loans:write"]


async def test_admin_and_user_emails_are_exclusive(client: AsyncClient) -> None:
    assert (await _create_admin(client)).status_code == 201
    r = await client.post(
        "/api/v1/auth/signup",
        json={
            "email": "staff@test.com",
            "password": STRONG_PASSWORD,
            "confirmPassword": STRONG_PASSWORD,
        },
    )
    assert r.status_code == 403

    r = await client.post(
        "/api/v1/auth/signup",
        json={"email": "reader@test.com", "password": STRONG_PASSWORD, "confirmPassword": STRONG_PASSWORD},
    )
    assert r.status_code == 201
    assert (await _create_admin(client, "reader@test.com")).status_code == 403


async def test_admin_created_by_admin_session(
    client: AsyncClient, notifier, dispatcher, session_factory
) -> None:
    from libris.infrastructure.persistence.models import Admin
    from libris.infrastructure.persistence.repositories import AccountRepository

    password = await _onboard(client, notifier, dispatcher)
    r = await client.post(f"{ADMIN}/login", json={"email": "staff@test.com", "password": password})
    creator_id = r.json()["data"]["account"]["id"]
    access = r.json()["data"]["access_token"]

    r = await _create_admin(client, "second@test.com", headers={"Authorization": f"Bearer {access}"})
    assert r.status_code == 201

    async with session_factory() as session:
        second = await AccountRepository(session, Admin).get_by_email("second@test.com")
        assert second.created_by == creator_id


async def test_admin_me_rejects_invalid_token(client: AsyncClient) -> None:
    r = await client.get(f"{ADMIN}/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
