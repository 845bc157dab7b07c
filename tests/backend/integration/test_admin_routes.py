import pytest

from marketplace.core.errors import ValidationError
from marketplace.core.security import decode_access_token
from marketplace.models.admin import Admin
from marketplace.services import admins as admins_service


pytestmark = pytest.mark.asyncio


async def test_first_admin_registration_is_open_and_super(client):
    resp = await client.post(
        "/api/v1/admins/register",
        json={"name": "Root", "email": "root@example.com", "password": "Root#1234", "role": "moderator"},
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["role"] == "super_admin"
    assert data["status"] == "aktif"
    assert "passwordHash" not in data

    stored = await Admin.get(email="root@example.com")
    assert stored.password_hash != "Root#1234"
    assert stored.password_hash.startswith("$argon2")


async def test_registration_closes_once_an_admin_exists(client, create_admin, admin_header_factory):
    super_admin, password = await create_admin()
    moderator, mod_password = await create_admin(role="moderator")

    anonymous = await client.post(
        "/api/v1/admins/register",
        json={"name": "X", "email": "x@example.com", "password": "X#123456"},
    )
    assert anonymous.status_code == 401

    mod_headers = await admin_header_factory(moderator.email, mod_password)
    by_moderator = await client.post(
        "/api/v1/admins/register",
        headers=mod_headers,
        json={"name": "X", "email": "x@example.com", "password": "X#123456"},
    )
    assert by_moderator.status_code == 403

    super_headers = await admin_header_factory(super_admin.email, password)
    by_super = await client.post(
        "/api/v1/admins/register",
        headers=super_headers,
        json={"name": "X", "email": "x@example.com", "password": "X#123456"},
    )
    assert by_super.status_code == 201
    assert by_super.json()["data"]["role"] == "moderator"


async def test_duplicate_admin_email_conflicts(client, create_admin, admin_header_factory):
    super_admin, password = await create_admin(email="boss@example.com")
    headers = await admin_header_factory(super_admin.email, password)

    resp = await client.post(
        "/api/v1/admins/register",
        headers=headers,
        json={"name": "Copy", "email": "BOSS@example.com", "password": "Copy#1234"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "EMAIL_EXISTS"


async def test_admin_login_exact_password_and_one_day_token(client, create_admin):
    admin, password = await create_admin(role="moderator")

    wrong = await client.post("/api/v1/admins/login", json={"email": admin.email, "password": password + "x"})
    unknown = await client.post("/api/v1/admins/login", json={"email": "nobody@example.com", "password": password})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"]

    ok = await client.post("/api/v1/admins/login", json={"email": admin.email, "password": password})
    assert ok.status_code == 200
    payload = decode_access_token(ok.json()["data"]["accessToken"])
    assert payload["kind"] == "admin"
    assert payload["role"] == "moderator"
    assert payload["sub"] == str(admin.id)
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60

    await admin.refresh_from_db()
    assert admin.last_login_at is not None


async def test_inactive_admin_login_is_forbidden_only_with_right_password(client, create_admin):
    admin, password = await create_admin(status="nonaktif")

    wrong = await client.post("/api/v1/admins/login", json={"email": admin.email, "password": "bad"})
    assert wrong.status_code == 401

    right = await client.post("/api/v1/admins/login", json={"email": admin.email, "password": password})
    assert right.status_code == 403
    assert right.json()["error"] == "ACCOUNT_INACTIVE"


async def test_admin_directory_management(client, create_admin, admin_header_factory):
    super_admin, password = await create_admin()
    other, other_password = await create_admin(role="moderator")
    headers = await admin_header_factory(super_admin.email, password)

    list_resp = await client.get("/api/v1/admins", headers=headers, params={"q": other.name})
    assert list_resp.status_code == 200
    items = list_resp.json()["data"]["items"]
    assert [item["id"] for item in items] == [str(other.id)]

    detail = await client.get(f"/api/v1/admins/{other.id}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["data"]["email"] == other.email

    update = await client.patch(
        f"/api/v1/admins/{other.id}",
        headers=headers,
        json={"name": "Renamed", "status": "nonaktif", "password": "Hacked#1"},
    )
    assert update.status_code == 200
    assert update.json()["data"]["name"] == "Renamed"
    assert update.json()["data"]["status"] == "nonaktif"

    # Password in an update body is ignored
    await other.refresh_from_db()
    relogin = await client.post("/api/v1/admins/login", json={"email": other.email, "password": "Hacked#1"})
    assert relogin.status_code == 401

    delete = await client.delete(f"/api/v1/admins/{other.id}", headers=headers)
    assert delete.status_code == 200
    assert await Admin.filter(id=other.id).exists() is False

    missing = await client.get(f"/api/v1/admins/{other.id}", headers=headers)
    assert missing.status_code == 404


async def test_update_email_collision_conflicts(client, create_admin, admin_header_factory):
    super_admin, password = await create_admin()
    other, _ = await create_admin(role="moderator")
    headers = await admin_header_factory(super_admin.email, password)

    resp = await client.put(f"/api/v1/admins/{other.id}", headers=headers, json={"email": super_admin.email})
    assert resp.status_code == 400
    assert resp.json()["error"] == "EMAIL_EXISTS"


async def test_update_unknown_or_malformed_id_is_not_found(client, create_admin, admin_header_factory):
    super_admin, password = await create_admin()
    headers = await admin_header_factory(super_admin.email, password)

    resp = await client.patch("/api/v1/admins/not-a-uuid", headers=headers, json={"name": "x"})
    assert resp.status_code == 404


async def test_cannot_delete_self(client, create_admin, admin_header_factory):
    super_admin, password = await create_admin()
    headers = await admin_header_factory(super_admin.email, password)

    resp = await client.delete(f"/api/v1/admins/{super_admin.id}", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "CANNOT_DELETE_SELF"


async def test_cannot_demote_or_deactivate_self(client, create_admin, admin_header_factory):
    super_admin, password = await create_admin()
    await create_admin()
    headers = await admin_header_factory(super_admin.email, password)

    for body in ({"role": "moderator"}, {"status": "nonaktif"}):
        resp = await client.patch(f"/api/v1/admins/{super_admin.id}", headers=headers, json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "CANNOT_DEMOTE_SELF"

    await super_admin.refresh_from_db()
    assert super_admin.role == "super_admin"
    assert super_admin.status == "aktif"

    # Renaming yourself is still allowed
    rename = await client.patch(f"/api/v1/admins/{super_admin.id}", headers=headers, json={"name": "Still Super"})
    assert rename.status_code == 200
    assert (await client.get("/api/v1/admins", headers=headers)).status_code == 200


async def test_demoting_another_super_admin(client, create_admin, admin_header_factory):
    super_admin, password = await create_admin()
    other, _ = await create_admin()
    headers = await admin_header_factory(super_admin.email, password)

    resp = await client.patch(f"/api/v1/admins/{other.id}", headers=headers, json={"role": "moderator"})
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "moderator"


async def test_last_super_admin_cannot_be_demoted(create_admin):
    only, _ = await create_admin()
    await create_admin(role="moderator")

    for changes in ({"role": "moderator"}, {"status": "nonaktif"}):
        with pytest.raises(ValidationError) as exc:
            await admins_service.update_admin(only.id, changes)
        assert exc.value.code == "LAST_ADMIN_FORBIDDEN"

    await only.refresh_from_db()
    assert only.role == "super_admin"
    assert only.status == "aktif"


async def test_moderator_cannot_update_or_delete(client, create_admin, admin_header_factory):
    target, _ = await create_admin()
    moderator, password = await create_admin(role="moderator")
    headers = await admin_header_factory(moderator.email, password)

    update = await client.patch(f"/api/v1/admins/{target.id}", headers=headers, json={"name": "x"})
    assert update.status_code == 403
    delete = await client.delete(f"/api/v1/admins/{target.id}", headers=headers)
    assert delete.status_code == 403


async def test_user_token_cannot_reach_admin_routes(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    resp = await client.get("/api/v1/admins", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "FORBIDDEN_ADMIN_ONLY"
