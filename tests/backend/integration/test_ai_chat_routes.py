from datetime import timedelta

import pytest

from marketplace.core.timeutil import utc_now
from marketplace.models.ai_chat import AiChatMessage, AiChatSession
from marketplace.services import ai_chat as ai_service


pytestmark = pytest.mark.asyncio


async def test_session_lifecycle(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    start = await client.post("/api/v1/ai-chats", headers=headers, json={"topic": "Oleh-oleh Bali"})
    assert start.status_code == 201
    session_id = start.json()["data"]["id"]

    for role, content in (("user", "Apa oleh-oleh khas Bali?"), ("assistant", "Pie susu dan kopi Kintamani.")):
        resp = await client.post(
            f"/api/v1/ai-chats/{session_id}/messages", headers=headers, json={"role": role, "content": content}
        )
        assert resp.status_code == 201

    detail = await client.get(f"/api/v1/ai-chats/{session_id}", headers=headers)
    assert detail.status_code == 200
    assert [m["role"] for m in detail.json()["data"]["messages"]] == ["user", "assistant"]

    archive = await client.patch(f"/api/v1/ai-chats/{session_id}/archive", headers=headers, json={"archived": True})
    assert archive.json()["data"]["isArchived"] is True

    visible = await client.get("/api/v1/ai-chats", headers=headers)
    assert visible.json()["data"] == []
    everything = await client.get("/api/v1/ai-chats", headers=headers, params={"includeArchived": "true"})
    assert [s["id"] for s in everything.json()["data"]] == [session_id]

    delete = await client.delete(f"/api/v1/ai-chats/{session_id}", headers=headers)
    assert delete.status_code == 200
    gone = await client.get(f"/api/v1/ai-chats/{session_id}", headers=headers)
    assert gone.status_code == 404


async def test_message_validation(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)
    start = await client.post("/api/v1/ai-chats", headers=headers, json={})
    session_id = start.json()["data"]["id"]

    bad_role = await client.post(
        f"/api/v1/ai-chats/{session_id}/messages", headers=headers, json={"role": "system", "content": "x"}
    )
    assert bad_role.status_code == 400

    blank = await client.post(
        f"/api/v1/ai-chats/{session_id}/messages", headers=headers, json={"role": "user", "content": "   "}
    )
    assert blank.status_code == 400


async def test_sessions_are_owner_only(client, create_user, auth_header_factory):
    owner, owner_password = await create_user()
    other, other_password = await create_user()
    owner_headers = await auth_header_factory(owner.email, owner_password)
    other_headers = await auth_header_factory(other.email, other_password)

    start = await client.post("/api/v1/ai-chats", headers=owner_headers, json={"topic": "private"})
    session_id = start.json()["data"]["id"]

    for method, url in (
        ("GET", f"/api/v1/ai-chats/{session_id}"),
        ("DELETE", f"/api/v1/ai-chats/{session_id}"),
    ):
        resp = await client.request(method, url, headers=other_headers)
        assert resp.status_code == 403

    append = await client.post(
        f"/api/v1/ai-chats/{session_id}/messages", headers=other_headers, json={"role": "user", "content": "hi"}
    )
    assert append.status_code == 403


async def test_appending_touches_session(create_user):
    user, _ = await create_user()
    session = await ai_service.start_session(user, topic="Kain tenun")
    stale = utc_now() - timedelta(days=1)
    await AiChatSession.filter(id=session.id).update(updated_at=stale)

    message = await ai_service.append_message(user, session.id, "user", "  Ada songket Palembang?  ")
    assert message.content == "Ada songket Palembang?"

    await session.refresh_from_db()
    assert session.updated_at > stale
    assert await AiChatMessage.filter(session_id=session.id).count() == 1
