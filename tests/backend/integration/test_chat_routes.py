import asyncio

import pytest

from marketplace.models.chat import ChatMessage, ChatThread
from marketplace.services import chat as chat_service


pytestmark = pytest.mark.asyncio


async def _headers_for(create_user, auth_header_factory):
    user, password = await create_user()
    return user, await auth_header_factory(user.email, password)


async def test_first_message_creates_thread_then_appends(client, create_user, auth_header_factory):
    alice, alice_headers = await _headers_for(create_user, auth_header_factory)
    bob, bob_headers = await _headers_for(create_user, auth_header_factory)

    first = await client.post(
        "/api/v1/chats", headers=alice_headers, json={"receiverId": str(bob.id), "text": "Halo, masih ada?"}
    )
    assert first.status_code == 201
    first_data = first.json()["data"]
    assert first_data["created"] is True
    thread_id = first_data["thread"]["id"]
    assert first_data["thread"]["senderRootId"] == str(alice.id)
    assert first_data["thread"]["receiverRootId"] == str(bob.id)

    reply = await client.post(
        "/api/v1/chats", headers=bob_headers, json={"receiverId": str(alice.id), "text": "Masih, kak"}
    )
    assert reply.status_code == 200
    assert reply.json()["data"]["created"] is False
    assert reply.json()["data"]["thread"]["id"] == thread_id
    assert [m["text"] for m in first_data["thread"]["messages"]] == ["Halo, masih ada?"]
    assert [m["text"] for m in reply.json()["data"]["thread"]["messages"]] == ["Halo, masih ada?", "Masih, kak"]

    assert await ChatThread.all().count() == 1
    messages = await client.get(f"/api/v1/chats/{thread_id}", headers=alice_headers)
    assert messages.status_code == 200
    data = messages.json()["data"]
    assert [m["text"] for m in data] == ["Halo, masih ada?", "Masih, kak"]
    assert data[0]["author"]["id"] == str(alice.id)
    assert all(m["isRead"] is False for m in data)


async def test_send_validation(client, create_user, auth_header_factory):
    alice, alice_headers = await _headers_for(create_user, auth_header_factory)

    blank = await client.post("/api/v1/chats", headers=alice_headers, json={"receiverId": str(alice.id), "text": "  "})
    assert blank.status_code == 400

    to_self = await client.post("/api/v1/chats", headers=alice_headers, json={"receiverId": str(alice.id), "text": "hi"})
    assert to_self.status_code == 400

    nobody = await client.post(
        "/api/v1/chats",
        headers=alice_headers,
        json={"receiverId": "00000000-0000-0000-0000-000000000000", "text": "hi"},
    )
    assert nobody.status_code == 404


async def test_product_context_is_kept(client, create_user, auth_header_factory, create_admin, admin_header_factory):
    admin, admin_password = await create_admin()
    admin_headers = await admin_header_factory(admin.email, admin_password)
    product = await client.post("/api/v1/products", headers=admin_headers, json={"name": "Songket", "price": 500000})
    product_id = product.json()["data"]["id"]

    buyer, buyer_headers = await _headers_for(create_user, auth_header_factory)
    seller, _ = await _headers_for(create_user, auth_header_factory)

    resp = await client.post(
        "/api/v1/chats",
        headers=buyer_headers,
        json={"receiverId": str(seller.id), "text": "Ready?", "productId": product_id},
    )
    assert resp.json()["data"]["thread"]["productId"] == product_id

    inbox = await client.get("/api/v1/chats", headers=buyer_headers)
    item = inbox.json()["data"][0]
    assert item["product"]["name"] == "Songket"
    assert item["receiverRoot"]["id"] == str(seller.id)
    assert item["lastMessage"]["text"] == "Ready?"


async def test_non_participant_is_forbidden(client, create_user, auth_header_factory):
    alice, alice_headers = await _headers_for(create_user, auth_header_factory)
    bob, _ = await _headers_for(create_user, auth_header_factory)
    _, eve_headers = await _headers_for(create_user, auth_header_factory)

    sent = await client.post("/api/v1/chats", headers=alice_headers, json={"receiverId": str(bob.id), "text": "psst"})
    thread_id = sent.json()["data"]["thread"]["id"]

    resp = await client.get(f"/api/v1/chats/{thread_id}", headers=eve_headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "THREAD_FORBIDDEN"

    read = await client.patch(f"/api/v1/chats/{thread_id}/read", headers=eve_headers)
    assert read.status_code == 403

    missing = await client.get("/api/v1/chats/not-a-thread", headers=eve_headers)
    assert missing.status_code == 404


async def test_mark_read_flips_only_the_other_sides_messages(client, create_user, auth_header_factory):
    alice, alice_headers = await _headers_for(create_user, auth_header_factory)
    bob, bob_headers = await _headers_for(create_user, auth_header_factory)

    for text in ("satu", "dua"):
        resp = await client.post("/api/v1/chats", headers=alice_headers, json={"receiverId": str(bob.id), "text": text})
    thread_id = resp.json()["data"]["thread"]["id"]
    await client.post("/api/v1/chats", headers=bob_headers, json={"receiverId": str(alice.id), "text": "tiga"})

    inbox = await client.get("/api/v1/chats", headers=bob_headers)
    assert inbox.json()["data"][0]["unreadCount"] == 2

    first = await client.patch(f"/api/v1/chats/{thread_id}/read", headers=bob_headers)
    assert first.status_code == 200
    assert first.json()["data"]["updated"] == 2

    again = await client.patch(f"/api/v1/chats/{thread_id}/read", headers=bob_headers)
    assert again.json()["data"]["updated"] == 0

    alice_msgs = await ChatMessage.filter(thread_id=thread_id, author_id=alice.id)
    bob_msgs = await ChatMessage.filter(thread_id=thread_id, author_id=bob.id)
    assert all(m.is_read for m in alice_msgs)
    assert not any(m.is_read for m in bob_msgs)


async def test_inbox_orders_by_latest_activity(client, create_user, auth_header_factory):
    alice, alice_headers = await _headers_for(create_user, auth_header_factory)
    bob, _ = await _headers_for(create_user, auth_header_factory)
    carol, _ = await _headers_for(create_user, auth_header_factory)

    await client.post("/api/v1/chats", headers=alice_headers, json={"receiverId": str(bob.id), "text": "to bob"})
    await asyncio.sleep(0.01)
    await client.post("/api/v1/chats", headers=alice_headers, json={"receiverId": str(carol.id), "text": "to carol"})
    await asyncio.sleep(0.01)
    await client.post("/api/v1/chats", headers=alice_headers, json={"receiverId": str(bob.id), "text": "bob again"})

    inbox = await client.get("/api/v1/chats", headers=alice_headers)
    last_texts = [item["lastMessage"]["text"] for item in inbox.json()["data"]]
    assert last_texts == ["bob again", "to carol"]


async def test_archive_thread(client, create_user, auth_header_factory):
    alice, alice_headers = await _headers_for(create_user, auth_header_factory)
    bob, _ = await _headers_for(create_user, auth_header_factory)
    sent = await client.post("/api/v1/chats", headers=alice_headers, json={"receiverId": str(bob.id), "text": "x"})
    thread_id = sent.json()["data"]["thread"]["id"]

    resp = await client.patch(f"/api/v1/chats/{thread_id}/archive", headers=alice_headers, json={"archived": True})
    assert resp.status_code == 200
    assert resp.json()["data"]["isArchived"] is True


async def test_concurrent_first_messages_share_one_thread(client, create_user):
    alice, _ = await create_user()
    bob, _ = await create_user()

    results = await asyncio.gather(
        chat_service.send_message(alice, bob.id, "hi bob"),
        chat_service.send_message(bob, alice.id, "hi alice"),
    )

    thread_ids = {thread.id for thread, _, _ in results}
    assert len(thread_ids) == 1
    assert sum(1 for _, _, created in results if created) == 1
    assert await ChatThread.all().count() == 1
    assert await ChatMessage.filter(thread_id=thread_ids.pop()).count() == 2
