# marketplace/services/chat.py
"""
User-to-user chat threads.

A thread is identified by the unordered pair of its participants. The pair is
stored as ``pair_key`` (sorted ids) under a unique index, so two concurrent
"first messages" between the same users cannot both create a thread: the
loser of the insert race gets IntegrityError, looks the thread up again and
appends to it instead.

Read receipts are flipped with one filtered UPDATE, so concurrent readers
never overwrite each other's flags.
"""
import logging
from collections import Counter

from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q
from tortoise.transactions import in_transaction

from marketplace.core.errors import Forbidden, NotFound, ValidationError, parse_id
from marketplace.core.timeutil import iso
from marketplace.models.chat import ChatMessage, ChatThread, make_pair_key
from marketplace.models.product import Product
from marketplace.models.user import User
from marketplace.services.products import product_summary
from marketplace.services.users import user_summary

logger = logging.getLogger("uvicorn.error")


def message_to_dict(m: ChatMessage, author: User | None = None) -> dict:
    data = {
        "id": m.id,
        "authorId": str(m.author_id),
        "text": m.text,
        "isRead": m.is_read,
        "createdAt": iso(m.created_at),
    }
    if author is not None:
        data["author"] = user_summary(author)
    return data


def thread_to_dict(t: ChatThread, messages: list[ChatMessage] | None = None) -> dict:
    data = {
        "id": str(t.id),
        "senderRootId": str(t.sender_root_id),
        "receiverRootId": str(t.receiver_root_id),
        "productId": str(t.product_id) if t.product_id else None,
        "isArchived": t.is_archived,
        "createdAt": iso(t.created_at),
        "updatedAt": iso(t.updated_at),
    }
    if messages is not None:
        data["messages"] = [message_to_dict(m) for m in messages]
    return data


async def _append(thread: ChatThread, sender: User, text: str) -> ChatMessage:
    # Message insert and inbox bump must land together
    async with in_transaction() as conn:
        message = await ChatMessage.create(thread_id=thread.id, author_id=sender.id, text=text, using_db=conn)
        await thread.save(update_fields=["updated_at"], using_db=conn)
    return message


async def send_message(sender: User, receiver_id, text: str | None,
                       product_id=None) -> tuple[ChatThread, ChatMessage, bool]:
    """
    Send a message from ``sender`` to ``receiver_id``.

    Appends to the pair's existing thread, or creates it (with the optional
    product context) when this is the pair's first message.

    Returns:
        (thread, message, created) where created tells whether the thread is new

    Raises:
        ValidationError: receiver or text missing, or sending to yourself
        NotFound: receiver (or product context) does not exist
    """
    text = (text or "").strip()
    if not receiver_id or not text:
        raise ValidationError("Receiver id and message text are required")
    receiver_uuid = parse_id(receiver_id, "Receiver")
    if receiver_uuid == sender.id:
        raise ValidationError("Cannot send a message to yourself")
    if not await User.filter(id=receiver_uuid).exists():
        raise NotFound("Receiver not found", code="USER_NOT_FOUND")

    pair_key = make_pair_key(sender.id, receiver_uuid)
    thread = await ChatThread.get_or_none(pair_key=pair_key)
    if thread:
        message = await _append(thread, sender, text)
        return thread, message, False

    product_uuid = None
    if product_id:
        product_uuid = parse_id(product_id, "Product")
        if not await Product.filter(id=product_uuid).exists():
            raise NotFound("Product not found", code="PRODUCT_NOT_FOUND")

    try:
        async with in_transaction() as conn:
            thread = await ChatThread.create(
                sender_root_id=sender.id,
                receiver_root_id=receiver_uuid,
                pair_key=pair_key,
                product_id=product_uuid,
                using_db=conn,
            )
            message = await ChatMessage.create(thread_id=thread.id, author_id=sender.id, text=text, using_db=conn)
    except IntegrityError:
        # Another request created the pair's thread first; retry the lookup once
        thread = await ChatThread.get_or_none(pair_key=pair_key)
        if thread is None:
            raise
        message = await _append(thread, sender, text)
        return thread, message, False

    logger.info("[chat] new thread id=%s between %s and %s", thread.id, sender.id, receiver_uuid)
    return thread, message, True


async def list_conversations(actor: User) -> list[dict]:
    """
    Inbox of ``actor``: every thread they take part in, most recently active first,
    with participant/product summaries, the last message and the unread count.
    """
    threads = await ChatThread.filter(
        Q(sender_root_id=actor.id) | Q(receiver_root_id=actor.id)
    ).order_by("-updated_at").prefetch_related("sender_root", "receiver_root", "product")
    if not threads:
        return []

    unread_thread_ids = await ChatMessage.filter(
        thread_id__in=[t.id for t in threads], is_read=False,
    ).exclude(author_id=actor.id).values_list("thread_id", flat=True)
    unread = Counter(str(tid) for tid in unread_thread_ids)

    items = []
    for t in threads:
        last = await ChatMessage.filter(thread_id=t.id).order_by("-created_at", "-id").first()
        item = thread_to_dict(t)
        item.update({
            "senderRoot": user_summary(t.sender_root),
            "receiverRoot": user_summary(t.receiver_root),
            "product": product_summary(t.product),
            "lastMessage": message_to_dict(last) if last else None,
            "unreadCount": unread.get(str(t.id), 0),
        })
        items.append(item)
    return items


async def get_thread_for(actor: User, thread_id) -> ChatThread:
    """
    Resolve a thread the actor takes part in.

    Raises:
        NotFound: unknown or malformed thread id
        Forbidden: actor is not one of the two participants
    """
    thread = await ChatThread.get_or_none(id=parse_id(thread_id, "Conversation"))
    if not thread:
        raise NotFound("Conversation not found", code="THREAD_NOT_FOUND")
    if not thread.has_participant(actor.id):
        raise Forbidden("Access denied", code="THREAD_FORBIDDEN")
    return thread


async def thread_messages(thread: ChatThread) -> list[ChatMessage]:
    return await ChatMessage.filter(thread_id=thread.id).order_by("created_at", "id")


async def get_thread_messages(actor: User, thread_id) -> list[dict]:
    thread = await get_thread_for(actor, thread_id)
    messages = await ChatMessage.filter(thread_id=thread.id).order_by("created_at", "id").prefetch_related("author")
    return [message_to_dict(m, author=m.author) for m in messages]


async def mark_read(actor: User, thread_id) -> int:
    """
    Mark every message in the thread that ``actor`` did not write as read.

    Returns:
        Number of messages flipped; 0 when nothing was unread.
    """
    thread = await get_thread_for(actor, thread_id)
    return await ChatMessage.filter(
        thread_id=thread.id, is_read=False,
    ).exclude(author_id=actor.id).update(is_read=True)


async def set_archived(actor: User, thread_id, archived: bool) -> ChatThread:
    thread = await get_thread_for(actor, thread_id)
    # Only the flag; archiving must not reorder the inbox
    await ChatThread.filter(id=thread.id).update(is_archived=archived)
    thread.is_archived = archived
    return thread
