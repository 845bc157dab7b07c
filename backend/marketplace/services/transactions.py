# marketplace/services/transactions.py
"""
Transaction ledger.

Entries are append-mostly: after creation the only allowed change is one
status transition out of "pending" (to "success" or "failed").
"""
import logging
from decimal import Decimal

from marketplace.core.errors import Forbidden, NotFound, ValidationError, parse_id
from marketplace.core.timeutil import iso, utc_now
from marketplace.models.payment import TRANSACTION_STATUSES, TRANSACTION_TYPES, Payment, Transaction
from marketplace.models.user import User

logger = logging.getLogger("uvicorn.error")

# from-status -> statuses it may move to
ALLOWED_TRANSITIONS = {
    "pending": {"success", "failed"},
    "success": set(),
    "failed": set(),
}


def transaction_to_dict(t: Transaction) -> dict:
    return {
        "id": str(t.id),
        "userId": str(t.user_id),
        "orderId": str(t.order_id),
        "paymentId": str(t.payment_id) if t.payment_id else None,
        "type": t.type,
        "amount": float(t.amount),
        "description": t.description,
        "status": t.status,
        "createdAt": iso(t.created_at),
        "updatedAt": iso(t.updated_at),
    }


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


async def record(user_id, order_id, type: str | None, amount, payment_id=None,
                 description: str | None = None) -> Transaction:
    """
    Append a ledger entry in status "pending".

    Raises:
        ValidationError: missing order id, unknown type, non-positive amount
        NotFound: user or payment does not exist
    """
    if type not in TRANSACTION_TYPES:
        raise ValidationError(f"Invalid transaction type: {type}")
    if amount is None or Decimal(str(amount)) <= 0:
        raise ValidationError("Amount must be greater than zero")
    if not order_id:
        raise ValidationError("Order id is required")
    order_uuid = parse_id(order_id, "Order")

    user_uuid = parse_id(user_id, "User")
    if not await User.filter(id=user_uuid).exists():
        raise NotFound("User not found", code="USER_NOT_FOUND")
    payment_uuid = None
    if payment_id:
        payment_uuid = parse_id(payment_id, "Payment")
        if not await Payment.filter(id=payment_uuid).exists():
            raise NotFound("Payment not found", code="PAYMENT_NOT_FOUND")

    return await Transaction.create(
        user_id=user_uuid,
        order_id=order_uuid,
        payment_id=payment_uuid,
        type=type,
        amount=Decimal(str(amount)),
        description=description,
        status="pending",
    )


async def list_transactions(offset: int, limit: int, user_id=None, status: str | None = None,
                            type: str | None = None) -> tuple[list[Transaction], int]:
    qs = Transaction.all().order_by("-created_at")
    if user_id:
        qs = qs.filter(user_id=parse_id(user_id, "User"))
    if status:
        qs = qs.filter(status=status)
    if type:
        qs = qs.filter(type=type)
    total = await qs.count()
    rows = await qs.offset(offset).limit(limit)
    return rows, total


async def get_transaction(transaction_id) -> Transaction:
    tx = await Transaction.get_or_none(id=parse_id(transaction_id, "Transaction"))
    if not tx:
        raise NotFound("Transaction not found", code="TRANSACTION_NOT_FOUND")
    return tx


async def get_transaction_for_user(user: User, transaction_id) -> Transaction:
    tx = await get_transaction(transaction_id)
    if str(tx.user_id) != str(user.id):
        raise Forbidden("Access denied", code="TRANSACTION_FORBIDDEN")
    return tx


async def set_status(transaction_id, status: str | None) -> Transaction:
    """
    Move a pending transaction to "success" or "failed".

    The update is conditional on the row still being pending, so two
    concurrent settlements cannot both win.

    Raises:
        ValidationError: unknown status or a transition out of a final state
    """
    if status not in TRANSACTION_STATUSES:
        raise ValidationError(f"Invalid status: {status}")
    tx = await get_transaction(transaction_id)
    if not can_transition(tx.status, status):
        raise ValidationError(
            f"Cannot change transaction status from {tx.status} to {status}",
            code="INVALID_STATUS_TRANSITION",
        )
    updated = await Transaction.filter(id=tx.id, status="pending").update(status=status, updated_at=utc_now())
    if not updated:
        raise ValidationError("Transaction was already settled", code="INVALID_STATUS_TRANSITION")
    await tx.refresh_from_db(fields=["status", "updated_at"])
    logger.info("[ledger] transaction id=%s -> %s", tx.id, status)
    return tx
