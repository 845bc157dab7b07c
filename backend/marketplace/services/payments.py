# marketplace/services/payments.py
"""
Payments for orders.

Gateway integration is not part of this service: a payment only records
what the gateway reported. ``apply_status`` is the entry point for a
"payment changed" notification and settles the linked ledger entries in the
same database transaction.
"""
import logging
from decimal import Decimal

from tortoise.transactions import in_transaction

from marketplace.core.errors import NotFound, ValidationError, parse_id
from marketplace.core.timeutil import as_utc, iso, utc_now
from marketplace.models.payment import PAYMENT_METHODS, PAYMENT_STATUSES, Payment, Transaction

logger = logging.getLogger("uvicorn.error")

# Methods a shopper may switch to while a payment is pending (cash is settled at the counter)
SWITCHABLE_METHODS = ("card", "qris", "transfer", "ewallet")

# Payment outcome -> ledger outcome for pending transactions
LEDGER_OUTCOME = {"success": "success", "failed": "failed", "expired": "failed"}


def payment_to_dict(p: Payment) -> dict:
    return {
        "id": str(p.id),
        "orderId": str(p.order_id),
        "method": p.method,
        "channel": p.channel,
        "gatewayOrderId": p.gateway_order_id,
        "gatewayUrl": p.gateway_url,
        "amount": float(p.amount),
        "status": p.status,
        "expiresAt": iso(p.expires_at),
        "paidAt": iso(p.paid_at),
        "createdAt": iso(p.created_at),
        "updatedAt": iso(p.updated_at),
    }


async def create_payment(order_id, amount, method: str | None = None, expires_at=None) -> Payment:
    if not order_id:
        raise ValidationError("Order id is required")
    if amount is None or Decimal(str(amount)) <= 0:
        raise ValidationError("Amount must be greater than zero")
    if method is not None and method not in PAYMENT_METHODS:
        raise ValidationError(f"Invalid payment method: {method}")
    return await Payment.create(
        order_id=parse_id(order_id, "Order"),
        amount=Decimal(str(amount)),
        method=method,
        expires_at=as_utc(expires_at),
        status="success" if method == "cash" else "pending",
        paid_at=utc_now() if method == "cash" else None,
    )


async def get_payment(payment_id) -> Payment:
    payment = await Payment.get_or_none(id=parse_id(payment_id, "Payment"))
    if not payment:
        raise NotFound("Payment not found", code="PAYMENT_NOT_FOUND")
    return payment


async def latest_for_order(order_id) -> Payment:
    payment = await Payment.filter(order_id=parse_id(order_id, "Order")).order_by("-created_at").first()
    if not payment:
        raise NotFound("Payment not found", code="PAYMENT_NOT_FOUND")
    return payment


async def change_method(payment_id, new_method: str | None) -> Payment:
    """
    Switch a pending payment to another method.

    Gateway fields are cleared; a new gateway session for the method is
    created by the caller.

    Raises:
        ValidationError: method not switchable, or payment no longer pending
        NotFound: payment does not exist
    """
    if new_method not in SWITCHABLE_METHODS:
        raise ValidationError("Invalid payment method", code="INVALID_PAYMENT_METHOD")
    payment = await get_payment(payment_id)
    if payment.status != "pending":
        raise ValidationError(
            f"Cannot change the payment method of a {payment.status} payment",
            code="PAYMENT_NOT_PENDING",
        )
    payment.method = new_method
    payment.channel = None
    payment.gateway_order_id = None
    payment.gateway_token = None
    payment.gateway_url = None
    await payment.save()
    return payment


async def apply_status(payment_id, status: str | None, channel: str | None = None) -> tuple[Payment, int]:
    """
    Record a payment status reported by the gateway.

    A final status (success, failed, expired) also settles every pending
    ledger transaction tied to this payment. The payment row is only moved
    while it is still pending, so of two concurrent notifications exactly one
    wins and the ledger always follows the winner.

    Returns:
        (payment, number of ledger transactions settled)

    Raises:
        ValidationError: unknown status, or payment already final
    """
    if status not in PAYMENT_STATUSES:
        raise ValidationError(f"Invalid payment status: {status}")
    payment = await get_payment(payment_id)
    if status == "pending" and payment.status == "pending":
        return payment, 0
    if payment.status != "pending":
        if payment.status == status:
            return payment, 0
        raise ValidationError(f"Payment is already {payment.status}", code="PAYMENT_NOT_PENDING")

    changes = {"status": status, "updated_at": utc_now()}
    if status == "success":
        changes["paid_at"] = utc_now()
    if channel:
        changes["channel"] = channel

    settled = 0
    async with in_transaction() as conn:
        moved = await Payment.filter(id=payment.id, status="pending").using_db(conn).update(**changes)
        if moved:
            settled = await Transaction.filter(payment_id=payment.id, status="pending").using_db(conn).update(
                status=LEDGER_OUTCOME[status], updated_at=utc_now(),
            )
    await payment.refresh_from_db()
    if not moved:
        # Another notification settled the payment first
        if payment.status == status:
            return payment, 0
        raise ValidationError(f"Payment is already {payment.status}", code="PAYMENT_NOT_PENDING")

    logger.info("[payments] payment id=%s -> %s, settled %d ledger entries", payment.id, status, settled)
    return payment, settled
