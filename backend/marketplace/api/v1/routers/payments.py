# marketplace/api/v1/routers/payments.py
from fastapi import APIRouter, Depends, status

from marketplace.api.v1.deps import get_current_admin, get_current_principal, get_current_user
from marketplace.schemas.payment import ChangeMethodIn, PaymentIn, PaymentStatusIn
from marketplace.services import payments as payments_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_admin)])
async def create_payment(body: PaymentIn):
    """
    Open a payment for an order (admin only).

    A cash payment is recorded as already paid; every other method starts
    pending until the gateway reports an outcome.
    """
    payment = await payments_service.create_payment(
        body.order_id, body.amount, method=body.method, expires_at=body.expires_at,
    )
    return {"success": True, "message": "Payment created", "data": payments_service.payment_to_dict(payment)}


@router.get("/order/{order_id}", dependencies=[Depends(get_current_principal)])
async def payment_for_order(order_id: str):
    """Most recent payment of an order."""
    payment = await payments_service.latest_for_order(order_id)
    return {"success": True, "message": "OK", "data": payments_service.payment_to_dict(payment)}


@router.get("/{payment_id}", dependencies=[Depends(get_current_principal)])
async def get_payment(payment_id: str):
    payment = await payments_service.get_payment(payment_id)
    return {"success": True, "message": "OK", "data": payments_service.payment_to_dict(payment)}


@router.post("/{payment_id}/change-method", dependencies=[Depends(get_current_user)])
async def change_method(payment_id: str, body: ChangeMethodIn):
    """
    Switch a pending payment to another method.

    Args:
        body: {"newPaymentMethod": "card" | "qris" | "transfer" | "ewallet"}

    Error codes:
        - INVALID_PAYMENT_METHOD (400)
        - PAYMENT_NOT_PENDING (400): Payment already settled
        - PAYMENT_NOT_FOUND (404)
    """
    payment = await payments_service.change_method(payment_id, body.new_payment_method)
    return {"success": True, "message": "Payment method changed", "data": payments_service.payment_to_dict(payment)}


@router.post("/{payment_id}/status", dependencies=[Depends(get_current_admin)])
async def payment_status(payment_id: str, body: PaymentStatusIn):
    """
    Record the status reported by the payment gateway (admin only).

    A final status settles every pending ledger transaction of the payment
    in the same database transaction.

    Returns:
        dict: data = {"payment": {...}, "settledTransactions": int}
    """
    payment, settled = await payments_service.apply_status(payment_id, body.status, channel=body.channel)
    return {
        "success": True,
        "message": "Payment status updated",
        "data": {"payment": payments_service.payment_to_dict(payment), "settledTransactions": settled},
    }
