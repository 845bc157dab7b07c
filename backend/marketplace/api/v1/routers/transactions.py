# marketplace/api/v1/routers/transactions.py
from fastapi import APIRouter, Depends, Query, status

from marketplace.api.v1.deps import get_current_admin, get_current_principal, get_current_user, pagination
from marketplace.models.admin import Admin
from marketplace.models.user import User
from marketplace.schemas.payment import TransactionIn, TransactionStatusIn
from marketplace.services import transactions as transactions_service

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _page(rows, total: int, offset: int, limit: int) -> dict:
    return {
        "items": [transactions_service.transaction_to_dict(t) for t in rows],
        "total": total,
        "offset": offset,
        "limit": limit,
    }


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_admin)])
async def record_transaction(body: TransactionIn):
    """
    Append a ledger entry (admin only). New entries start as pending.

    Error codes:
        - VALIDATION_ERROR (400): Unknown type, non-positive amount, missing order id
        - USER_NOT_FOUND / PAYMENT_NOT_FOUND (404)
    """
    tx = await transactions_service.record(
        body.user_id, body.order_id, body.type, body.amount,
        payment_id=body.payment_id, description=body.description,
    )
    return {"success": True, "message": "Transaction recorded", "data": transactions_service.transaction_to_dict(tx)}


@router.get("", dependencies=[Depends(get_current_admin)])
async def list_transactions(
    user_id: str | None = Query(default=None, alias="userId"),
    tx_status: str | None = Query(default=None, alias="status"),
    tx_type: str | None = Query(default=None, alias="type"),
    page: tuple[int, int] = Depends(pagination),
):
    """Whole ledger, newest first, filterable by user, status and type (admin only)."""
    offset, limit = page
    rows, total = await transactions_service.list_transactions(
        offset, limit, user_id=user_id, status=tx_status, type=tx_type,
    )
    return {"success": True, "message": "OK", "data": _page(rows, total, offset, limit)}


@router.get("/mine")
async def my_transactions(
    page: tuple[int, int] = Depends(pagination),
    user: User = Depends(get_current_user),
):
    offset, limit = page
    rows, total = await transactions_service.list_transactions(offset, limit, user_id=user.id)
    return {"success": True, "message": "OK", "data": _page(rows, total, offset, limit)}


@router.get("/{transaction_id}")
async def get_transaction(transaction_id: str, principal: Admin | User = Depends(get_current_principal)):
    """
    One ledger entry. Admins see any entry; users only their own.

    Error codes:
        - TRANSACTION_NOT_FOUND (404)
        - TRANSACTION_FORBIDDEN (403)
    """
    if isinstance(principal, Admin):
        tx = await transactions_service.get_transaction(transaction_id)
    else:
        tx = await transactions_service.get_transaction_for_user(principal, transaction_id)
    return {"success": True, "message": "OK", "data": transactions_service.transaction_to_dict(tx)}


@router.patch("/{transaction_id}/status", dependencies=[Depends(get_current_admin)])
async def set_transaction_status(transaction_id: str, body: TransactionStatusIn):
    """
    Settle a pending entry as success or failed (admin only).

    Error codes:
        - INVALID_STATUS_TRANSITION (400): Entry is no longer pending
    """
    tx = await transactions_service.set_status(transaction_id, body.status)
    return {"success": True, "message": "Transaction updated", "data": transactions_service.transaction_to_dict(tx)}
