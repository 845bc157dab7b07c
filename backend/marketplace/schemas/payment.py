# marketplace/schemas/payment.py
"""
Pydantic schemas for payments and ledger transactions.
"""
import datetime as dt
from typing import Optional

from .base import CamelModel

__all__ = ["PaymentIn", "ChangeMethodIn", "PaymentStatusIn", "TransactionIn", "TransactionStatusIn"]


class PaymentIn(CamelModel):
    order_id: Optional[str] = None
    amount: Optional[float] = None
    method: Optional[str] = None
    expires_at: Optional[dt.datetime] = None


class ChangeMethodIn(CamelModel):
    new_payment_method: Optional[str] = None  # "card" | "qris" | "transfer" | "ewallet"


class PaymentStatusIn(CamelModel):
    """The "payment changed" notification relayed from the gateway."""
    status: Optional[str] = None
    channel: Optional[str] = None


class TransactionIn(CamelModel):
    user_id: Optional[str] = None
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    type: Optional[str] = None  # "pemasukan" | "pengeluaran"
    amount: Optional[float] = None
    description: Optional[str] = None


class TransactionStatusIn(CamelModel):
    status: Optional[str] = None  # "success" | "failed"
