# marketplace/models/payment.py
"""
Database models for payments and the transaction ledger.
"""
import uuid
from tortoise import fields, models

PAYMENT_METHODS = ("cash", "card", "qris", "transfer", "ewallet")
PAYMENT_STATUSES = ("pending", "success", "failed", "expired")

TRANSACTION_TYPES = ("pemasukan", "pengeluaran")  # income, expense
TRANSACTION_STATUSES = ("pending", "success", "failed")

class Payment(models.Model):
    """
    Payment for an order.

    The gateway_* columns hold whatever the payment gateway handed back for the
    current method; they are cleared when the method changes.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    order_id = fields.UUIDField(index=True)  # opaque order reference
    method = fields.CharField(max_length=16, null=True)
    channel = fields.CharField(max_length=64, null=True)
    gateway_order_id = fields.CharField(max_length=128, null=True)
    gateway_token = fields.CharField(max_length=255, null=True)
    gateway_url = fields.CharField(max_length=1024, null=True)
    amount = fields.DecimalField(max_digits=14, decimal_places=2)
    status = fields.CharField(max_length=16, default="pending")
    expires_at = fields.DatetimeField(null=True)
    paid_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "payments"


class Transaction(models.Model):
    """
    Ledger entry. Append-mostly: the only mutation is a single status
    transition out of "pending".
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="transactions", on_delete=fields.CASCADE)
    order_id = fields.UUIDField(index=True)
    payment = fields.ForeignKeyField("models.Payment", related_name="transactions", null=True, on_delete=fields.SET_NULL)
    type = fields.CharField(max_length=16)  # "pemasukan" | "pengeluaran"
    amount = fields.DecimalField(max_digits=14, decimal_places=2)
    description = fields.TextField(null=True)
    status = fields.CharField(max_length=16, default="pending")
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "transactions"
