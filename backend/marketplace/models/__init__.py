# marketplace/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports throughout the application.

Models exported:
- Admin: Back-office administrator account
- User: Marketplace user (buyer/seller)
- Province: Province directory entry
- Product: Catalog product
- Promotion, PromotionProduct: Promotions and their product links
- ChatThread, ChatMessage: User-to-user chat
- Payment, Transaction: Payments and the transaction ledger
- AiChatSession, AiChatMessage: AI assistant chat log
"""
from .admin import Admin
from .user import User
from .province import Province
from .product import Product
from .promotion import Promotion, PromotionProduct
from .chat import ChatThread, ChatMessage
from .payment import Payment, Transaction
from .ai_chat import AiChatSession, AiChatMessage
