# marketplace/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: First super admin creation on startup
- db: Database configuration and connection management
- errors: Domain errors rendered into the JSON error envelope
- security: Password hashing and JWT access tokens
- timeutil: UTC datetime helpers
"""
