# marketplace/core/security.py
"""
Security module for authentication and authorization.
Handles password hashing, JWT token creation/validation, and cryptographic operations.
"""
import os
import datetime as dt
import jwt  # PyJWT
from passlib.context import CryptContext
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables from project root
ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

# Password hashing context
# Argon2 salts every hash, so the same password never hashes the same way twice
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# JWT configuration
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")  # Secret key for JWT signing (use strong secret in production)
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "4320"))  # User tokens (3 days)
ADMIN_TOKEN_EXPIRE_MINUTES = 24 * 60  # Admin tokens are valid for exactly one day
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

# Token "kind" claim: tells admin credentials apart from marketplace user credentials
KIND_ADMIN = "admin"
KIND_USER = "user"

def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Args:
        plain: Plain text password to verify
        hashed: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)

def create_access_token(subject_id: str, role: str, kind: str = KIND_USER) -> str:
    """
    Create a JWT access token.

    The token carries the actor id, its role and its kind ("admin" or "user")
    so route dependencies can gate access without an extra lookup.

    Args:
        subject_id: Actor identifier (UUID string)
        role: Actor role (e.g. "super_admin", "moderator", "pembeli")
        kind: KIND_ADMIN or KIND_USER

    Returns:
        Encoded JWT token string

    Token payload includes:
        - sub: Subject (actor ID)
        - role: Actor role
        - kind: Credential kind
        - iat / exp: Issue and expiry timestamps
    """
    minutes = ADMIN_TOKEN_EXPIRE_MINUTES if kind == KIND_ADMIN else ACCESS_TOKEN_EXPIRE_MINUTES
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": subject_id,
        "role": role,
        "kind": kind,
        "iat": now,
        "exp": now + dt.timedelta(minutes=minutes),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)

def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or malformed
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
