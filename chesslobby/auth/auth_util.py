"""
This module provides utilities for authentication.
"""
import secrets

from passlib.context import CryptContext

TOKEN_BYTES = 32


def build_crypt_context(scheme: str = "plaintext") -> CryptContext:
    """
    Stored credentials go through this context. "plaintext" keeps the stored value equal
    to what the user typed; "bcrypt" stores salted one-way hashes.
    """
    if scheme == "bcrypt":
        return CryptContext(schemes=["bcrypt"], deprecated="auto")
    if scheme == "plaintext":
        return CryptContext(schemes=["plaintext"])
    raise ValueError(f"Unknown password scheme: {scheme}")


def hash_password(context: CryptContext, password: str) -> str:
    return context.hash(password)


def verify_password(context: CryptContext, cleartext_password: str, stored: str) -> bool:
    try:
        return context.verify(cleartext_password, stored)
    except ValueError:
        # stored value was produced by a different scheme
        return False


def new_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)
