from __future__ import annotations

import hashlib
import secrets

import bcrypt

# bcrypt only reads the first 72 bytes of a secret.
_BCRYPT_MAX_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int) -> str:
    return bcrypt.hashpw(_secret(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, encoded: str) -> bool:
    try:
        return bcrypt.checkpw(_secret(password), encoded.encode("ascii"))
    except ValueError:
        return False


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_token() -> tuple[str, str]:
    """Return a raw token for the recipient and its hash for storage."""
    token = secrets.token_hex(20)
    return token, hash_token(token)
