"""Password hashing helpers (bcrypt)."""

import asyncio
import os

import bcrypt

# bcrypt only looks at the first 72 bytes of the secret
_BCRYPT_MAX_BYTES = 72


def _rounds() -> int:
    return int(os.getenv("BCRYPT_ROUNDS", "10"))


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password_sync(password: str) -> str:
    """Hash a password with a fresh salt."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=_rounds())).decode("utf-8")


def verify_password_sync(password: str, hashed: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


async def hash_password(password: str) -> str:
    """Hash a password off the event loop."""
    return await asyncio.to_thread(hash_password_sync, password)


async def verify_password(password: str, hashed: str) -> bool:
    """Verify a password off the event loop."""
    return await asyncio.to_thread(verify_password_sync, password, hashed)
