import secrets
from datetime import UTC, datetime


def generate_token() -> str:
    """64 lowercase hex chars (32 random bytes)"""
    return secrets.token_hex(32)


def generate_request_id() -> str:
    """32 lowercase hex chars (16 random bytes)"""
    return secrets.token_hex(16)


def utcnow() -> datetime:
    # Naive UTC, matching how DateTime columns round-trip through SQLite
    return datetime.now(UTC).replace(tzinfo=None)
