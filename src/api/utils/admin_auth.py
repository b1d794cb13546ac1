"""
Admin API Key Authentication

Validates admin API keys for issuer-side endpoints.
"""

import secrets

from fastapi import Header, status
from libs.result import Error
from src.api.error import ClientError
from config import ApplicationConfig


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Used by the CRM backend to read audit trails and signed documents.
    Different from the signer's token - this is service-to-service auth.

    Raises:
        ClientError: 401 if key is missing or invalid

    Returns:
        True if valid
    """
    if not x_admin_api_key:
        raise ClientError(
            Error("UNAUTHORIZED", "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if not secrets.compare_digest(
        x_admin_api_key.encode("utf-8"), str(ApplicationConfig.ADMIN_API_KEY).encode("utf-8")
    ):
        raise ClientError(
            Error("INVALID_API_KEY", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
