"""
Credential extraction for the domains API.

The service does not verify tokens itself. The raw Authorization header is
forwarded to the composition API, which decides who the caller is.
"""

import logging

from fastapi import Request

logger = logging.getLogger(__name__)


async def get_auth_credential(request: Request) -> str:
    """
    Return the caller's Authorization header, or an empty string when absent.

    Args:
        request: FastAPI request object

    Returns:
        The raw credential to forward to the composition API
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        logger.debug(f"No Authorization header on {request.method} {request.url.path}")
    return auth_header
