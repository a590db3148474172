"""
Helpers shared by the custom domain endpoints.
"""
import logging
from typing import Optional

from fastapi import HTTPException

from app.core.errors import MissingParameterError, ProvisioningError

logger = logging.getLogger(__name__)


def require_params(**params: Optional[str]) -> None:
    """
    Check that every named parameter has a value.

    Raises:
        HTTPException: 400 naming every required parameter if any is missing
    """
    if any(not value for value in params.values()):
        raise to_http_exception(MissingParameterError(*sorted(params)))


def to_http_exception(error: ProvisioningError) -> HTTPException:
    """Translate a provisioning error into the HTTP error returned to the caller."""
    logger.info(f"Domain operation rejected with {error.status_code}: {error}")
    return HTTPException(status_code=error.status_code, detail=error.detail)
