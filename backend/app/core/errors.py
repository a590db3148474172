"""
Error types for domain provisioning.

Every collaborator failure is normalized into one of these exceptions so the
API layer can map it to a status code and a JSON detail.
"""
from typing import Any, Iterable


def params_missing_message(params: Iterable[str]) -> str:
    """Build the fixed-format message for missing request parameters."""
    return f"One or more required parameters missing: {{{', '.join(params)}}}"


def error_detail(error: Exception) -> Any:
    """Return the response detail for any exception."""
    if isinstance(error, ProvisioningError):
        return error.detail
    return str(error)


class ProvisioningError(Exception):
    """Base exception for domain provisioning errors."""
    status_code = 400

    @property
    def detail(self) -> Any:
        """JSON-serializable detail for the response body."""
        return str(self)


class MissingParameterError(ProvisioningError):
    """Exception raised when a caller omits a required parameter."""

    def __init__(self, *params: str):
        self.params = list(params)
        super().__init__(params_missing_message(self.params))


class AuthorizationError(ProvisioningError):
    """Exception raised when the caller may not act on a site."""
    status_code = 401


class TransportError(ProvisioningError):
    """Exception raised for network failures talking to an external system."""
    pass


class ProviderError(ProvisioningError):
    """Exception raised when the zone provider returns a failure envelope."""

    def __init__(self, body: str):
        self.body = body
        super().__init__(body)


class DataError(ProvisioningError):
    """Exception raised when a trusted external system returns an unparseable response."""
    pass


class StoreError(ProvisioningError):
    """Exception raised when a key-value store operation fails."""
    pass


class RollbackError(ProvisioningError):
    """
    Exception raised when a workflow failed and its compensating zone delete
    failed as well. Both errors are reported.
    """

    def __init__(self, error: Exception, delete_zone_error: Exception):
        self.error = error
        self.delete_zone_error = delete_zone_error
        super().__init__(f"{error} (zone rollback failed: {delete_zone_error})")

    @property
    def detail(self) -> Any:
        return {
            "error": error_detail(self.error),
            "deleteZoneError": error_detail(self.delete_zone_error),
        }


class InvalidDomainError(ProvisioningError):
    """Exception raised when a domain name is not a valid host name."""

    def __init__(self, domain_name: str):
        self.domain_name = domain_name
        super().__init__(f"Invalid domain name: {domain_name}")
