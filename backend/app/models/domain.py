import re
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.core.errors import InvalidDomainError

# Fields of a domain record in the key-value store
SITE_ID_FIELD = "siteId"
LANDING_PAGE_ID_FIELD = "landingPageId"

WWW_PREFIX = "www."

MAX_DOMAIN_NAME_LENGTH = 253
_LABEL = re.compile(r"(?!-)[a-z0-9-]{1,63}(?<!-)")


def normalize_domain_name(domain_name: str) -> str:
    """Strip surrounding whitespace, lowercase and drop the root dot."""
    name = domain_name.strip().lower()
    return name[:-1] if name.endswith(".") else name


def canonical_domain_name(domain_name: str) -> str:
    """
    Return the canonical form of a domain name.

    Internationalized names are converted to their ASCII (punycode) form, so
    the zone, the store keys and the proxy's Host lookups agree.

    Raises:
        InvalidDomainError: If the name is not a host name with at least two labels
    """
    name = normalize_domain_name(domain_name)
    if not name.isascii():
        try:
            name = name.encode("idna").decode("ascii")
        except UnicodeError as e:
            raise InvalidDomainError(domain_name) from e

    labels = name.split(".")
    if (
        len(name) > MAX_DOMAIN_NAME_LENGTH
        or len(labels) < 2
        or not all(_LABEL.fullmatch(label) for label in labels)
        or labels[-1].isdigit()
    ):
        raise InvalidDomainError(domain_name)
    return name


def www_alias(domain_name: str) -> str:
    """Return the www alias of a domain name"""
    return f"{WWW_PREFIX}{domain_name}"


class DomainRequest(BaseModel):
    """
    Body of a request that targets a domain of a site.
    Fields are optional so missing ones can be reported with the fixed message.
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    site_id: Optional[str] = Field(default=None, alias="siteId")
    domain_name: Optional[str] = Field(default=None, alias="domainName")


class CreateFullZoneResult(BaseModel):
    """Aggregate result of a full zone provisioning"""
    model_config = ConfigDict(populate_by_name=True)

    create_zone_result: Dict[str, Any] = Field(..., alias="createZoneResult")
    add_root_dns_result: Dict[str, Any] = Field(..., alias="addRootDnsResult")
    enable_always_use_https_result: Dict[str, Any] = Field(..., alias="enableAlwaysUseHttpsResult")
    insert_key_pair_result: bool = Field(..., alias="insertKeyPairResult")
    # Only present when the optional www record was created
    add_www_dns_result: Optional[Dict[str, Any]] = Field(default=None, alias="addWwwDnsResult")

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DeleteFullZoneResult(BaseModel):
    message: str = "Domain deleted successfully"


class KeyPairResult(BaseModel):
    success: bool = True
    message: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
