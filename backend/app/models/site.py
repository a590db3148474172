"""
Site and user records returned by the composition API.
"""

import math
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

# The composition API is not consistent about string vs numeric ids
RecordId = Union[int, str]


class SiteOwner(BaseModel):
    """Owner reference embedded in a site"""
    id: RecordId


class CustomDomain(BaseModel):
    """A previously provisioned custom domain"""
    model_config = ConfigDict(populate_by_name=True)

    zone_id: Optional[str] = Field(default=None, alias="zoneId")
    domain_name: Optional[str] = Field(default=None, alias="domainName")


class SiteMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    custom_domain: Optional[CustomDomain] = Field(default=None, alias="customDomain")


class PageMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    navigation_item: bool = Field(default=False, alias="navigationItem")
    index: Optional[float] = None

    @field_validator("navigation_item", mode="before")
    @classmethod
    def null_is_not_navigation(cls, v):
        return False if v is None else v

    @field_validator("index", mode="before")
    @classmethod
    def unusable_index_is_missing(cls, v):
        # Pages are only ordered by a finite number; anything else is unindexed
        if v is None or isinstance(v, bool):
            return None
        try:
            index = float(v)
        except (TypeError, ValueError):
            return None
        return index if math.isfinite(index) else None


class Page(BaseModel):
    """A page of a site"""
    id: RecordId
    metadata: PageMetadata = Field(default_factory=PageMetadata)

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, v):
        return {} if v is None else v


class Site(BaseModel):
    """
    Site (composition) record.
    Only the fields used for ownership checks and domain routing are modelled.
    """
    id: Optional[RecordId] = None
    user: SiteOwner
    metadata: SiteMetadata = Field(default_factory=SiteMetadata)
    pages: List[Page] = Field(default_factory=list)

    @field_validator("metadata", "pages", mode="before")
    @classmethod
    def default_empty(cls, v, info):
        if v is None:
            return [] if info.field_name == "pages" else {}
        return v


class User(BaseModel):
    """Identity record of the calling user"""
    id: RecordId
