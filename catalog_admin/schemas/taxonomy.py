"""Payload shapes for taxonomy terms, attribute options and category requests."""
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from catalog_admin.schemas.product import normalize_blank


class TermCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=2, max_length=120)
    slug: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    parent_id: Optional[int] = None
    require_product_review_for_publish: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("slug", "description", "parent_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_blank(value)


class TermUpdate(TermCreate):
    name: Optional[str] = Field(default=None, min_length=2, max_length=120)


class AttributeOptionCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1, max_length=120)
    slug: Optional[str] = Field(default=None, max_length=120)
    color_hex: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{3,8}$")

    @field_validator("slug", "color_hex", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_blank(value)


class CategoryRequestCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=2, max_length=120)
    parent_id: Optional[int] = None
    product_id: Optional[int] = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class CategoryRequestReview(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    request_id: int = Field(alias="requestId")
    status: Literal["approved", "rejected"]
    review_note: Optional[str] = Field(default=None, alias="reviewNote", max_length=600)

    @field_validator("review_note", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_blank(value)


class CategoryRequestQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=40, ge=1, le=100)
    status: Optional[Literal["pending", "approved", "rejected"]] = None
    search: Optional[str] = Field(default=None, max_length=120)

    @field_validator("status", "search", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_blank(value)
