"""Payload shapes for product create/update/list."""
from decimal import Decimal
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

Status = Literal["publish", "draft", "archived"]
ProductType = Literal["simple", "variable"]
Condition = Literal["brand_new", "like_new", "open_box", "refurbished", "handmade", "okx"]
Packaging = Literal["in_wrap_nylon", "in_a_box", "premium_gift_packaging", "cardboard_wrap"]
ReturnPolicy = Literal[
    "not_returnable", "returnable_7_days", "returnable_14_days", "returnable_30_days"
]

BLANKABLE = (
    "slug",
    "short_description",
    "description",
    "discount_price",
    "sku",
    "status",
    "product_type",
    "condition",
    "packaging",
    "return_policy",
    "main_image_id",
)


def normalize_blank(value):
    """Blank strings count as "not provided"."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class VariationPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    attributes: Dict[str, str] = Field(default_factory=dict)
    regular_price: Optional[Decimal] = Field(default=None, ge=0)
    sale_price: Optional[Decimal] = Field(default=None, ge=0)
    sku: Optional[str] = Field(default=None, max_length=120)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    image_id: Optional[int] = None

    @field_validator(
        "regular_price", "sale_price", "sku", "stock_quantity", "image_id", mode="before"
    )
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_blank(value)

    @field_validator("attributes", mode="before")
    @classmethod
    def _attributes(cls, value):
        return value or {}


class ProductCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=2, max_length=140)
    slug: Optional[str] = Field(default=None, max_length=140)
    short_description: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = Field(default=None, max_length=4000)
    price: Decimal = Field(ge=0)
    discount_price: Optional[Decimal] = Field(default=None, ge=0)
    sku: Optional[str] = Field(default=None, max_length=120)
    stock_quantity: int = Field(default=0, ge=0)
    status: Optional[Status] = None
    product_type: Optional[ProductType] = None
    condition: Optional[Condition] = None
    packaging: Optional[Packaging] = None
    return_policy: Optional[ReturnPolicy] = None
    category_ids: List[int] = Field(default_factory=list)
    tag_ids: List[int] = Field(default_factory=list)
    brand_ids: List[int] = Field(default_factory=list)
    image_ids: List[int] = Field(default_factory=list)
    pending_category_request_ids: List[int] = Field(default_factory=list)
    main_image_id: Optional[int] = None
    variations: List[VariationPayload] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator(*BLANKABLE, mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_blank(value)


class ProductUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(default=None, min_length=2, max_length=140)
    slug: Optional[str] = Field(default=None, max_length=140)
    short_description: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = Field(default=None, max_length=4000)
    price: Optional[Decimal] = Field(default=None, ge=0)
    discount_price: Optional[Decimal] = Field(default=None, ge=0)
    sku: Optional[str] = Field(default=None, max_length=120)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    status: Optional[Status] = None
    product_type: Optional[ProductType] = None
    condition: Optional[Condition] = None
    packaging: Optional[Packaging] = None
    return_policy: Optional[ReturnPolicy] = None
    category_ids: Optional[List[int]] = None
    tag_ids: Optional[List[int]] = None
    brand_ids: Optional[List[int]] = None
    image_ids: Optional[List[int]] = None
    pending_category_request_ids: Optional[List[int]] = None
    main_image_id: Optional[int] = None
    variations: Optional[List[VariationPayload]] = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator(*BLANKABLE, mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_blank(value)

    def provided(self, field):
        """True when the payload carried a non-null value for `field`."""
        return field in self.model_fields_set and getattr(self, field) is not None

    def sent(self, field):
        """True when the payload mentioned `field`, even as null/blank."""
        return field in self.model_fields_set


class ListProductsQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=50)
    status: Optional[Status] = None
    search: Optional[str] = Field(default=None, max_length=120)

    @field_validator("status", "search", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return normalize_blank(value)
