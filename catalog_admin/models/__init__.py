from catalog_admin.models.links import (  # noqa: F401
    product_brand_links,
    product_category_links,
    product_pending_category_links,
    product_tag_links,
)
from catalog_admin.models.product import Product
from catalog_admin.models.taxonomy import Brand, Category, PendingCategoryRequest, Tag
from catalog_admin.models.attribute import Attribute, AttributeOption
from catalog_admin.models.image import ProductImage
from catalog_admin.models.variation import ProductVariation
from catalog_admin.models.user_role import UserRole
from catalog_admin.models.notification import AdminNotification
from catalog_admin.models.audit_log import AuditLog

__all__ = [
    "Product",
    "Category",
    "Tag",
    "Brand",
    "PendingCategoryRequest",
    "Attribute",
    "AttributeOption",
    "ProductImage",
    "ProductVariation",
    "UserRole",
    "AdminNotification",
    "AuditLog",
]
