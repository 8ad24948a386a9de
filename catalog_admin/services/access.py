"""Capability resolution for catalog records.

One resolver covers every entity type; the differences between products,
attributes, tags, brands and categories are expressed as descriptors.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import or_, select
from catalog_admin.errors import AuthorizationError, NotFoundError
from catalog_admin.models.links import product_brand_links
from catalog_admin.models.product import Product
from catalog_admin.models.taxonomy import Brand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityDescriptor:
    name: str
    owner_field: str = "created_by"
    # Unowned records are visible (read-only) to every vendor
    shared_allowed: bool = False
    admin_only_mutation: bool = False
    # Vendors also reach records linked to a brand they own
    brand_scoped: bool = False


PRODUCT = EntityDescriptor("product", brand_scoped=True)
ATTRIBUTE = EntityDescriptor("attribute", shared_allowed=True)
TAG = EntityDescriptor("tag", shared_allowed=True)
BRAND = EntityDescriptor("brand", shared_allowed=True)
CATEGORY = EntityDescriptor("category", admin_only_mutation=True)


@dataclass(frozen=True)
class Capabilities:
    can_view: bool
    can_edit: bool
    # Propagated to child records, e.g. new attribute options
    owner_id: Optional[str] = None


def require_catalog_manager(identity):
    if not identity.can_manage_catalog:
        raise AuthorizationError()


def find_owned_brands(session, user_id, brand_slug=None):
    """Brands owned by a vendor.

    Ownership is `created_by == user_id`. Vendors whose onboarding stored
    a brand slug before the brand row was attributed to them fall back to
    the brand with that slug.
    """
    brands = (
        session.query(Brand)
        .filter(Brand.created_by == user_id)
        .order_by(Brand.created_at.asc(), Brand.id.asc())
        .all()
    )
    if brands or not brand_slug:
        return brands
    fallback = session.query(Brand).filter(Brand.slug == brand_slug).first()
    return [fallback] if fallback else []


def owned_brand_ids(session, identity):
    return [b.id for b in find_owned_brands(session, identity.user_id, identity.brand_slug)]


def _linked_to_owned_brand(session, identity, product_id):
    brand_ids = owned_brand_ids(session, identity)
    if not brand_ids or product_id is None:
        return False
    stmt = (
        select(product_brand_links.c.product_id)
        .where(product_brand_links.c.product_id == product_id)
        .where(product_brand_links.c.brand_id.in_(brand_ids))
        .limit(1)
    )
    return session.execute(stmt).first() is not None


def resolve_capabilities(session, identity, record, descriptor):
    """Return what `identity` may do with `record`.

    Admins can view and edit everything. Vendors edit what they own (or,
    for brand-scoped records, what is linked to their brand) and view
    shared records read-only. Customers are rejected outright.
    """
    require_catalog_manager(identity)
    owner_id = getattr(record, descriptor.owner_field, None)

    if identity.is_admin:
        return Capabilities(True, True, owner_id)
    if descriptor.admin_only_mutation:
        return Capabilities(True, False, owner_id)
    if owner_id is not None and owner_id == identity.user_id:
        return Capabilities(True, True, owner_id)
    if descriptor.brand_scoped and _linked_to_owned_brand(
        session, identity, getattr(record, "id", None)
    ):
        return Capabilities(True, True, owner_id)
    if descriptor.shared_allowed and owner_id is None:
        return Capabilities(True, False, owner_id)
    return Capabilities(False, False, owner_id)


def require_edit(session, identity, record, descriptor):
    """Capabilities for an edit, hiding records the caller cannot see."""
    caps = resolve_capabilities(session, identity, record, descriptor)
    if not caps.can_view:
        raise NotFoundError(f"{descriptor.name.capitalize()} not found.")
    if not caps.can_edit:
        raise AuthorizationError(f"You cannot edit this {descriptor.name}.")
    return caps


def require_view(session, identity, record, descriptor):
    caps = resolve_capabilities(session, identity, record, descriptor)
    if not caps.can_view:
        raise NotFoundError(f"{descriptor.name.capitalize()} not found.")
    return caps


def visible_product_filter(session, identity):
    """WHERE criterion limiting a product query to what the caller sees.

    None means no restriction (admins).
    """
    require_catalog_manager(identity)
    if identity.is_admin:
        return None
    brand_ids = owned_brand_ids(session, identity)
    criteria = [Product.created_by == identity.user_id]
    if brand_ids:
        criteria.append(
            Product.id.in_(
                select(product_brand_links.c.product_id).where(
                    product_brand_links.c.brand_id.in_(brand_ids)
                )
            )
        )
    return or_(*criteria)


def visible_owned_filter(model, identity):
    """WHERE criterion for shared-or-owned taxonomy (tags, brands, attributes)."""
    if identity.is_admin:
        return None
    return or_(model.created_by.is_(None), model.created_by == identity.user_id)
