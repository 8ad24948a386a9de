"""Tests for capability resolution."""
import pytest
from catalog_admin.errors import AuthorizationError, NotFoundError
from catalog_admin.models import Attribute, Tag
from catalog_admin.models.links import BRAND_LINKS
from catalog_admin.services import access, relations


def test_admin_can_edit_everything(session, admin, make_product):
    product = make_product(created_by="vendor-2")
    caps = access.resolve_capabilities(session, admin, product, access.PRODUCT)
    assert caps.can_view and caps.can_edit


def test_customer_is_rejected(session, customer, make_product):
    product = make_product()
    with pytest.raises(AuthorizationError):
        access.resolve_capabilities(session, customer, product, access.PRODUCT)


def test_vendor_edits_own_product(session, vendor, make_product):
    product = make_product(created_by="vendor-1")
    assert access.require_edit(session, vendor, product, access.PRODUCT).can_edit


def test_vendor_edits_product_linked_to_their_brand(session, vendor, catalog, make_product):
    product = make_product(created_by="admin-1")
    relations.replace_links(session, BRAND_LINKS, product.id, [catalog.acme.id])
    session.commit()

    caps = access.resolve_capabilities(session, vendor, product, access.PRODUCT)
    assert caps.can_view and caps.can_edit


def test_brand_falls_back_to_onboarding_slug(session, vendor, catalog, make_product):
    catalog.acme.created_by = None
    session.commit()
    product = make_product(created_by="admin-1")
    relations.replace_links(session, BRAND_LINKS, product.id, [catalog.acme.id])
    session.commit()

    assert access.resolve_capabilities(session, vendor, product, access.PRODUCT).can_edit


def test_unrelated_vendor_gets_not_found(session, other_vendor, catalog, make_product):
    product = make_product(created_by="vendor-1")
    relations.replace_links(session, BRAND_LINKS, product.id, [catalog.acme.id])
    session.commit()

    with pytest.raises(NotFoundError):
        access.require_edit(session, other_vendor, product, access.PRODUCT)


def test_shared_attribute_is_read_only_for_vendors(session, vendor):
    shared = Attribute(name="Size", slug="size", created_by=None)
    session.add(shared)
    session.commit()

    caps = access.resolve_capabilities(session, vendor, shared, access.ATTRIBUTE)
    assert caps.can_view and not caps.can_edit
    with pytest.raises(AuthorizationError):
        access.require_edit(session, vendor, shared, access.ATTRIBUTE)


def test_owned_attribute_is_editable_and_propagates_owner(session, vendor):
    owned = Attribute(name="Color", slug="color", created_by="vendor-1")
    session.add(owned)
    session.commit()

    caps = access.require_edit(session, vendor, owned, access.ATTRIBUTE)
    assert caps.owner_id == "vendor-1"


def test_other_vendors_tag_is_hidden(session, other_vendor):
    tag = Tag(name="Private", slug="private", created_by="vendor-1")
    session.add(tag)
    session.commit()

    assert not access.resolve_capabilities(session, other_vendor, tag, access.TAG).can_view


def test_categories_are_admin_only_for_mutation(session, vendor, admin, catalog):
    assert not access.resolve_capabilities(
        session, vendor, catalog.shoes, access.CATEGORY
    ).can_edit
    assert access.resolve_capabilities(session, admin, catalog.shoes, access.CATEGORY).can_edit


def test_visible_product_filter(session, vendor, other_vendor, admin, catalog, make_product):
    from catalog_admin.models import Product

    own = make_product("Own", created_by="vendor-1")
    branded = make_product("Branded", created_by="admin-1")
    make_product("Foreign", created_by="vendor-2")
    relations.replace_links(session, BRAND_LINKS, branded.id, [catalog.acme.id])
    session.commit()

    def visible(identity):
        query = session.query(Product.id)
        criterion = access.visible_product_filter(session, identity)
        if criterion is not None:
            query = query.filter(criterion)
        return {row.id for row in query}

    assert visible(vendor) == {own.id, branded.id}
    assert len(visible(admin)) == 3
    assert len(visible(other_vendor)) == 1
