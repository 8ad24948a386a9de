"""Tests for taxonomy terms and attribute options."""
import pytest
from catalog_admin.errors import AuthorizationError, NotFoundError, ValidationError
from catalog_admin.models import Attribute
from catalog_admin.services.taxonomy import TaxonomyService


@pytest.fixture
def attribute(session):
    attribute = Attribute(name="Color", slug="color", created_by="vendor-1")
    session.add(attribute)
    session.commit()
    return attribute


def test_vendor_creates_owned_tag(session, vendor):
    item = TaxonomyService(session, vendor).create_term("tags", {"name": "Summer Sale"})["item"]
    assert item["slug"] == "summer-sale"
    assert item["created_by"] == "vendor-1"


def test_vendor_cannot_create_category(session, vendor):
    with pytest.raises(AuthorizationError):
        TaxonomyService(session, vendor).create_term("categories", {"name": "Hats"})


def test_admin_creates_child_category(session, admin, catalog):
    item = TaxonomyService(session, admin).create_term(
        "categories", {"name": "Sneakers", "parent_id": catalog.shoes.id}
    )["item"]
    assert item["parent_id"] == catalog.shoes.id
    assert item["created_by"] == "admin-1"


def test_unknown_parent_category(session, admin):
    with pytest.raises(ValidationError) as exc:
        TaxonomyService(session, admin).create_term(
            "categories", {"name": "Sneakers", "parent_id": 999}
        )
    assert "parent_id" in exc.value.field_errors


def test_new_category_is_appended_to_its_siblings(session, admin, catalog):
    service = TaxonomyService(session, admin)
    root = service.create_term("categories", {"name": "Hats"})["item"]
    child = service.create_term(
        "categories", {"name": "Sneakers", "parent_id": catalog.shoes.id}
    )["item"]

    assert root["sort_order"] == 2
    assert child["sort_order"] == 0


def test_category_cannot_be_moved_under_its_descendant(session, admin, catalog):
    service = TaxonomyService(session, admin)
    service.update_term("categories", catalog.shoes.id, {"parent_id": catalog.bags.id})

    with pytest.raises(ValidationError) as exc:
        service.update_term("categories", catalog.bags.id, {"parent_id": catalog.shoes.id})

    assert "parent_id" in exc.value.field_errors
    session.refresh(catalog.bags)
    assert catalog.bags.parent_id is None


def test_term_slug_collision(session, admin, catalog):
    item = TaxonomyService(session, admin).create_term("tags", {"name": "Sale"})["item"]
    assert item["slug"] == "sale-2"


def test_only_admins_toggle_brand_review(session, vendor, admin, catalog):
    with pytest.raises(AuthorizationError):
        TaxonomyService(session, vendor).update_term(
            "brands", catalog.acme.id, {"require_product_review_for_publish": True}
        )
    item = TaxonomyService(session, admin).update_term(
        "brands", catalog.acme.id, {"require_product_review_for_publish": True}
    )["item"]
    assert item["require_product_review_for_publish"] is True


def test_vendor_renames_own_brand(session, vendor, catalog):
    item = TaxonomyService(session, vendor).update_term(
        "brands", catalog.acme.id, {"name": "Acme Outdoor"}
    )["item"]
    assert item["slug"] == "acme-outdoor"


def test_vendor_list_hides_other_vendors_tags(session, vendor, other_vendor):
    TaxonomyService(session, vendor).create_term("tags", {"name": "Mine"})
    items = TaxonomyService(session, other_vendor).list_terms("tags")["items"]
    assert items == []


def test_unknown_taxonomy(session, admin):
    with pytest.raises(NotFoundError):
        TaxonomyService(session, admin).list_terms("colors")


def test_option_inherits_attribute_owner(session, admin, attribute):
    item = TaxonomyService(session, admin).add_attribute_option(
        attribute.id, {"name": "Deep Red", "color_hex": "#aa0000"}
    )["item"]
    assert item["created_by"] == "vendor-1"
    assert item["slug"] == "deep-red"
    assert item["sort_order"] == 0


def test_option_slugs_are_unique_per_attribute(session, vendor, attribute):
    other = Attribute(name="Finish", slug="finish", created_by="vendor-1")
    session.add(other)
    session.commit()
    service = TaxonomyService(session, vendor)

    first = service.add_attribute_option(attribute.id, {"name": "Red"})["item"]
    second = service.add_attribute_option(attribute.id, {"name": "Red"})["item"]
    elsewhere = service.add_attribute_option(other.id, {"name": "Red"})["item"]

    assert (first["slug"], second["slug"], elsewhere["slug"]) == ("red", "red-2", "red")
    assert second["sort_order"] == 1


def test_shared_attribute_options_are_admin_only(session, vendor):
    shared = Attribute(name="Size", slug="size", created_by=None)
    session.add(shared)
    session.commit()

    with pytest.raises(AuthorizationError):
        TaxonomyService(session, vendor).add_attribute_option(shared.id, {"name": "XL"})


def test_invalid_color_hex(session, vendor, attribute):
    with pytest.raises(ValidationError) as exc:
        TaxonomyService(session, vendor).add_attribute_option(
            attribute.id, {"name": "Red", "color_hex": "red"}
        )
    assert "color_hex" in exc.value.field_errors


def test_get_attribute_reports_permissions(session, other_vendor, vendor, attribute):
    with pytest.raises(NotFoundError):
        TaxonomyService(session, other_vendor).get_attribute(attribute.id)
    result = TaxonomyService(session, vendor).get_attribute(attribute.id)
    assert result["permissions"] == {"can_view": True, "can_edit": True}
