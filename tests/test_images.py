"""Tests for image attachment and cloning."""
import pytest
from catalog_admin.errors import ValidationError
from catalog_admin.models import ProductImage
from catalog_admin.services.images import attach_images, resolve_main_image


def _image(session, product_id=None, url="https://cdn.test/a.jpg", created_by="vendor-1"):
    image = ProductImage(
        product_id=product_id,
        url=url,
        storage_key=url.rsplit("/", 1)[-1],
        alt_text="front",
        created_by=created_by,
    )
    session.add(image)
    session.commit()
    return image


def test_own_images_are_reordered_in_place(session, make_product):
    product = make_product()
    first = _image(session, product.id, "https://cdn.test/1.jpg")
    second = _image(session, product.id, "https://cdn.test/2.jpg")

    resolved, clone_map = attach_images(session, product.id, [second.id, first.id], "admin-1")
    session.commit()

    assert resolved == [second.id, first.id]
    assert clone_map == {}
    assert (second.sort_order, first.sort_order) == (0, 1)


def test_foreign_image_is_cloned_and_source_untouched(session, make_product):
    source_product = make_product("Source")
    target = make_product("Target")
    source = _image(session, source_product.id, created_by="vendor-2")

    resolved, clone_map = attach_images(session, target.id, [source.id], "vendor-1")
    session.commit()

    clone = session.get(ProductImage, resolved[0])
    assert clone.id != source.id
    assert clone_map == {source.id: clone.id}
    assert clone.product_id == target.id
    assert clone.url == source.url
    assert clone.storage_key == source.storage_key
    assert clone.alt_text == source.alt_text
    assert clone.created_by == "vendor-1"

    session.refresh(source)
    assert source.product_id == source_product.id
    assert source.created_by == "vendor-2"


def test_library_upload_is_cloned(session, make_product):
    product = make_product()
    upload = _image(session, None)

    resolved, clone_map = attach_images(session, product.id, [upload.id], "vendor-1")
    session.commit()

    assert clone_map[upload.id] == resolved[0]
    session.refresh(upload)
    assert upload.product_id is None


def test_unsubmitted_images_are_detached(session, make_product):
    product = make_product()
    keep = _image(session, product.id, "https://cdn.test/keep.jpg")
    drop = _image(session, product.id, "https://cdn.test/drop.jpg")

    attach_images(session, product.id, [keep.id], "admin-1")
    session.commit()

    session.refresh(drop)
    assert drop.product_id is None
    assert session.get(ProductImage, keep.id).product_id == product.id


def test_unknown_image_id_is_a_field_error(session, make_product):
    product = make_product()
    with pytest.raises(ValidationError) as exc:
        attach_images(session, product.id, [9999], "admin-1")
    assert "image_ids" in exc.value.field_errors


def test_resolve_main_image():
    assert resolve_main_image(5, [10, 11], {5: 11}) == 11
    assert resolve_main_image(10, [10, 11], {}) == 10
    assert resolve_main_image(99, [10, 11], {}, current_id=11) == 11
    assert resolve_main_image(None, [10, 11], {}) == 10
    assert resolve_main_image(None, [], {}) is None
