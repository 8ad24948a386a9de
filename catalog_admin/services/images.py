"""Attach media rows to a product, cloning images owned elsewhere."""
import logging
from sqlalchemy.exc import SQLAlchemyError
from catalog_admin.errors import ValidationError, translate_db_error
from catalog_admin.models.image import ProductImage
from catalog_admin.services.relations import dedupe_ids

logger = logging.getLogger(__name__)


def attach_images(session, product_id, image_ids, owner_id):
    """Make `image_ids` the ordered image list of a product.

    Images already on the product only get a new sort order. An image on
    another product (or on none) is cloned: a new row under this product
    with the same url/storage key/alt text, owned by `owner_id`. The
    source row is left untouched. Images that were on the product but are
    not submitted are detached back to the media library.

    Returns (resolved_ids, clone_map) where clone_map maps each cloned
    source id to the id of its clone.
    """
    ordered = dedupe_ids(image_ids)
    found = {}
    if ordered:
        try:
            rows = (
                session.query(ProductImage).filter(ProductImage.id.in_(ordered)).all()
            )
        except SQLAlchemyError as exc:
            raise translate_db_error(
                exc, "Unable to attach images.", table="product_images"
            ) from exc
        found = {image.id: image for image in rows}

    missing = [i for i in ordered if i not in found]
    if missing:
        raise ValidationError.for_field(
            "image_ids", f"Unknown image id(s): {', '.join(map(str, missing))}"
        )

    resolved = []
    clone_map = {}
    try:
        for index, image_id in enumerate(ordered):
            image = found[image_id]
            if image.product_id == product_id:
                image.sort_order = index
                resolved.append(image.id)
                continue
            clone = ProductImage(
                product_id=product_id,
                url=image.url,
                storage_key=image.storage_key,
                alt_text=image.alt_text,
                sort_order=index,
                created_by=owner_id,
            )
            session.add(clone)
            session.flush()
            clone_map[image.id] = clone.id
            resolved.append(clone.id)

        stale = session.query(ProductImage).filter(
            ProductImage.product_id == product_id
        )
        if resolved:
            stale = stale.filter(ProductImage.id.notin_(resolved))
        for image in stale.all():
            image.product_id = None
        session.flush()
    except SQLAlchemyError as exc:
        raise translate_db_error(exc, "Unable to attach images.", table="product_images") from exc

    if clone_map:
        logger.info("Cloned %d image(s) into product %s", len(clone_map), product_id)
    return resolved, clone_map


def resolve_main_image(requested_id, resolved_ids, clone_map, current_id=None):
    """Pick the primary image after attachment.

    A requested id that points at a cloned original is translated to the
    clone. Falls back to the current main image while it is still
    attached, then to the first attached image.
    """
    if requested_id is not None:
        requested_id = clone_map.get(requested_id, requested_id)
        if requested_id in resolved_ids:
            return requested_id
    if current_id is not None and current_id in resolved_ids:
        return current_id
    return resolved_ids[0] if resolved_ids else None
