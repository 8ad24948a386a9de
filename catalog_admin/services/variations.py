"""Wholesale replacement of a product's variation rows."""
from decimal import Decimal, InvalidOperation
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from catalog_admin.errors import translate_db_error
from catalog_admin.models.variation import ProductVariation


def _to_decimal(value):
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _to_int(value, default=0):
    if value is None or value == "":
        return default
    try:
        return int(Decimal(str(value)))
    except (InvalidOperation, ValueError):
        return default


def replace_variations(session, product_id, variations, clone_map=None):
    """Delete all variations of a product and insert `variations` in order.

    Not a merge: the submitted list is the complete variation set.
    `clone_map` translates image ids that were cloned during attachment.
    """
    clone_map = clone_map or {}
    rows = []
    for index, variation in enumerate(variations or []):
        image_id = variation.get("image_id") or None
        rows.append(
            ProductVariation(
                product_id=product_id,
                attributes=variation.get("attributes") or {},
                regular_price=_to_decimal(variation.get("regular_price")),
                sale_price=_to_decimal(variation.get("sale_price")),
                sku=variation.get("sku") or None,
                stock_quantity=_to_int(variation.get("stock_quantity")),
                image_id=clone_map.get(image_id, image_id),
                sort_order=index,
            )
        )
    try:
        session.execute(
            delete(ProductVariation).where(ProductVariation.product_id == product_id)
        )
        session.add_all(rows)
        session.flush()
    except SQLAlchemyError as exc:
        raise translate_db_error(
            exc, "Unable to save product variations.", table="product_variations"
        ) from exc
    return rows
