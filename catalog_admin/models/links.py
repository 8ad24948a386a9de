"""Many-to-many link tables between products and their taxonomy targets."""
from collections import namedtuple
from catalog_admin.extensions import db


def _link_table(name, target_column, target_table):
    return db.Table(
        name,
        db.Column(
            "product_id",
            db.Integer,
            db.ForeignKey("products.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        db.Column(
            target_column,
            db.Integer,
            db.ForeignKey(f"{target_table}.id", ondelete="CASCADE"),
            primary_key=True,
            index=True,
        ),
    )


product_category_links = _link_table(
    "product_category_links", "category_id", "admin_categories"
)
product_tag_links = _link_table("product_tag_links", "tag_id", "admin_tags")
product_brand_links = _link_table("product_brand_links", "brand_id", "admin_brands")
product_pending_category_links = _link_table(
    "vendor_product_pending_category_requests",
    "category_request_id",
    "vendor_category_requests",
)

# (table, target column, payload field)
LinkSpec = namedtuple("LinkSpec", "table target_column field")

CATEGORY_LINKS = LinkSpec(product_category_links, "category_id", "category_ids")
TAG_LINKS = LinkSpec(product_tag_links, "tag_id", "tag_ids")
BRAND_LINKS = LinkSpec(product_brand_links, "brand_id", "brand_ids")
PENDING_CATEGORY_LINKS = LinkSpec(
    product_pending_category_links,
    "category_request_id",
    "pending_category_request_ids",
)

ALL_LINKS = (CATEGORY_LINKS, TAG_LINKS, BRAND_LINKS, PENDING_CATEGORY_LINKS)
