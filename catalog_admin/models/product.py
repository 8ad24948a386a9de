from datetime import datetime, timezone
from catalog_admin.extensions import db
from catalog_admin.models.links import (
    product_brand_links,
    product_category_links,
    product_pending_category_links,
    product_tag_links,
)


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(140), nullable=False)
    slug = db.Column(db.String(160), unique=True, nullable=False, index=True)
    short_description = db.Column(db.String(500))
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    discount_price = db.Column(db.Numeric(12, 2))
    sku = db.Column(db.String(120), unique=True, index=True)
    sku_auto_generated = db.Column(db.Boolean, nullable=False, default=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default="publish", index=True)
    product_type = db.Column(db.String(20), nullable=False, default="simple")
    condition = db.Column(db.String(30))
    packaging = db.Column(db.String(40))
    return_policy = db.Column(db.String(40))
    main_image_id = db.Column(db.Integer)  # product_images.id, no FK (circular)
    created_by = db.Column(db.String(64), index=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.CheckConstraint("stock_quantity >= 0", name="ck_product_stock"),
        db.CheckConstraint(
            "discount_price IS NULL OR discount_price <= price",
            name="ck_product_discount",
        ),
    )

    # Link collections are read-only; writes go through the relation linker
    categories = db.relationship(
        "Category",
        secondary=product_category_links,
        viewonly=True,
        order_by="Category.name",
    )
    tags = db.relationship(
        "Tag", secondary=product_tag_links, viewonly=True, order_by="Tag.name"
    )
    brands = db.relationship(
        "Brand", secondary=product_brand_links, viewonly=True, order_by="Brand.name"
    )
    pending_category_requests = db.relationship(
        "PendingCategoryRequest",
        secondary=product_pending_category_links,
        viewonly=True,
    )
    images = db.relationship(
        "ProductImage",
        backref="product",
        lazy="select",
        cascade="all",
        order_by="ProductImage.sort_order",
    )
    variations = db.relationship(
        "ProductVariation",
        backref="product",
        lazy="select",
        cascade="all",
        order_by="ProductVariation.sort_order",
    )

    STATUSES = ("publish", "draft", "archived")
    TYPES = ("simple", "variable")
    CONDITIONS = (
        "brand_new",
        "like_new",
        "open_box",
        "refurbished",
        "handmade",
        "okx",
    )
    PACKAGING = (
        "in_wrap_nylon",
        "in_a_box",
        "premium_gift_packaging",
        "cardboard_wrap",
    )
    RETURN_POLICIES = (
        "not_returnable",
        "returnable_7_days",
        "returnable_14_days",
        "returnable_30_days",
    )

    @property
    def is_visible(self):
        return self.status == "publish"

    @property
    def effective_price(self):
        """Discount price when set, otherwise the base price."""
        if self.discount_price is not None:
            return self.discount_price
        return self.price

    def __repr__(self):
        return f"<Product {self.slug}: {self.name}>"
