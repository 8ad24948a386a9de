from catalog_admin.extensions import db


class ProductVariation(db.Model):
    __tablename__ = "product_variations"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attributes = db.Column(db.JSON, nullable=False, default=dict)  # {"size": "large"}
    regular_price = db.Column(db.Numeric(12, 2))
    sale_price = db.Column(db.Numeric(12, 2))
    sku = db.Column(db.String(120))
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    image_id = db.Column(db.Integer)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "attributes": self.attributes or {},
            "regular_price": _num(self.regular_price),
            "sale_price": _num(self.sale_price),
            "sku": self.sku,
            "stock_quantity": self.stock_quantity,
            "image_id": self.image_id,
            "sort_order": self.sort_order,
        }

    def __repr__(self):
        return f"<ProductVariation {self.product_id}#{self.sort_order}>"


def _num(value):
    return float(value) if value is not None else None
