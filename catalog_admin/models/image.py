from datetime import datetime, timezone
from catalog_admin.extensions import db


class ProductImage(db.Model):
    __tablename__ = "product_images"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=True,  # unattached uploads live in the media library
        index=True,
    )
    url = db.Column(db.String(1024), nullable=False)
    storage_key = db.Column(db.String(512), nullable=False, default="")
    alt_text = db.Column(db.String(255))
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_by = db.Column(db.String(64))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "url": self.url,
            "alt_text": self.alt_text,
            "sort_order": self.sort_order,
        }

    def __repr__(self):
        return f"<ProductImage {self.id} product={self.product_id}>"
