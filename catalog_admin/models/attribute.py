from datetime import datetime, timezone
from catalog_admin.extensions import db


class Attribute(db.Model):
    __tablename__ = "admin_attributes"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(140), unique=True, nullable=False, index=True)
    description = db.Column(db.String(500))
    created_by = db.Column(db.String(64), index=True)  # None = shared
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    options = db.relationship(
        "AttributeOption",
        backref="attribute",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="AttributeOption.sort_order",
    )

    def __repr__(self):
        return f"<Attribute {self.slug}>"


class AttributeOption(db.Model):
    __tablename__ = "admin_attribute_options"

    id = db.Column(db.Integer, primary_key=True)
    attribute_id = db.Column(
        db.Integer,
        db.ForeignKey("admin_attributes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(140), nullable=False)
    color_hex = db.Column(db.String(9))
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_by = db.Column(db.String(64))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("attribute_id", "slug", name="uq_attribute_option_slug"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "attribute_id": self.attribute_id,
            "name": self.name,
            "slug": self.slug,
            "color_hex": self.color_hex,
            "sort_order": self.sort_order,
            "created_by": self.created_by,
        }

    def __repr__(self):
        return f"<AttributeOption {self.slug}>"
