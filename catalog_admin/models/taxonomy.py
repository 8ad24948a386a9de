from datetime import datetime, timezone
from catalog_admin.extensions import db


def _now():
    return datetime.now(timezone.utc)


class Category(db.Model):
    __tablename__ = "admin_categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(140), unique=True, nullable=False, index=True)
    description = db.Column(db.String(500))
    parent_id = db.Column(
        db.Integer,
        db.ForeignKey("admin_categories.id", ondelete="SET NULL"),
        index=True,
    )
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_by = db.Column(db.String(64))
    created_at = db.Column(db.DateTime(timezone=True), default=_now)

    children = db.relationship(
        "Category",
        backref=db.backref("parent", remote_side=[id]),
        order_by="Category.sort_order",
    )

    def to_ref(self):
        return {"id": self.id, "name": self.name, "slug": self.slug}

    def __repr__(self):
        return f"<Category {self.slug}>"


class Tag(db.Model):
    __tablename__ = "admin_tags"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(140), unique=True, nullable=False, index=True)
    description = db.Column(db.String(500))
    created_by = db.Column(db.String(64), index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_now)

    def to_ref(self):
        return {"id": self.id, "name": self.name, "slug": self.slug}

    def __repr__(self):
        return f"<Tag {self.slug}>"


class Brand(db.Model):
    __tablename__ = "admin_brands"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(140), unique=True, nullable=False, index=True)
    description = db.Column(db.String(500))
    created_by = db.Column(db.String(64), index=True)
    require_product_review_for_publish = db.Column(
        db.Boolean, nullable=False, default=False
    )
    created_at = db.Column(db.DateTime(timezone=True), default=_now)

    def to_ref(self):
        return {"id": self.id, "name": self.name, "slug": self.slug}

    def __repr__(self):
        return f"<Brand {self.slug}>"


class PendingCategoryRequest(db.Model):
    """A vendor's proposal for a new category, awaiting admin review."""

    __tablename__ = "vendor_category_requests"

    id = db.Column(db.Integer, primary_key=True)
    requester_user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(140), nullable=False, index=True)
    parent_id = db.Column(
        db.Integer, db.ForeignKey("admin_categories.id", ondelete="SET NULL")
    )
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    requested_at = db.Column(db.DateTime(timezone=True), default=_now, index=True)
    reviewed_at = db.Column(db.DateTime(timezone=True))
    reviewed_by = db.Column(db.String(64))
    review_note = db.Column(db.String(600))
    approved_category_id = db.Column(
        db.Integer, db.ForeignKey("admin_categories.id", ondelete="SET NULL")
    )

    STATUSES = ("pending", "approved", "rejected")

    @property
    def is_pending(self):
        return self.status == "pending"

    def to_dict(self):
        return {
            "id": self.id,
            "requester_user_id": self.requester_user_id,
            "name": self.name,
            "slug": self.slug,
            "parent_id": self.parent_id,
            "status": self.status,
            "requested_at": self.requested_at.isoformat() if self.requested_at else None,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "reviewed_by": self.reviewed_by,
            "review_note": self.review_note,
            "approved_category_id": self.approved_category_id,
        }

    def __repr__(self):
        return f"<PendingCategoryRequest {self.slug} [{self.status}]>"
