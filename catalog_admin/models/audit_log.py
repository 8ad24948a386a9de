from datetime import datetime, timezone
from catalog_admin.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(db.String(64), nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)
    product_id = db.Column(db.Integer, nullable=True, index=True)
    payload = db.Column(db.JSON)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    ACTIONS = {
        "CREATE_PRODUCT",
        "UPDATE_PRODUCT",
        "DELETE_PRODUCT",
        "REVIEW_GATE_DRAFT",
        "REVIEW_CATEGORY_REQUEST",
    }

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.actor_id}>"
