from datetime import datetime, timezone
from catalog_admin.extensions import db


class AdminNotification(db.Model):
    __tablename__ = "admin_notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_user_id = db.Column(db.String(64), nullable=False, index=True)
    recipient_role = db.Column(db.String(20), nullable=False, default="admin")
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(60), nullable=False, default="system")
    severity = db.Column(db.String(20), nullable=False, default="info")
    entity_type = db.Column(db.String(60))
    entity_id = db.Column(db.String(64))
    # "metadata" is reserved on declarative models
    meta = db.Column("metadata", db.JSON, default=dict)
    created_by = db.Column(db.String(64))
    read_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    SEVERITIES = {"info", "success", "warning", "error"}
    ROLES = {"admin", "vendor", "customer"}

    def __repr__(self):
        return f"<AdminNotification {self.type} -> {self.recipient_user_id}>"
