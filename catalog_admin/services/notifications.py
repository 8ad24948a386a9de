"""Dashboard notifications for admins and vendors."""
import logging
from sqlalchemy.exc import SQLAlchemyError
from catalog_admin.models.notification import AdminNotification
from catalog_admin.models.user_role import UserRole

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = {"admin": 100, "vendor": 50, "customer": 100}


class AdminNotifier:
    """Writes notification rows through the caller's session.

    Inserts run in a savepoint: a failed notification is logged and never
    breaks the save that triggered it.
    """

    def __init__(self, session, retention=None):
        self.session = session
        self.retention = dict(DEFAULT_RETENTION, **(retention or {}))

    def create_notifications(self, payloads):
        rows = []
        for item in payloads or []:
            role = item.get("recipient_role")
            if role not in AdminNotification.ROLES:
                role = "admin"
            row = AdminNotification(
                recipient_user_id=str(item.get("recipient_user_id") or ""),
                recipient_role=role,
                title=str(item.get("title") or "").strip(),
                message=str(item.get("message") or "").strip(),
                type=str(item.get("type") or "system").strip() or "system",
                severity=item.get("severity") or "info",
                entity_type=_str_or_none(item.get("entity_type")),
                entity_id=_str_or_none(item.get("entity_id")),
                meta=item.get("metadata") if isinstance(item.get("metadata"), dict) else {},
                created_by=_str_or_none(item.get("created_by")),
            )
            if row.recipient_user_id and row.title and row.message:
                rows.append(row)
        if not rows:
            return []

        try:
            with self.session.begin_nested():
                self.session.add_all(rows)
                self.session.flush()
                recipients = {(r.recipient_user_id, r.recipient_role) for r in rows}
                for user_id, role in recipients:
                    self._trim(user_id, role)
        except SQLAlchemyError:
            logger.exception("Notification insert failed")
            return []
        return rows

    def _trim(self, user_id, role):
        """Keep only the newest N notifications per recipient."""
        keep = self.retention.get(role, DEFAULT_RETENTION["admin"])
        overflow = (
            self.session.query(AdminNotification.id)
            .filter(
                AdminNotification.recipient_user_id == user_id,
                AdminNotification.recipient_role == role,
            )
            .order_by(AdminNotification.created_at.desc(), AdminNotification.id.desc())
            .offset(keep)
            .all()
        )
        ids = [row.id for row in overflow]
        if ids:
            self.session.query(AdminNotification).filter(
                AdminNotification.id.in_(ids)
            ).delete(synchronize_session=False)

    def notify(
        self,
        recipient_user_id,
        recipient_role,
        title,
        message,
        severity="info",
        entity_type=None,
        entity_id=None,
        metadata=None,
        type="system",
        created_by=None,
    ):
        return self.create_notifications(
            [
                {
                    "recipient_user_id": recipient_user_id,
                    "recipient_role": recipient_role,
                    "title": title,
                    "message": message,
                    "type": type,
                    "severity": severity,
                    "entity_type": entity_type,
                    "entity_id": entity_id,
                    "metadata": metadata or {},
                    "created_by": created_by,
                }
            ]
        )

    def notify_all_admins(
        self,
        title,
        message,
        severity="info",
        entity_type=None,
        entity_id=None,
        metadata=None,
        type="system",
        created_by=None,
    ):
        """Send the same notification to every user with the admin role."""
        try:
            admin_ids = [
                row.user_id
                for row in self.session.query(UserRole.user_id)
                .filter(UserRole.role == "admin")
                .all()
            ]
        except SQLAlchemyError:
            logger.exception("Admin recipient lookup failed")
            return []
        if not admin_ids:
            logger.info("No admins to notify for %s", type)
            return []
        return self.create_notifications(
            [
                {
                    "recipient_user_id": admin_id,
                    "recipient_role": "admin",
                    "title": title,
                    "message": message,
                    "type": type,
                    "severity": severity,
                    "entity_type": entity_type,
                    "entity_id": entity_id,
                    "metadata": metadata or {},
                    "created_by": created_by,
                }
                for admin_id in sorted(set(admin_ids))
            ]
        )


def _str_or_none(value):
    return str(value) if value not in (None, "") else None
