"""Resolve the calling user into a role-bearing identity."""
from dataclasses import dataclass
from typing import Optional
from catalog_admin.models.user_role import UserRole


@dataclass(frozen=True)
class Identity:
    user_id: Optional[str]
    role: str = "customer"
    brand_slug: Optional[str] = None

    @property
    def is_admin(self):
        return self.user_id is not None and self.role == "admin"

    @property
    def is_vendor(self):
        return self.user_id is not None and self.role == "vendor"

    @property
    def can_manage_catalog(self):
        return self.is_admin or self.is_vendor


ANONYMOUS = Identity(user_id=None, role="anonymous")


def resolve_identity(session, user_id):
    """Look up the caller's role; unknown users are customers."""
    user_id = (user_id or "").strip()
    if not user_id:
        return ANONYMOUS
    row = session.get(UserRole, user_id)
    if not row:
        return Identity(user_id=user_id)
    return Identity(user_id=user_id, role=row.role, brand_slug=row.brand_slug)
