from catalog_admin.extensions import db


class UserRole(db.Model):
    """Role assignment resolved for each request's caller."""

    __tablename__ = "user_roles"

    user_id = db.Column(db.String(64), primary_key=True)
    role = db.Column(db.String(20), nullable=False, default="customer", index=True)
    # Set during vendor onboarding, before the brand row exists
    brand_slug = db.Column(db.String(140))

    ROLES = {"admin", "vendor", "customer"}

    def __repr__(self):
        return f"<UserRole {self.user_id}={self.role}>"
