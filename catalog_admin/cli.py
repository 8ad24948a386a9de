"""Flask CLI commands for catalog operations."""
import click
from flask import current_app


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development; use `flask db upgrade` elsewhere)."""
        from catalog_admin.extensions import db

        db.create_all()
        click.echo(f"Database initialized at {current_app.config['SQLALCHEMY_DATABASE_URI']}.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed demo taxonomy, an admin, a vendor and a few products (idempotent)."""
        from catalog_admin.extensions import db
        from catalog_admin.models import Brand, Category, Product, Tag, UserRole
        from catalog_admin.services.identity import resolve_identity
        from catalog_admin.services.product_service import ProductService

        if Product.query.first():
            click.echo("Products already exist, skipping demo seed.")
            return

        db.session.add_all(
            [
                UserRole(user_id="admin-1", role="admin"),
                UserRole(user_id="vendor-1", role="vendor", brand_slug="acme"),
            ]
        )
        shoes = Category(name="Shoes", slug="shoes")
        bags = Category(name="Bags", slug="bags", sort_order=1)
        sale = Tag(name="Sale", slug="sale")
        acme = Brand(name="Acme", slug="acme", created_by="vendor-1")
        db.session.add_all([shoes, bags, sale, acme])
        db.session.commit()

        service = ProductService(db.session, resolve_identity(db.session, "vendor-1"))
        demo_products = [
            ("Red Shoe", 20, shoes, [sale.id]),
            ("Canvas Sneaker", 45, shoes, []),
            ("Leather Tote", 120, bags, [sale.id]),
        ]
        for name, price, category, tag_ids in demo_products:
            result = service.create_product(
                {
                    "name": name,
                    "price": price,
                    "stock_quantity": 10,
                    "category_ids": [category.id],
                    "tag_ids": tag_ids,
                    "brand_ids": [acme.id],
                }
            )
            click.echo(f"Created: {result['item']['sku']} - {name}")
        click.echo(f"Seeded {len(demo_products)} demo products.")

    @app.cli.command("grant-role")
    @click.argument("user_id")
    @click.argument("role", type=click.Choice(["admin", "vendor", "customer"]))
    @click.option("--brand-slug", default=None, help="Brand slug for vendors")
    def grant_role(user_id, role, brand_slug):
        """Assign a role to a user id."""
        from catalog_admin.extensions import db
        from catalog_admin.models import UserRole

        row = db.session.get(UserRole, user_id)
        if row is None:
            row = UserRole(user_id=user_id)
            db.session.add(row)
        row.role = role
        row.brand_slug = brand_slug
        db.session.commit()
        click.echo(f"{user_id} is now {role}" + (f" of {brand_slug}" if brand_slug else ""))

    @app.cli.command("create-product")
    @click.option("--name", required=True)
    @click.option("--price", required=True, type=float)
    @click.option("--category", "category_slug", required=True, help="Category slug")
    @click.option("--status", default="draft", type=click.Choice(["publish", "draft", "archived"]))
    @click.option("--as-user", "user_id", required=True, help="Admin or vendor user id")
    def create_product(name, price, category_slug, status, user_id):
        """Create a product through the regular save path."""
        from catalog_admin.errors import CatalogError
        from catalog_admin.extensions import db
        from catalog_admin.models import Category
        from catalog_admin.services.identity import resolve_identity
        from catalog_admin.services.notifications import AdminNotifier
        from catalog_admin.services.product_service import ProductService

        category = Category.query.filter_by(slug=category_slug).first()
        if category is None:
            raise click.ClickException(f"Unknown category: {category_slug}")

        service = ProductService(
            db.session,
            resolve_identity(db.session, user_id),
            AdminNotifier(db.session, current_app.config["NOTIFICATION_RETENTION"]),
        )
        try:
            result = service.create_product(
                {
                    "name": name,
                    "price": price,
                    "status": status,
                    "category_ids": [category.id],
                }
            )
        except CatalogError as exc:
            raise click.ClickException(exc.message) from exc
        item = result["item"]
        click.echo(f"Created: {item['sku']} - {item['name']} ({item['status']})")

    @app.cli.command("stats")
    def stats():
        """Show product counts by status and pending category requests."""
        from sqlalchemy import func
        from catalog_admin.extensions import db
        from catalog_admin.models import PendingCategoryRequest, Product

        counts = dict(
            db.session.query(Product.status, func.count(Product.id))
            .group_by(Product.status)
            .all()
        )
        click.echo(f"Total products: {sum(counts.values())}")
        for status, count in sorted(counts.items()):
            click.echo(f"  {status}: {count}")
        pending = PendingCategoryRequest.query.filter_by(status="pending").count()
        click.echo(f"Pending category requests: {pending}")
