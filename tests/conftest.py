from types import SimpleNamespace
import pytest
from catalog_admin import create_app
from catalog_admin.extensions import db as _db
from catalog_admin.models import Brand, Category, Product, Tag, UserRole
from catalog_admin.services.identity import resolve_identity
from catalog_admin.services.notifications import AdminNotifier
from catalog_admin.services.product_service import ProductService


@pytest.fixture
def app():
    """Fresh application and schema per test; services commit."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def session(db):
    return db.session


@pytest.fixture
def roles(session):
    session.add_all(
        [
            UserRole(user_id="admin-1", role="admin"),
            UserRole(user_id="admin-2", role="admin"),
            UserRole(user_id="vendor-1", role="vendor", brand_slug="acme"),
            UserRole(user_id="vendor-2", role="vendor"),
            UserRole(user_id="customer-1", role="customer"),
        ]
    )
    session.commit()


@pytest.fixture
def admin(session, roles):
    return resolve_identity(session, "admin-1")


@pytest.fixture
def vendor(session, roles):
    return resolve_identity(session, "vendor-1")


@pytest.fixture
def other_vendor(session, roles):
    return resolve_identity(session, "vendor-2")


@pytest.fixture
def customer(session, roles):
    return resolve_identity(session, "customer-1")


@pytest.fixture
def catalog(session):
    shoes = Category(name="Shoes", slug="shoes")
    bags = Category(name="Bags", slug="bags", sort_order=1)
    sale = Tag(name="Sale", slug="sale")
    acme = Brand(name="Acme", slug="acme", created_by="vendor-1")
    session.add_all([shoes, bags, sale, acme])
    session.commit()
    return SimpleNamespace(shoes=shoes, bags=bags, sale=sale, acme=acme)


@pytest.fixture
def notifier(session):
    return AdminNotifier(session)


@pytest.fixture
def service_for(session, notifier):
    def build(identity):
        return ProductService(session, identity, notifier)

    return build


@pytest.fixture
def make_product(session):
    """Bare product row, bypassing the save path."""

    def build(name="Plain", created_by="admin-1", **kwargs):
        product = Product(
            name=name,
            slug=kwargs.pop("slug", name.lower().replace(" ", "-")),
            price=kwargs.pop("price", 10),
            created_by=created_by,
            **kwargs,
        )
        session.add(product)
        session.commit()
        return product

    return build
