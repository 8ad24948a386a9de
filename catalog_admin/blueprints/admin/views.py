"""JSON endpoints for the catalog admin dashboard."""
from flask import current_app, g, jsonify, request
from catalog_admin.blueprints.admin import admin_bp
from catalog_admin.errors import ValidationError
from catalog_admin.extensions import db
from catalog_admin.services.category_requests import CategoryRequestService
from catalog_admin.services.identity import resolve_identity
from catalog_admin.services.media_service import upload_media
from catalog_admin.services.notifications import AdminNotifier
from catalog_admin.services.product_service import ProductService
from catalog_admin.services.taxonomy import TaxonomyService


@admin_bp.before_request
def load_identity():
    header = current_app.config["IDENTITY_HEADER"]
    g.identity = resolve_identity(db.session, request.headers.get(header))


def _notifier():
    return AdminNotifier(db.session, current_app.config["NOTIFICATION_RETENTION"])


def _products():
    return ProductService(db.session, g.identity, _notifier())


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Invalid JSON body.", form_errors=["Expected a JSON object."])
    return data


def _query_args():
    return request.args.to_dict()


# --- Products ---


@admin_bp.route("/products", methods=["GET"])
def list_products():
    filters = _query_args()
    per_page = request.args.get("per_page", type=int)
    if per_page is not None:
        filters["per_page"] = min(per_page, current_app.config["PRODUCTS_PER_PAGE_MAX"])
    return jsonify(_products().list_products(filters))


@admin_bp.route("/products", methods=["POST"])
def create_product():
    return jsonify(_products().create_product(_json_body())), 201


@admin_bp.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id):
    return jsonify(_products().get_product(product_id))


@admin_bp.route("/products/<int:product_id>", methods=["PATCH"])
def update_product(product_id):
    return jsonify(_products().update_product(product_id, _json_body()))


@admin_bp.route("/products/<int:product_id>", methods=["DELETE"])
def delete_product(product_id):
    return jsonify(_products().delete_product(product_id))


# --- Category requests ---


def _category_requests():
    return CategoryRequestService(db.session, g.identity, _notifier())


@admin_bp.route("/categories/requests", methods=["GET"])
def list_category_requests():
    return jsonify(_category_requests().list_requests(_query_args()))


@admin_bp.route("/categories/requests", methods=["POST"])
def create_category_request():
    result = _category_requests().create_request(_json_body())
    status = 201 if result["item"].get("id") and not result.get("duplicate_pending") else 200
    return jsonify(result), status


@admin_bp.route("/categories/requests", methods=["PATCH"])
def review_category_request():
    return jsonify(_category_requests().review_request(_json_body()))


# --- Taxonomy ---


@admin_bp.route("/<any(categories, tags, brands):kind>", methods=["GET"])
def list_terms(kind):
    return jsonify(TaxonomyService(db.session, g.identity).list_terms(kind))


@admin_bp.route("/<any(categories, tags, brands):kind>", methods=["POST"])
def create_term(kind):
    result = TaxonomyService(db.session, g.identity).create_term(kind, _json_body())
    return jsonify(result), 201


@admin_bp.route("/<any(categories, tags, brands):kind>/<int:term_id>", methods=["PATCH"])
def update_term(kind, term_id):
    service = TaxonomyService(db.session, g.identity)
    return jsonify(service.update_term(kind, term_id, _json_body()))


@admin_bp.route("/attributes/<int:attribute_id>", methods=["GET"])
def get_attribute(attribute_id):
    return jsonify(TaxonomyService(db.session, g.identity).get_attribute(attribute_id))


@admin_bp.route("/attributes/<int:attribute_id>/options", methods=["POST"])
def create_attribute_option(attribute_id):
    service = TaxonomyService(db.session, g.identity)
    return jsonify(service.add_attribute_option(attribute_id, _json_body())), 201


# --- Media ---


@admin_bp.route("/media/upload", methods=["POST"])
def upload():
    file = request.files.get("file")
    if file is None:
        raise ValidationError.for_field("file", "No file uploaded.")
    result = upload_media(
        db.session,
        g.identity,
        file.read(),
        filename=file.filename,
        alt_text=request.form.get("alt_text"),
    )
    return jsonify(result), 201
