"""Product create/update/delete orchestration.

A save runs these steps in order and stops at the first error:

1. authorize the caller
2. validate the payload and its cross-field rules
3. resolve the slug
4. resolve the SKU
5. apply the vendor review gate
6. write the product row
7. replace the category/tag/brand/pending-request link sets
8. attach images and settle the main image
9. replace variations
10. reload the joined representation

Steps 6-9 share one transaction; any failure rolls all of them back.
Concurrent saves of the same product are not serialized: the last write
wins and link replacement from two requests may interleave.
"""
import logging
import math
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from catalog_admin.errors import (
    CatalogError,
    NotFoundError,
    ValidationError,
    translate_db_error,
)
from catalog_admin.models.audit_log import AuditLog
from catalog_admin.models.links import (
    ALL_LINKS,
    BRAND_LINKS,
    CATEGORY_LINKS,
    PENDING_CATEGORY_LINKS,
    TAG_LINKS,
)
from catalog_admin.models.product import Product
from catalog_admin.models.taxonomy import Brand, Category, PendingCategoryRequest, Tag
from catalog_admin.schemas import parse_payload
from catalog_admin.schemas.product import ListProductsQuery, ProductCreate, ProductUpdate
from catalog_admin.services import access, images, relations, skus, slugs, variations
from catalog_admin.services.review_gate import (
    DISABLED,
    apply_review_gate,
    resolve_review_gate,
)

logger = logging.getLogger(__name__)

CATEGORY_REQUIRED = "Select at least one category or request a new category."
DRAFT_UNTIL_CATEGORY = "Products without an approved category must stay in draft."
DISCOUNT_TOO_HIGH = "Discount price cannot exceed base price."

# Nullable columns an update may clear by sending null/blank
CLEARABLE_FIELDS = (
    "short_description",
    "description",
    "discount_price",
    "condition",
    "packaging",
    "return_policy",
)
# Columns an update only changes when given a value
REQUIRED_FIELDS = ("price", "stock_quantity", "product_type")


def _num(value):
    return float(value) if value is not None else None


def _iso(value):
    return value.isoformat() if value is not None else None


def serialize_product(product):
    """Product row plus every relation the editor needs."""
    product_images = [image.to_dict() for image in product.images]
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "short_description": product.short_description,
        "description": product.description,
        "price": _num(product.price),
        "discount_price": _num(product.discount_price),
        "sku": product.sku,
        "sku_auto_generated": product.sku_auto_generated,
        "stock_quantity": product.stock_quantity,
        "status": product.status,
        "product_type": product.product_type,
        "condition": product.condition,
        "packaging": product.packaging,
        "return_policy": product.return_policy,
        "main_image_id": product.main_image_id,
        "created_by": product.created_by,
        "created_at": _iso(product.created_at),
        "updated_at": _iso(product.updated_at),
        "categories": [category.to_ref() for category in product.categories],
        "tags": [tag.to_ref() for tag in product.tags],
        "brands": [brand.to_ref() for brand in product.brands],
        "images": product_images,
        "image_url": product_images[0]["url"] if product_images else "",
        "variations": [variation.to_dict() for variation in product.variations],
        "pending_category_request_ids": sorted(
            request.id for request in product.pending_category_requests
        ),
    }


class ProductService:
    """Product operations for one caller, bound to one session."""

    def __init__(self, session, identity, notifier=None):
        self.session = session
        self.identity = identity
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_product(self, product_id):
        access.require_catalog_manager(self.identity)
        product = self._load(product_id)
        access.require_view(self.session, self.identity, product, access.PRODUCT)
        return {"item": serialize_product(product)}

    def list_products(self, filters=None):
        access.require_catalog_manager(self.identity)
        params = parse_payload(ListProductsQuery, filters, "Invalid query.")

        try:
            query = self.session.query(Product)
            criterion = access.visible_product_filter(self.session, self.identity)
            if criterion is not None:
                query = query.filter(criterion)
            if params.status:
                query = query.filter(Product.status == params.status)
            if params.search:
                term = f"%{params.search}%"
                query = query.filter(
                    or_(
                        Product.name.ilike(term),
                        Product.slug.ilike(term),
                        Product.sku.ilike(term),
                    )
                )

            total = query.count()
            rows = (
                query.options(
                    selectinload(Product.categories),
                    selectinload(Product.tags),
                    selectinload(Product.brands),
                    selectinload(Product.images),
                    selectinload(Product.variations),
                    selectinload(Product.pending_category_requests),
                )
                .order_by(Product.created_at.desc(), Product.id.desc())
                .offset((params.page - 1) * params.per_page)
                .limit(params.per_page)
                .all()
            )
            items = [serialize_product(product) for product in rows]
        except SQLAlchemyError as exc:
            raise translate_db_error(exc, "Unable to load products.") from exc

        return {
            "items": items,
            "page": params.page,
            "pages": max(1, math.ceil(total / params.per_page)),
            "total_count": total,
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_product(self, payload):
        access.require_catalog_manager(self.identity)
        data = parse_payload(ProductCreate, payload, "Invalid product details.")

        self._check_discount(data.price, data.discount_price)
        categories = self._load_categories(data.category_ids)
        pending_ids = self._valid_pending_ids(data.pending_category_request_ids)
        self._check_terms(Tag, access.TAG, data.tag_ids, "tag_ids")
        self._check_terms(Brand, access.BRAND, data.brand_ids, "brand_ids")
        status = self._resolve_status(
            data.status, bool(categories), bool(pending_ids), fallback="publish"
        )

        slug = slugs.unique_slug(self.session, Product, data.slug or data.name)
        primary = categories[0] if categories else None
        if data.sku:
            sku = skus.ensure_unique_sku(self.session, data.sku)
            sku_auto = False
        else:
            sku = skus.generate_sku(self.session, primary)
            sku_auto = True

        gate = self._review_gate()
        final_status = apply_review_gate(gate, self.identity, status)

        product = Product(
            name=data.name,
            slug=slug,
            short_description=data.short_description,
            description=data.description,
            price=data.price,
            discount_price=data.discount_price,
            sku=sku,
            sku_auto_generated=sku_auto,
            stock_quantity=data.stock_quantity,
            status=final_status,
            product_type=data.product_type
            or ("variable" if data.variations else "simple"),
            condition=data.condition,
            packaging=data.packaging,
            return_policy=data.return_policy,
            created_by=self.identity.user_id,
        )
        try:
            self.session.add(product)
            self.session.flush()
        except SQLAlchemyError as exc:
            self._abort(exc, "Unable to create product.")

        try:
            relations.replace_links(
                self.session, CATEGORY_LINKS, product.id, [c.id for c in categories]
            )
            relations.replace_links(self.session, TAG_LINKS, product.id, data.tag_ids)
            relations.replace_links(self.session, BRAND_LINKS, product.id, data.brand_ids)
            relations.replace_links(
                self.session, PENDING_CATEGORY_LINKS, product.id, pending_ids
            )
            clone_map = self._attach_images(product, data.image_ids, data.main_image_id)
            variations.replace_variations(
                self.session,
                product.id,
                [v.model_dump() for v in data.variations],
                clone_map,
            )
            self._audit("CREATE_PRODUCT", product, {"slug": slug, "status": final_status})
            if final_status != status:
                self._notify_review(product, gate, status, final_status)
            self.session.commit()
        except CatalogError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self._abort(exc, "Unable to attach product relationships.")

        logger.info("Product %s created by %s", product.id, self.identity.user_id)
        return {"item": self._reload(product.id)}

    def update_product(self, product_id, payload):
        access.require_catalog_manager(self.identity)
        product = self._load(product_id)
        access.require_edit(self.session, self.identity, product, access.PRODUCT)
        data = parse_payload(ProductUpdate, payload, "Invalid product details.")

        price = data.price if data.provided("price") else product.price
        discount = (
            data.discount_price if data.sent("discount_price") else product.discount_price
        )
        self._check_discount(price, discount)

        if data.provided("category_ids"):
            categories = self._load_categories(data.category_ids)
            category_ids = [c.id for c in categories]
        else:
            categories = None
            category_ids = relations.link_ids(self.session, CATEGORY_LINKS, product.id)
        if data.provided("pending_category_request_ids"):
            pending_ids = self._valid_pending_ids(data.pending_category_request_ids)
        else:
            pending_ids = self._valid_pending_ids(
                relations.link_ids(self.session, PENDING_CATEGORY_LINKS, product.id),
                restrict_owner=False,
            )
        if data.provided("tag_ids"):
            self._check_terms(Tag, access.TAG, data.tag_ids, "tag_ids")
        if data.provided("brand_ids"):
            self._check_terms(Brand, access.BRAND, data.brand_ids, "brand_ids")

        requested_status = data.status if data.provided("status") else None
        touches_categories = (
            data.provided("category_ids")
            or data.provided("pending_category_request_ids")
            or requested_status is not None
        )
        status = product.status
        if touches_categories:
            status = self._resolve_status(
                requested_status,
                bool(category_ids),
                bool(pending_ids),
                fallback=product.status,
            )

        if data.provided("slug"):
            candidate = slugs.build_slug(data.slug)
            if candidate != product.slug:
                product.slug = slugs.unique_slug(
                    self.session, Product, candidate, product.id
                )
        elif data.provided("name") and data.name != product.name:
            product.slug = slugs.unique_slug(
                self.session, Product, data.name, product.id
            )

        self._resolve_update_sku(product, data, categories)

        gate = DISABLED
        final_status = status
        if requested_status == "publish":
            gate = self._review_gate()
            final_status = apply_review_gate(gate, self.identity, status)

        if data.provided("name"):
            product.name = data.name
        for field in REQUIRED_FIELDS:
            if data.provided(field):
                setattr(product, field, getattr(data, field))
        for field in CLEARABLE_FIELDS:
            if data.sent(field):
                setattr(product, field, getattr(data, field))
        product.status = final_status

        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            self._abort(exc, "Unable to update product.")

        try:
            if data.provided("category_ids"):
                relations.replace_links(
                    self.session, CATEGORY_LINKS, product.id, category_ids
                )
            if data.provided("tag_ids"):
                relations.replace_links(self.session, TAG_LINKS, product.id, data.tag_ids)
            if data.provided("brand_ids"):
                relations.replace_links(
                    self.session, BRAND_LINKS, product.id, data.brand_ids
                )
            if data.provided("pending_category_request_ids"):
                relations.replace_links(
                    self.session, PENDING_CATEGORY_LINKS, product.id, pending_ids
                )

            clone_map = {}
            if data.provided("image_ids"):
                clone_map = self._attach_images(
                    product, data.image_ids, data.main_image_id
                )
            elif data.sent("main_image_id"):
                attached = [image.id for image in product.images]
                product.main_image_id = images.resolve_main_image(
                    data.main_image_id, attached, {}, product.main_image_id
                )

            if data.provided("variations"):
                variations.replace_variations(
                    self.session,
                    product.id,
                    [v.model_dump() for v in data.variations],
                    clone_map,
                )

            self._audit(
                "UPDATE_PRODUCT",
                product,
                {"fields": sorted(data.model_fields_set), "status": final_status},
            )
            if final_status != status:
                self._notify_review(product, gate, status, final_status)
            self.session.commit()
        except CatalogError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self._abort(exc, "Unable to update product relationships.")

        logger.info("Product %s updated by %s", product.id, self.identity.user_id)
        return {"item": self._reload(product.id)}

    def delete_product(self, product_id):
        access.require_catalog_manager(self.identity)
        product = self._load(product_id)
        access.require_edit(self.session, self.identity, product, access.PRODUCT)

        try:
            relations.clear_links(self.session, product.id, ALL_LINKS)
            self._audit("DELETE_PRODUCT", product, {"slug": product.slug})
            self.session.delete(product)  # cascades to images + variations
            self.session.commit()
        except SQLAlchemyError as exc:
            self._abort(exc, "Unable to delete product.")

        logger.info("Product %s deleted by %s", product_id, self.identity.user_id)
        return {"deleted": True}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load(self, product_id):
        try:
            product = self.session.get(Product, product_id)
        except SQLAlchemyError as exc:
            raise translate_db_error(exc, "Unable to load product.") from exc
        if not product:
            raise NotFoundError("Product not found.")
        return product

    def _reload(self, product_id):
        self.session.expire_all()
        return serialize_product(self.session.get(Product, product_id))

    def _abort(self, exc, message):
        self.session.rollback()
        raise translate_db_error(exc, message) from exc

    @staticmethod
    def _check_discount(price, discount_price):
        if (
            discount_price is not None
            and price is not None
            and discount_price > price
        ):
            raise ValidationError.for_field("discount_price", DISCOUNT_TOO_HIGH)

    @staticmethod
    def _resolve_status(requested, has_categories, has_pending, fallback):
        """Status honoring the category invariant.

        A product needs a real category or a pending category request; with
        only the latter it stays in draft.
        """
        if not has_categories and not has_pending:
            raise ValidationError.for_field("category_ids", CATEGORY_REQUIRED)
        if has_categories:
            return requested or fallback
        if requested in (None, "draft"):
            return "draft"
        raise ValidationError.for_field("status", DRAFT_UNTIL_CATEGORY)

    def _load_categories(self, category_ids):
        """Categories in submitted order; unknown ids are a field error."""
        ids = relations.dedupe_ids(category_ids)
        if not ids:
            return []
        found = {
            category.id: category
            for category in self.session.query(Category).filter(Category.id.in_(ids))
        }
        missing = [i for i in ids if i not in found]
        if missing:
            raise ValidationError.for_field(
                "category_ids",
                f"Unknown category id(s): {', '.join(map(str, missing))}",
            )
        return [found[i] for i in ids]

    def _valid_pending_ids(self, request_ids, restrict_owner=True):
        """Ids of category requests that are still pending.

        Vendors may only link their own requests. Anything else is dropped.
        """
        ids = relations.dedupe_ids(request_ids)
        if not ids:
            return []
        query = self.session.query(PendingCategoryRequest.id).filter(
            PendingCategoryRequest.id.in_(ids),
            PendingCategoryRequest.status == "pending",
        )
        if restrict_owner and not self.identity.is_admin:
            query = query.filter(
                PendingCategoryRequest.requester_user_id == self.identity.user_id
            )
        valid = {row.id for row in query}
        dropped = [i for i in ids if i not in valid]
        if dropped:
            logger.info("Ignoring non-pending category requests %s", dropped)
        return [i for i in ids if i in valid]

    def _check_terms(self, model, descriptor, term_ids, field):
        """Tags/brands must exist and be visible to the caller."""
        ids = relations.dedupe_ids(term_ids)
        if not ids:
            return
        rows = self.session.query(model).filter(model.id.in_(ids)).all()
        visible = {
            row.id
            for row in rows
            if access.resolve_capabilities(
                self.session, self.identity, row, descriptor
            ).can_view
        }
        missing = [i for i in ids if i not in visible]
        if missing:
            raise ValidationError.for_field(
                field,
                f"Unknown {descriptor.name} id(s): {', '.join(map(str, missing))}",
            )

    def _resolve_update_sku(self, product, data, categories):
        primary = categories[0] if categories else None
        if data.sent("sku"):
            if data.sku:
                product.sku = skus.ensure_unique_sku(self.session, data.sku, product.id)
                product.sku_auto_generated = False
                return
            if primary is None:
                primary = self._primary_category(product)
            product.sku = skus.generate_sku(self.session, primary, product.id)
            product.sku_auto_generated = True
        elif product.sku_auto_generated and categories is not None:
            # Category change re-derives a generated SKU's prefix
            if skus.sku_prefix(primary) != (product.sku or "")[:2]:
                product.sku = skus.generate_sku(self.session, primary, product.id)
        elif not product.sku:
            product.sku = skus.generate_sku(
                self.session, self._primary_category(product), product.id
            )
            product.sku_auto_generated = True

    def _primary_category(self, product):
        ids = relations.link_ids(self.session, CATEGORY_LINKS, product.id)
        return self.session.get(Category, ids[0]) if ids else None

    def _attach_images(self, product, image_ids, main_image_id):
        resolved, clone_map = images.attach_images(
            self.session, product.id, image_ids, self.identity.user_id
        )
        main = images.resolve_main_image(
            main_image_id, resolved, clone_map, product.main_image_id
        )
        if main != product.main_image_id:
            product.main_image_id = main
        return clone_map

    def _review_gate(self):
        if not self.identity.is_vendor:
            return DISABLED
        return resolve_review_gate(
            self.session, self.identity.user_id, self.identity.brand_slug
        )

    def _notify_review(self, product, gate, requested_status, final_status):
        self._audit(
            "REVIEW_GATE_DRAFT",
            product,
            {"requested_status": requested_status, "brand_id": gate.brand_id},
        )
        if self.notifier is None:
            return
        self.notifier.notify_all_admins(
            title="Product pending review",
            message=(
                f'Brand "{gate.brand_name}" submitted "{product.name}" '
                f"for publishing. It was saved as a draft."
            ),
            severity="info",
            type="product_review_requested",
            entity_type="product",
            entity_id=product.id,
            metadata={
                "product_id": product.id,
                "product_slug": product.slug,
                "brand_id": gate.brand_id,
                "brand_name": gate.brand_name,
                "vendor_user_id": self.identity.user_id,
                "requested_status": requested_status,
                "final_status": final_status,
                "action_url": f"/backend/admin/products/{product.id}",
            },
            created_by=self.identity.user_id,
        )

    def _audit(self, action, product, payload=None):
        self.session.add(
            AuditLog(
                actor_id=self.identity.user_id,
                action=action,
                product_id=product.id,
                payload=payload,
            )
        )
