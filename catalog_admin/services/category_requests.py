"""Vendor requests for new categories and their admin review."""
import logging
import math
from datetime import datetime, timezone
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from catalog_admin.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    translate_db_error,
)
from catalog_admin.models.audit_log import AuditLog
from catalog_admin.models.links import CATEGORY_LINKS, PENDING_CATEGORY_LINKS
from catalog_admin.models.product import Product
from catalog_admin.models.taxonomy import Category, PendingCategoryRequest
from catalog_admin.schemas import parse_payload
from catalog_admin.schemas.taxonomy import (
    CategoryRequestCreate,
    CategoryRequestQuery,
    CategoryRequestReview,
)
from catalog_admin.services import access, relations
from catalog_admin.services.slugs import build_slug
from catalog_admin.services.taxonomy import check_parent_category, next_category_sort_order

logger = logging.getLogger(__name__)

REQUEST_TABLE = PendingCategoryRequest.__tablename__


class CategoryRequestService:
    def __init__(self, session, identity, notifier=None):
        self.session = session
        self.identity = identity
        self.notifier = notifier

    def _permissions(self):
        return {
            "can_create_request": self.identity.can_manage_catalog,
            "can_review_request": self.identity.is_admin,
        }

    def list_requests(self, filters=None):
        access.require_catalog_manager(self.identity)
        params = parse_payload(CategoryRequestQuery, filters, "Invalid query.")

        query = self.session.query(PendingCategoryRequest)
        if not self.identity.is_admin:
            query = query.filter(
                PendingCategoryRequest.requester_user_id == self.identity.user_id
            )
        if params.status:
            query = query.filter(PendingCategoryRequest.status == params.status)
        if params.search:
            term = f"%{params.search}%"
            query = query.filter(
                or_(
                    PendingCategoryRequest.name.ilike(term),
                    PendingCategoryRequest.slug.ilike(term),
                )
            )
        try:
            total = query.count()
            rows = (
                query.order_by(
                    PendingCategoryRequest.requested_at.desc(),
                    PendingCategoryRequest.id.desc(),
                )
                .offset((params.page - 1) * params.per_page)
                .limit(params.per_page)
                .all()
            )
        except SQLAlchemyError as exc:
            raise translate_db_error(
                exc, "Unable to load category requests.", table=REQUEST_TABLE
            ) from exc

        return {
            "items": [row.to_dict() for row in rows],
            "pagination": {
                "page": params.page,
                "per_page": params.per_page,
                "total": total,
                "total_pages": math.ceil(total / params.per_page) if total else 0,
            },
            "permissions": self._permissions(),
        }

    def create_request(self, payload):
        """Submit a category request, optionally linked to a product.

        An existing category with the same slug short-circuits; an existing
        pending request with the same slug is reused.
        """
        access.require_catalog_manager(self.identity)
        data = parse_payload(CategoryRequestCreate, payload, "Invalid request.")
        slug = build_slug(data.name)

        if data.product_id is not None:
            self._ensure_product_editable(data.product_id)
        check_parent_category(self.session, data.parent_id)

        existing_category = self.session.query(Category).filter_by(slug=slug).first()
        if existing_category:
            return {
                "item": {
                    "id": None,
                    "name": existing_category.name,
                    "slug": existing_category.slug,
                    "status": "approved",
                    "approved_category_id": existing_category.id,
                },
                "existing_category": existing_category.to_ref(),
            }

        existing_pending = (
            self.session.query(PendingCategoryRequest)
            .filter_by(slug=slug, status="pending")
            .first()
        )
        try:
            if existing_pending:
                if data.product_id is not None:
                    relations.add_link(
                        self.session,
                        PENDING_CATEGORY_LINKS,
                        data.product_id,
                        existing_pending.id,
                    )
                self.session.commit()
                return {"item": existing_pending.to_dict(), "duplicate_pending": True}

            created = PendingCategoryRequest(
                requester_user_id=self.identity.user_id,
                name=data.name,
                slug=slug,
                parent_id=data.parent_id,
                status="pending",
            )
            self.session.add(created)
            self.session.flush()
            if data.product_id is not None:
                relations.add_link(
                    self.session, PENDING_CATEGORY_LINKS, data.product_id, created.id
                )
            if not self.identity.is_admin:
                self._notify_admins_of_request(created)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise translate_db_error(
                exc, "Unable to submit category request.", table=REQUEST_TABLE
            ) from exc

        logger.info("Category request %s submitted by %s", created.id, self.identity.user_id)
        return {"item": created.to_dict()}

    def review_request(self, payload):
        """Approve or reject a pending request.

        Approval creates the category (or reuses one with the same slug) and
        links it to every product waiting on the request. Either way the
        product's pending links to the request are removed.
        """
        if not self.identity.is_admin:
            raise AuthorizationError()
        data = parse_payload(CategoryRequestReview, payload, "Invalid request.")

        request = self.session.get(PendingCategoryRequest, data.request_id)
        if not request:
            raise NotFoundError("Category request not found.")
        if not request.is_pending:
            raise ConflictError("Category request already processed.")

        link_table = PENDING_CATEGORY_LINKS.table
        try:
            approved_category_id = None
            if data.status == "approved":
                approved_category_id = self._category_for(request).id

            request.status = data.status
            request.reviewed_at = datetime.now(timezone.utc)
            request.reviewed_by = self.identity.user_id
            request.review_note = data.review_note
            request.approved_category_id = approved_category_id

            product_ids = relations.dedupe_ids(
                row[0]
                for row in self.session.execute(
                    select(link_table.c.product_id).where(
                        link_table.c.category_request_id == request.id
                    )
                )
            )
            if approved_category_id is not None:
                for product_id in product_ids:
                    relations.add_link(
                        self.session, CATEGORY_LINKS, product_id, approved_category_id
                    )
            self.session.execute(
                delete(link_table).where(link_table.c.category_request_id == request.id)
            )
            self.session.add(
                AuditLog(
                    actor_id=self.identity.user_id,
                    action="REVIEW_CATEGORY_REQUEST",
                    payload={
                        "request_id": request.id,
                        "status": data.status,
                        "linked_products": product_ids,
                    },
                )
            )
            self._notify_requester(request, len(product_ids))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise translate_db_error(
                exc, "Unable to review category request.", table=REQUEST_TABLE
            ) from exc

        return {
            "success": True,
            "item": {
                "id": request.id,
                "status": request.status,
                "approved_category_id": request.approved_category_id,
            },
            "linked_products_count": len(product_ids),
        }

    def _ensure_product_editable(self, product_id):
        product = self.session.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product not found.")
        access.require_edit(self.session, self.identity, product, access.PRODUCT)

    def _category_for(self, request):
        category = self.session.query(Category).filter_by(slug=request.slug).first()
        if category:
            return category
        category = Category(
            name=request.name,
            slug=request.slug,
            parent_id=request.parent_id,
            sort_order=next_category_sort_order(self.session, request.parent_id),
            created_by=request.requester_user_id,
        )
        self.session.add(category)
        self.session.flush()
        return category

    def _notify_admins_of_request(self, request):
        if self.notifier is None:
            return
        brands = access.find_owned_brands(
            self.session, self.identity.user_id, self.identity.brand_slug
        )
        brand_name = brands[0].name if brands else None
        if brand_name:
            message = f'Brand "{brand_name}" requested category "{request.name}".'
        else:
            message = f'You have a new category request: "{request.name}".'
        self.notifier.notify_all_admins(
            title="Category request pending review",
            message=message,
            severity="info",
            type="category_request_created",
            entity_type="vendor_category_request",
            entity_id=request.id,
            metadata={
                "request_id": request.id,
                "request_slug": request.slug,
                "requester_user_id": request.requester_user_id,
                "requester_brand_name": brand_name,
                "action_url": "/backend/admin/categories",
            },
            created_by=self.identity.user_id,
        )

    def _notify_requester(self, request, linked_count):
        if self.notifier is None:
            return
        if request.status == "approved":
            title = "Category request approved"
            if linked_count:
                message = (
                    f'"{request.name}" was created and linked to your pending '
                    f"product(s). You can now set your product live."
                )
            else:
                message = f'"{request.name}" was created. You can now use this category.'
            severity = "success"
        else:
            title = "Category request rejected"
            message = f'"{request.name}" was rejected.'
            if request.review_note:
                message += f" Note: {request.review_note}"
            severity = "warning"
        self.notifier.notify(
            request.requester_user_id,
            "vendor",
            title,
            message,
            severity=severity,
            type="category_request_reviewed",
            entity_type="vendor_category_request",
            entity_id=request.id,
            metadata={
                "request_id": request.id,
                "approved_category_id": request.approved_category_id,
                "review_note": request.review_note,
                "linked_products_count": linked_count,
            },
            created_by=self.identity.user_id,
        )
