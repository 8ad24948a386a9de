"""Categories, tags, brands and attribute options."""
import logging
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from catalog_admin.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    translate_db_error,
)
from catalog_admin.models.attribute import Attribute, AttributeOption
from catalog_admin.models.taxonomy import Brand, Category, Tag
from catalog_admin.schemas import parse_payload
from catalog_admin.schemas.taxonomy import AttributeOptionCreate, TermCreate, TermUpdate
from catalog_admin.services import access
from catalog_admin.services.slugs import unique_slug

logger = logging.getLogger(__name__)

TERMS = {
    "categories": (Category, access.CATEGORY),
    "tags": (Tag, access.TAG),
    "brands": (Brand, access.BRAND),
}


def _term_dict(term):
    data = term.to_ref()
    data["description"] = term.description
    data["created_by"] = term.created_by
    if isinstance(term, Category):
        data["parent_id"] = term.parent_id
        data["sort_order"] = term.sort_order
    if isinstance(term, Brand):
        data["require_product_review_for_publish"] = term.require_product_review_for_publish
    return data


def check_parent_category(session, parent_id, own_id=None):
    """Validate a parent category id; None means a top-level category.

    The parent must exist, and for an existing category it must not be the
    category itself or one of its descendants.
    """
    if parent_id is None:
        return None
    if session.get(Category, parent_id) is None:
        raise ValidationError.for_field("parent_id", "Unknown parent category.")
    seen = set()
    current = parent_id
    while current is not None and current not in seen:
        if current == own_id:
            raise ValidationError.for_field(
                "parent_id", "A category cannot be nested under itself."
            )
        seen.add(current)
        current = session.query(Category.parent_id).filter(Category.id == current).scalar()
    return parent_id


def next_category_sort_order(session, parent_id):
    """Siblings are appended at the end of their parent."""
    max_order = (
        session.query(func.max(Category.sort_order))
        .filter(Category.parent_id == parent_id)
        .scalar()
    )
    return (max_order if max_order is not None else -1) + 1


class TaxonomyService:
    def __init__(self, session, identity):
        self.session = session
        self.identity = identity

    def _kind(self, kind):
        if kind not in TERMS:
            raise NotFoundError("Unknown taxonomy.")
        return TERMS[kind]

    def list_terms(self, kind):
        model, descriptor = self._kind(kind)
        access.require_catalog_manager(self.identity)
        query = self.session.query(model)
        criterion = None if descriptor.admin_only_mutation else access.visible_owned_filter(
            model, self.identity
        )
        if criterion is not None:
            query = query.filter(criterion)
        return {"items": [_term_dict(t) for t in query.order_by(model.name).all()]}

    def create_term(self, kind, payload):
        model, descriptor = self._kind(kind)
        access.require_catalog_manager(self.identity)
        if descriptor.admin_only_mutation and not self.identity.is_admin:
            raise AuthorizationError()
        data = parse_payload(TermCreate, payload, f"Invalid {descriptor.name} details.")

        term = model(
            name=data.name,
            slug=unique_slug(self.session, model, data.slug or data.name),
            description=data.description,
            created_by=self.identity.user_id,
        )
        if model is Category:
            term.parent_id = check_parent_category(self.session, data.parent_id)
            term.sort_order = next_category_sort_order(self.session, term.parent_id)
        if model is Brand and data.require_product_review_for_publish is not None:
            if not self.identity.is_admin:
                raise AuthorizationError("Only admins can change brand review settings.")
            term.require_product_review_for_publish = data.require_product_review_for_publish
        try:
            self.session.add(term)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise translate_db_error(
                exc, f"Unable to create {descriptor.name}.", table=model.__tablename__
            ) from exc
        logger.info("Created %s %s by %s", descriptor.name, term.slug, self.identity.user_id)
        return {"item": _term_dict(term)}

    def update_term(self, kind, term_id, payload):
        model, descriptor = self._kind(kind)
        access.require_catalog_manager(self.identity)
        term = self.session.get(model, term_id)
        if term is None:
            raise NotFoundError(f"{descriptor.name.capitalize()} not found.")
        access.require_edit(self.session, self.identity, term, descriptor)
        data = parse_payload(TermUpdate, payload, f"Invalid {descriptor.name} details.")
        review_flag = data.require_product_review_for_publish if model is Brand else None
        if review_flag is not None and not self.identity.is_admin:
            raise AuthorizationError("Only admins can change brand review settings.")
        parent_id = term.parent_id if model is Category else None
        if model is Category and "parent_id" in data.model_fields_set:
            parent_id = check_parent_category(self.session, data.parent_id, term.id)

        if data.name is not None:
            term.name = data.name
        if data.slug is not None or (data.name is not None and "slug" not in data.model_fields_set):
            term.slug = unique_slug(
                self.session, model, data.slug or data.name, term.id
            )
        if "description" in data.model_fields_set:
            term.description = data.description
        if model is Category:
            term.parent_id = parent_id
        if review_flag is not None:
            term.require_product_review_for_publish = review_flag
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise translate_db_error(
                exc, f"Unable to update {descriptor.name}.", table=model.__tablename__
            ) from exc
        return {"item": _term_dict(term)}

    def add_attribute_option(self, attribute_id, payload):
        """Add an option term; it inherits the attribute's owner."""
        access.require_catalog_manager(self.identity)
        attribute = self.session.get(Attribute, attribute_id)
        if attribute is None:
            raise NotFoundError("Attribute not found.")
        caps = access.require_edit(self.session, self.identity, attribute, access.ATTRIBUTE)
        data = parse_payload(AttributeOptionCreate, payload, "Invalid option details.")

        max_order = (
            self.session.query(func.max(AttributeOption.sort_order))
            .filter(AttributeOption.attribute_id == attribute.id)
            .scalar()
        )
        option = AttributeOption(
            attribute_id=attribute.id,
            name=data.name,
            slug=unique_slug(
                self.session,
                AttributeOption,
                data.slug or data.name,
                None,
                AttributeOption.attribute_id == attribute.id,
            ),
            color_hex=data.color_hex,
            sort_order=(max_order if max_order is not None else -1) + 1,
            created_by=caps.owner_id,
        )
        try:
            self.session.add(option)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise translate_db_error(
                exc, "Unable to create attribute option.", table="admin_attribute_options"
            ) from exc
        return {"item": option.to_dict()}

    def get_attribute(self, attribute_id):
        access.require_catalog_manager(self.identity)
        attribute = self.session.get(Attribute, attribute_id)
        if attribute is None:
            raise NotFoundError("Attribute not found.")
        caps = access.require_view(self.session, self.identity, attribute, access.ATTRIBUTE)
        return {
            "item": {
                "id": attribute.id,
                "name": attribute.name,
                "slug": attribute.slug,
                "description": attribute.description,
                "created_by": attribute.created_by,
                "options": [option.to_dict() for option in attribute.options],
            },
            "permissions": {"can_view": caps.can_view, "can_edit": caps.can_edit},
        }
