"""Media library uploads.

Uploaded images are stored unattached (no product); saving a product
with their ids clones them into that product.
"""
import logging
import uuid
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from catalog_admin.errors import DependencyError, translate_db_error
from catalog_admin.models.image import ProductImage
from catalog_admin.services import image_service, storage_service
from catalog_admin.services.access import require_catalog_manager

logger = logging.getLogger(__name__)


def upload_media(session, identity, image_bytes, filename=None, alt_text=None):
    require_catalog_manager(identity)
    data = image_service.validate_image(
        image_bytes, current_app.config["MEDIA_MAX_FILE_SIZE"]
    )
    storage_key = f"media/{identity.user_id}/{uuid.uuid4().hex}.jpg"

    try:
        storage_service.upload(storage_key, data)
    except (BotoCoreError, ClientError) as exc:
        logger.error("Media upload of %s failed: %s", filename or storage_key, exc)
        raise DependencyError("Unable to store uploaded image.") from exc

    image = ProductImage(
        product_id=None,
        url=storage_service.get_public_url(storage_key),
        storage_key=storage_key,
        alt_text=(alt_text or filename or "").strip()[:255] or None,
        created_by=identity.user_id,
    )
    try:
        session.add(image)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        try:
            storage_service.delete(storage_key)
        except (BotoCoreError, ClientError):
            logger.warning("Could not remove orphaned object %s", storage_key)
        raise translate_db_error(
            exc, "Unable to save uploaded image.", table="product_images"
        ) from exc

    logger.info("Uploaded media %s for %s", image.id, identity.user_id)
    return {"item": image.to_dict()}
