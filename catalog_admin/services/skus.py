"""SKU normalization, uniqueness and auto-generation."""
import logging
import re
import secrets
import string
import time
from catalog_admin.models.product import Product

logger = logging.getLogger(__name__)

SUPPLIED_SKU_ATTEMPTS = 5
AUTO_SKU_ATTEMPTS = 6
DEFAULT_PREFIX = "PR"


def normalize_sku(value):
    return re.sub(r"\s+", "-", str(value or "").strip().upper())


def sku_prefix(category=None):
    """Two-letter prefix from a category's slug or name.

    Letters only, padded with "X"; "PR" when there is no category.
    """
    if category is None:
        return DEFAULT_PREFIX
    source = category.slug or category.name or ""
    letters = re.sub(r"[^A-Za-z]", "", source).upper()
    if not letters:
        letters = re.sub(r"[^A-Za-z]", "", category.name or "").upper()
    return letters[:2].ljust(2, "X")


def _sku_taken(session, candidate, exclude_id=None):
    query = session.query(Product.id).filter(Product.sku == candidate)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return session.query(query.exists()).scalar()


def _timestamp_suffix(digits):
    return str(int(time.time() * 1000))[-digits:]


def ensure_unique_sku(session, raw_sku, exclude_id=None):
    """Normalize a user-supplied SKU and make it unique.

    On collision a random 3-digit suffix is tried up to five times, then a
    timestamp-derived suffix.
    """
    base = normalize_sku(raw_sku)
    if not base:
        return None
    candidate = base
    for _ in range(SUPPLIED_SKU_ATTEMPTS):
        if not _sku_taken(session, candidate, exclude_id):
            return candidate
        candidate = f"{base}-{secrets.randbelow(900) + 100}"
    logger.warning("SKU %s still colliding after retries, using timestamp", base)
    return f"{base}-{_timestamp_suffix(4)}"


def generate_sku(session, category=None, exclude_id=None):
    """Auto-generate `PREFIX` + 7 digits + 2 letters, unique in products."""
    prefix = sku_prefix(category)
    for _ in range(AUTO_SKU_ATTEMPTS):
        digits = "".join(secrets.choice(string.digits) for _ in range(7))
        letters = "".join(secrets.choice(string.ascii_uppercase) for _ in range(2))
        candidate = f"{prefix}{digits}{letters}"
        if not _sku_taken(session, candidate, exclude_id):
            return candidate
    logger.warning("Auto SKU collided %d times for prefix %s", AUTO_SKU_ATTEMPTS, prefix)
    return f"{prefix}{_timestamp_suffix(9)}"
