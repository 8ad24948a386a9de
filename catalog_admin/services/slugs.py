"""URL-safe, collision-free slugs for catalog records."""
import re
import time
from unidecode import unidecode
from catalog_admin.errors import InvalidSlug

MAX_SUFFIX_ATTEMPTS = 10


def slugify(text):
    """Normalize free text to a lowercase ASCII slug.

    Idempotent: slugify(slugify(x)) == slugify(x).
    """
    value = unidecode(str(text or "")).lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    return value.strip("-")


def build_slug(text):
    """Like slugify, but an empty result is an error."""
    slug = slugify(text)
    if not slug:
        raise InvalidSlug()
    return slug


def unique_slug(session, model, base, exclude_id=None, *criteria):
    """Return `base` or the first free `base-N` for `model.slug`.

    Tries `base`, `base-2` ... `base-10`; after that falls back to a
    time-derived suffix so the loop always terminates. `criteria` narrows
    the uniqueness scope (e.g. options of one attribute).
    """
    base = build_slug(base)
    candidate = base
    for attempt in range(1, MAX_SUFFIX_ATTEMPTS + 1):
        if attempt > 1:
            candidate = f"{base}-{attempt}"
        if not _slug_taken(session, model, candidate, exclude_id, criteria):
            return candidate
    return f"{base}-{int(time.time() * 1000) % 1000000}"


def _slug_taken(session, model, candidate, exclude_id, criteria):
    query = session.query(model.id).filter(model.slug == candidate, *criteria)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return session.query(query.exists()).scalar()
