"""Brand setting that holds vendor publish requests for admin review."""
from dataclasses import dataclass
from typing import Optional
from catalog_admin.services.access import find_owned_brands


@dataclass(frozen=True)
class ReviewGate:
    enabled: bool
    brand_id: Optional[int] = None
    brand_name: Optional[str] = None


DISABLED = ReviewGate(enabled=False)


def resolve_review_gate(session, vendor_id, brand_slug=None):
    """Enabled when any brand the vendor owns requires review to publish."""
    if not vendor_id:
        return DISABLED
    for brand in find_owned_brands(session, vendor_id, brand_slug):
        if brand.require_product_review_for_publish:
            return ReviewGate(True, brand.id, brand.name)
    return DISABLED


def apply_review_gate(gate, identity, requested_status):
    """Final status for a save: vendors behind the gate land in draft."""
    if (
        gate.enabled
        and not identity.is_admin
        and requested_status == "publish"
    ):
        return "draft"
    return requested_status
