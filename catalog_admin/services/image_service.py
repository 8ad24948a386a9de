import io
from PIL import Image as PILImage, UnidentifiedImageError
from catalog_admin.errors import ValidationError

ALLOWED_FORMATS = {"JPEG", "PNG", "WEBP"}


def validate_image(image_bytes, max_size):
    """Check an upload is a real image and re-encode it as JPEG.

    Re-encoding strips EXIF data. Raises ValidationError on field `file`.
    """
    if not image_bytes:
        raise ValidationError.for_field("file", "No file uploaded.")
    if len(image_bytes) > max_size:
        raise ValidationError.for_field(
            "file", f"Image too large: {len(image_bytes)} bytes (max {max_size})."
        )

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValidationError.for_field("file", "Invalid image file.") from exc
    if img.format not in ALLOWED_FORMATS:
        raise ValidationError.for_field("file", "Only JPEG, PNG and WEBP images are accepted.")

    # verify() leaves the image unusable, reopen before re-encoding
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()
