from pydantic import ValidationError as PydanticValidationError
from catalog_admin.errors import ValidationError


def parse_payload(model, data, message="Invalid payload."):
    """Validate `data` against a pydantic model.

    Failures become a catalog ValidationError carrying the field map.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError(message, form_errors=["Expected a JSON object."])
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc, message) from exc
