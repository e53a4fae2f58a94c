"""
Input validation schemas using Marshmallow for API endpoints.
"""
from typing import Any, Dict

from marshmallow import EXCLUDE, Schema, fields, validate, validates, validates_schema, ValidationError

from common.errors import ContextFlowError
from session.context import QUICK_ACTIONS

DATA_URL_MESSAGE = "imageDataUrl must be a valid base64 data URL (e.g. data:image/png;base64,...)"


class RequestValidationError(ContextFlowError):
    status_code = 400


class _RequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE


def _required_text(name: str) -> fields.Str:
    message = f"{name} is required"
    return fields.Str(
        required=True,
        validate=validate.Length(min=1, error=message),
        error_messages={'required': message, 'invalid': message, 'null': message}
    )


class ExplainRequestSchema(_RequestSchema):
    """Validation schema for screenshot explain requests."""
    imageDataUrl = _required_text("imageDataUrl")
    instruction = fields.Raw(required=False, allow_none=True, load_default="")

    @validates("imageDataUrl")
    def validate_data_url(self, value, **kwargs):
        if not value.startswith("data:image/"):
            raise ValidationError(DATA_URL_MESSAGE)


class ChatRequestSchema(_RequestSchema):
    """Validation schema for follow-up chat requests."""
    context = _required_text("context")
    question = _required_text("question")
    # Anything that is not a list is treated as no history
    history = fields.Raw(required=False, allow_none=True, load_default=list)


class PointSchema(_RequestSchema):
    x = fields.Float(required=True)
    y = fields.Float(required=True)


class ScrollSchema(_RequestSchema):
    left = fields.Float(load_default=0.0, validate=validate.Range(min=0))
    top = fields.Float(load_default=0.0, validate=validate.Range(min=0))


class ViewportSchema(_RequestSchema):
    width = fields.Float(required=True, validate=validate.Range(min=1))
    height = fields.Float(required=True, validate=validate.Range(min=1))


class BoxSchema(_RequestSchema):
    """Top-left of the scroll container in client coordinates."""
    left = fields.Float(required=True)
    top = fields.Float(required=True)


class CaptureRequestSchema(_RequestSchema):
    """Validation schema for drag-selection captures."""
    # "client": start/end are pointer positions, converted with `box` and `scroll`
    coordinates = fields.Str(load_default="container", validate=validate.OneOf(["container", "client"]))
    start = fields.Nested(PointSchema, required=True, error_messages={'required': 'start is required'})
    end = fields.Nested(PointSchema, required=True, error_messages={'required': 'end is required'})
    scroll = fields.Nested(ScrollSchema, load_default=lambda: {"left": 0.0, "top": 0.0})
    viewport = fields.Nested(ViewportSchema, required=True, error_messages={'required': 'viewport is required'})
    dpr = fields.Float(load_default=1.0, validate=validate.Range(min=0.1, max=8))
    analyze = fields.Bool(load_default=False)
    instruction = fields.Str(load_default="", allow_none=True, validate=validate.Length(max=2000))
    box = fields.Nested(BoxSchema, load_default=None)

    @validates_schema
    def validate_box(self, data, **kwargs):
        if data.get("coordinates") == "client" and data.get("box") is None:
            raise ValidationError("box is required for client coordinates", field_name="box")


class AddPerspectiveSchema(_RequestSchema):
    title = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=100))
    instruction = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=2000))


class ColumnInputSchema(_RequestSchema):
    value = fields.Str(load_default="", allow_none=True, validate=validate.Length(max=2000))


class AskRequestSchema(_RequestSchema):
    """Either free text, a quick action, or nothing (use the column draft)."""
    text = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=2000))
    action = fields.Str(
        load_default=None,
        allow_none=True,
        validate=validate.OneOf(list(QUICK_ACTIONS)),
        error_messages={'invalid': 'Action must be a string'}
    )


def first_error(messages: Any) -> str:
    """First human-readable message from a (nested) marshmallow error dict."""
    if isinstance(messages, dict):
        for value in messages.values():
            return first_error(value)
    if isinstance(messages, list) and messages:
        return first_error(messages[0])
    return str(messages)


def load_request(schema: Schema, payload: Any) -> Dict[str, Any]:
    """Validate a JSON body; raises RequestValidationError with the first problem found."""
    if not isinstance(payload, dict):
        payload = {}
    try:
        return schema.load(payload)
    except ValidationError as err:
        # Report fields in declaration order
        for name in schema.fields:
            if name in err.messages:
                raise RequestValidationError(first_error(err.messages[name]))
        raise RequestValidationError(first_error(err.messages))
