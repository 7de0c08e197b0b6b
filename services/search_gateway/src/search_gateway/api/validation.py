"""Search body parsing (JSON or form) and one {field, message} entry per invalid field."""
from collections.abc import Sequence
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from search_gateway.api.schemas import (
    LIMIT_MESSAGE,
    OFFSET_MESSAGE,
    QUERY_MESSAGE,
    SLUG_MESSAGE,
    FieldError,
    SearchRequest,
)

FIELD_MESSAGES = {
    "query": QUERY_MESSAGE,
    "slug": SLUG_MESSAGE,
    "limit": LIMIT_MESSAGE,
    "offset": OFFSET_MESSAGE,
}


def _field_name(error: dict[str, Any]) -> str:
    if error.get("type") == "json_invalid":
        return "body"
    parts = [p for p in error.get("loc", ()) if p != "body"]
    # a non-string loc is a character offset into the body, not a field
    if not parts or not isinstance(parts[0], str):
        return "body"
    return parts[0]


def _message(field: str, error: dict[str, Any]) -> str:
    if error.get("type") == "value_error":
        ctx_error = (error.get("ctx") or {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)
    if field in FIELD_MESSAGES:
        return FIELD_MESSAGES[field]
    if field == "body":
        if error.get("type") == "json_invalid":
            return "Request body must be valid JSON"
        return "Request body must be a JSON object"
    return error.get("msg", "Invalid value")


def format_validation_errors(errors: Sequence[dict[str, Any]]) -> list[FieldError]:
    out: list[FieldError] = []
    seen: set[str] = set()
    for error in errors:
        field = _field_name(error)
        if field in seen:
            continue
        seen.add(field)
        out.append(FieldError(field=field, message=_message(field, error)))
    return out


FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_search_request(request: Request) -> SearchRequest:
    """Validate a JSON or form-encoded search body into a SearchRequest."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        raw: Any = {key: value for key, value in form.items() if isinstance(value, str)}
    else:
        try:
            raw = await request.json()
        except ValueError as e:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error"}]
            ) from e
    try:
        return SearchRequest.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()]
        ) from e
