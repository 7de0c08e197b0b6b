"""API request/response schemas."""
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

TENANT_ID_RE = re.compile(r"[a-z0-9_-]+")
INT_STRING_RE = re.compile(r"-?\d+")

QUERY_MESSAGE = "Query is required and must be a non-empty string"
SLUG_MESSAGE = "Slug is required and must be a non-empty string"
SLUG_PATTERN_MESSAGE = (
    "Slug must contain only lowercase letters, numbers, hyphens and underscores"
)
LIMIT_MESSAGE = "Limit must be an integer between 1 and 100"
OFFSET_MESSAGE = "Offset must be a non-negative integer"


class SearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    query: str
    tenant_id: str = Field(..., alias="slug")
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError(QUERY_MESSAGE)
        return v

    @field_validator("tenant_id")
    @classmethod
    def tenant_id_format(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError(SLUG_MESSAGE)
        if not TENANT_ID_RE.fullmatch(v):
            raise ValueError(SLUG_PATTERN_MESSAGE)
        return v

    @field_validator("limit", "offset", mode="before")
    @classmethod
    def integer_only(cls, v: Any, info: ValidationInfo) -> Any:
        # JSON true and "5.0" are not integers
        message = LIMIT_MESSAGE if info.field_name == "limit" else OFFSET_MESSAGE
        if isinstance(v, bool):
            raise ValueError(message)
        if isinstance(v, str):
            v = v.strip()
            if not INT_STRING_RE.fullmatch(v):
                raise ValueError(message)
        return v


class SearchResultData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source: Literal["local", "global"]
    index_name: str
    hits: list[dict[str, Any]]
    total: int
    query: str
    limit: int
    offset: int
    processing_time_ms: int


class SearchResponse(BaseModel):
    success: bool = True
    data: SearchResultData


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    success: bool = False
    errors: list[FieldError]


class ErrorDetail(BaseModel):
    message: str
    path: str | None = None
    stack: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
