"""
Pydantic schemas for the Blog API.

Defines the typed request models with validation. Values are trimmed before
length checks; numbers and booleans are accepted and stored as text.
"""
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from apps.shared.errors import ApiError, ErrorKind

FIELD_LABELS = {
    "title": "Title",
    "content": "Content",
    "author": "Author name",
}

POST_FIELDS = ("title", "content", "author")


class PostInput(BaseModel):
    """Shared configuration and error reporting for post request bodies."""
    model_config = ConfigDict(str_strip_whitespace=True, coerce_numbers_to_str=True)

    @field_validator(*POST_FIELDS, mode="before", check_fields=False)
    @classmethod
    def booleans_as_text(cls, value):
        if isinstance(value, bool):
            return "true" if value else "false"
        return value

    @classmethod
    def from_payload(cls, payload: dict[str, Any]):
        """
        Validate a raw request body.

        Raises:
            ApiError: VALIDATION with one message per violated field
        """
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise ApiError(
                ErrorKind.VALIDATION,
                "Validation failed",
                errors=validation_messages(exc, payload),
            ) from exc


class PostCreate(PostInput):
    """Schema for creating a new post. All fields required."""
    title: str = Field(..., min_length=3, max_length=100)
    content: str = Field(..., min_length=10)
    author: str = Field(..., min_length=2, max_length=50)


class PostUpdate(PostInput):
    """
    Schema for updating a post. Fields left out are not touched; an explicit
    null is validated like any other value and rejected.
    """
    title: str = Field(None, min_length=3, max_length=100)
    content: str = Field(None, min_length=10)
    author: str = Field(None, min_length=2, max_length=50)


def validation_messages(exc: ValidationError, payload: dict[str, Any]) -> list[str]:
    """Turn pydantic errors into one human readable message per field."""
    messages = []
    seen = set()
    for error in exc.errors():
        field = error["loc"][0] if error["loc"] else None
        if field in seen:
            continue
        seen.add(field)

        label = FIELD_LABELS.get(field, str(field))
        value = payload.get(field)
        if error["type"] == "missing" or value is None or (isinstance(value, str) and not value.strip()):
            messages.append(f"{label} is required")
        elif error["type"] == "string_too_short":
            messages.append(f"{label} must be at least {error['ctx']['min_length']} characters long")
        elif error["type"] == "string_too_long":
            messages.append(f"{label} cannot exceed {error['ctx']['max_length']} characters")
        else:
            messages.append(f"{label} must be a string")
    return messages
