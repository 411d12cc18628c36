from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from .models import TodoChanges

TITLE_MAX_LENGTH = 120


def _utf16_length(s: str) -> int:
    """Length in UTF-16 code units, as counted by the browser client."""
    return len(s.encode("utf-16-le")) // 2


def _clean_title(value: Any) -> str:
    """
    Internal helper shared by create and update payloads.
    Requires a JSON string, strips whitespace and enforces 1..120 length
    counted in UTF-16 code units.
    """
    if not isinstance(value, str):
        raise PydanticCustomError("title_type", "Title must be a string.")
    s = value.strip()
    if not s:
        raise PydanticCustomError("title_empty", "Title cannot be empty")
    if _utf16_length(s) > TITLE_MAX_LENGTH:
        raise PydanticCustomError("title_too_long", "Title is too long")
    return s


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy milk"}})

    title: str = Field(
        ...,
        description="Short title for the todo item",
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
    )

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        return _clean_title(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    Both fields are optional, but at least one must be provided.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "Buy oat milk", "completed": True}}
    )

    title: Optional[str] = Field(
        default=None,
        description="Short title for the todo item",
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
    )
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        # Only runs when the field is present; an explicit null is rejected
        return _clean_title(v)

    @field_validator("completed", mode="before")
    @classmethod
    def validate_completed(cls, v: Any) -> bool:
        # Only real JSON booleans; no null and no "yes"/1 coercion
        if isinstance(v, bool):
            return v
        raise PydanticCustomError("completed_type", "Completed must be a boolean.")

    @model_validator(mode="after")
    def require_one_field(self) -> "TodoUpdate":
        if self.title is None and self.completed is None:
            raise PydanticCustomError("empty_update", "Provide at least one field to update.")
        return self

    def to_changes(self) -> TodoChanges:
        return TodoChanges(title=self.title, completed=self.completed)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy milk",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123+00:00",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    completed: bool = Field(..., description="Completion status flag")
    created_at: str = Field(
        ...,
        alias="createdAt",
        description="Creation timestamp as an ISO-8601 string in UTC",
    )


class TodoEnvelope(BaseModel):
    """Envelope for single-item responses."""

    data: TodoOut


class TodoListEnvelope(BaseModel):
    """Envelope for the list response; newest todo first."""

    data: List[TodoOut] = Field(..., description="Every todo item, newest first")


class DeleteResult(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str = Field(..., description="Human readable error message")
