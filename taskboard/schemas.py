"""
taskboard/schemas.py

Pydantic schemas for request bodies.
Services reuse the same schemas so direct calls and HTTP calls validate alike.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskboard.errors import ValidationError


# ========================================================================
# AUTH SCHEMAS
# ========================================================================

class SignupRequest(BaseModel):
    """Request schema for /signup."""
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., alias="confirmPassword")

    @field_validator("username", "email", mode="before")
    @classmethod
    def trim(cls, v):
        """Trim whitespace from identifiers."""
        if isinstance(v, str):
            return v.strip()
        return v


class LoginRequest(BaseModel):
    email: str
    password: str


# ========================================================================
# PROJECT / TASK SCHEMAS
# ========================================================================

class ItemInput(BaseModel):
    """Title/description pair shared by projects and tasks."""
    title: str = Field(..., min_length=3, max_length=30)
    description: str = Field(..., min_length=1)


class BoardStagesRequest(BaseModel):
    stages: List[str] = Field(..., min_length=1)


class TaskRef(BaseModel):
    """A task reference inside a reorder payload. Other card fields are ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id", min_length=1)


class BoardColumn(BaseModel):
    """One column of a reorder payload: {name, items: [{_id}, ...]}."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    items: List[TaskRef] = Field(default_factory=list)


def describe_errors(exc) -> str:
    """Collapse pydantic (or FastAPI request) errors into one readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def validate_item(title: Any, description: Any) -> ItemInput:
    """
    Validate a title/description pair.

    Raises:
        ValidationError: title not 3-30 chars or description missing/empty
    """
    try:
        return ItemInput(title=title, description=description)
    except pydantic.ValidationError as e:
        raise ValidationError(describe_errors(e))


def parse_column(key: str, value: Any) -> BoardColumn:
    """
    Normalize one entry of a reorder payload.

    Accepts either a bare list of task references (the key is the stage name)
    or a {name, items} object (name wins over the key when present).
    """
    if isinstance(value, list):
        value = {"name": key, "items": value}
    if isinstance(value, dict) and isinstance(value.get("items"), list):
        value = {**value, "items": [_coerce_ref(item) for item in value["items"]]}
    try:
        column = BoardColumn.model_validate(value)
    except pydantic.ValidationError as e:
        raise ValidationError(f"column {key!r}: {describe_errors(e)}")
    if not column.name:
        column.name = key
    return column


def _coerce_ref(item: Any) -> Any:
    # Bare id strings are accepted alongside card objects
    if isinstance(item, str):
        return {"_id": item}
    if isinstance(item, dict) and "_id" not in item and "id" in item:
        return {**item, "_id": item["id"]}
    return item


def parse_board_state(payload: Dict[str, Any]) -> List[BoardColumn]:
    if not isinstance(payload, dict):
        raise ValidationError("board state must be an object keyed by column")
    return [parse_column(str(key), value) for key, value in payload.items()]
