from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import uuid


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# Models
class User(BaseModel):
    id: str = Field(default_factory=new_id)
    username: str
    email: str
    password_hash: str
    created_at: str = Field(default_factory=now_iso)


class Session(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    token_hash: str
    created_at: str = Field(default_factory=now_iso)
    expiration_date: str


class Task(BaseModel):
    """A task embedded in a project's task collection."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    title: str
    description: str
    stage: str
    order: int  # position within its stage
    index: int  # creation sequence number, never reused


class Project(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, alias="_id")
    title: str
    description: str
    tasks: List[Task] = Field(default_factory=list)
    stages: List[str] = Field(default_factory=list)
    version: int = 0
    created_at: str = Field(default_factory=now_iso, alias="createdAt")
    updated_at: str = Field(default_factory=now_iso, alias="updatedAt")

    def public(self, include_tasks: bool = True) -> Dict[str, Any]:
        """JSON shape returned to clients (version is internal)."""
        data = self.model_dump(by_alias=True, exclude={"version"})
        if not include_tasks:
            data.pop("tasks")
            data.pop("stages")
            data.pop("updatedAt")
        return data


class UpdateResult(BaseModel):
    acknowledged: bool = True
    matchedCount: int = 0
    modifiedCount: int = 0
    upsertedId: Optional[str] = None


class DeleteResult(BaseModel):
    acknowledged: bool = True
    deletedCount: int = 0
