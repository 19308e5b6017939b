# packages/schemas/schemas/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any
from datetime import datetime, timezone


# ----- Task -----
class Task(BaseModel):
    """A task as returned over the wire (camelCase timestamps)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    text: str
    completed: bool = False
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Task":
        # pymongo hands back naive datetimes; they are always UTC
        def _utc(dt: datetime) -> datetime:
            return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)

        return cls(
            id=str(doc["_id"]),
            text=doc["text"],
            completed=bool(doc.get("completed", False)),
            created_at=_utc(doc["createdAt"]),
            updated_at=_utc(doc["updatedAt"]),
        )


class TaskCreate(BaseModel):
    text: Optional[str] = None


class TaskUpdate(BaseModel):
    """Partial update; fields left out (or null) are not touched."""
    text: Optional[str] = None
    completed: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ----- Errors -----
class ErrorMessage(BaseModel):
    message: str
