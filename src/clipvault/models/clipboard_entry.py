from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class ContentType(str, Enum):
    JSON = "json"
    URL = "url"
    MULTILINE = "multiline"
    TEXT = "text"


class ClipboardEntry(BaseModel):
    """A persisted clipboard history row."""
    id: int
    content: str
    timestamp: str  # RFC3339
    content_type: ContentType = ContentType.TEXT

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class DeleteResult(BaseModel):
    success: bool
    message: str = Field(default="")
