from pydantic import BaseModel, Field
from typing import Any


# Raw records exactly as fetched from the document store; timestamps may be
# ISO strings, {"seconds", "nanoseconds"} objects or epoch milliseconds.
class SnapshotPayload(BaseModel):
    users: list[dict[str, Any]] = Field(default_factory=list)
    classes: list[dict[str, Any]] = Field(default_factory=list)
    tasks: list[dict[str, Any]] = Field(default_factory=list)
    submissions: list[dict[str, Any]] = Field(default_factory=list)
