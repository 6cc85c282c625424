"""
Entity schemas for the Scout athlete/coach network

Each Pydantic model represents one in-memory collection record. Records are
immutable by convention: callers derive changed copies with ``model_copy``
and hand them back to the stores instead of mutating shared instances.
Two records of the same type are equal when their ids match.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Entity(BaseModel):
    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: str = Field(..., description="Stable identifier, unique within its collection")

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash((type(self).__name__, self.id))


class Video(_Entity):
    title: str = Field(..., description="Highlight title")
    thumbnail_image: Optional[bytes] = None
    url: Optional[str] = Field(None, description="Source location of the clip")
    upload_date: datetime = Field(default_factory=utcnow)


class User(_Entity):
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Unique email")
    profile_image: Optional[bytes] = None
    background_image: Optional[bytes] = None
    background_info: str = Field("", description="Free text bio")
    teams: List[str] = Field(default_factory=list, description="Team names, in display order")
    videos: List[Video] = Field(default_factory=list)


class Message(_Entity):
    sender_id: str = Field(..., description="User ID of sender")
    content: str = Field(..., description="Text content")
    timestamp: datetime = Field(default_factory=utcnow)


class Conversation(_Entity):
    # Participants are stored by id and resolved against the user directory
    participant_ids: List[str] = Field(..., min_length=1, description="User IDs")
    messages: List[Message] = Field(default_factory=list, description="Insertion order")

    @property
    def last_message(self) -> Optional[Message]:
        if not self.messages:
            return None
        return max(self.messages, key=lambda m: m.timestamp)

    @property
    def last_activity_timestamp(self) -> datetime:
        last = self.last_message
        return last.timestamp if last else EPOCH
