"""AI-generated content models."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContentType(str, Enum):
    """Kind of generated content attached to an event."""

    EVENT_PLAN = "event_plan"
    EMAIL = "email"
    SOCIAL_MEDIA = "social_media"
    CUSTOM = "custom"


class GeneratedContent(BaseModel):
    """Content generated for an event from a prompt."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    event_id: str
    user_id: str | None = None
    content_type: str = ContentType.EVENT_PLAN.value
    prompt: str = ""
    generated_content: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class ContentCreate(BaseModel):
    """Fields supplied when storing generated content."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content_type: ContentType = ContentType.EVENT_PLAN
    prompt: str = ""
    generated_content: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ContentUpdate(BaseModel):
    """Partial update of generated content."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content_type: ContentType | None = None
    prompt: str | None = None
    generated_content: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None

    def to_patch(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, mode="json")
