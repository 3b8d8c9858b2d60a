"""Subscription request/response schemas (camelCase on the wire)."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateSubscriptionRequest(CamelModel):
    repository_url: str
    emails: list[EmailStr] = Field(min_length=1)

    @field_validator("repository_url", mode="before")
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class SubscriptionResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    repository_url: str
    emails: list[str]
    last_notified_at: datetime | None = None
    created_at: datetime


class OutdatedDependencyResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    version: str
    latest_version: str
