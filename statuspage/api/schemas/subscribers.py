"""Pydantic schemas for status page subscriptions."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from statuspage.api.schemas.common import Pagination, reject_null
from statuspage.core.models import DEFAULT_NOTIFY_ON, NotifyChannel, NotifyEvent

# E.164: leading +, no leading zero, at most 15 digits.
PHONE_PATTERN = r"^\+[1-9]\d{1,14}$"


def _dedupe(values: list) -> list:
    return list(dict.fromkeys(values))


class SubscriptionCreate(BaseModel):
    """Public subscribe payload. SMS delivery needs a phone number."""

    email: EmailStr
    phone: str | None = Field(None, pattern=PHONE_PATTERN)
    notify_by: list[NotifyChannel] = Field(..., min_length=1)
    notify_on: list[NotifyEvent] = Field(default_factory=lambda: list(DEFAULT_NOTIFY_ON))

    @field_validator("notify_by", "notify_on")
    @classmethod
    def dedupe(cls, v: list) -> list:
        return _dedupe(v)


class SubscriptionCancel(BaseModel):
    email: EmailStr


class SubscriptionVerify(BaseModel):
    token: str = Field(..., min_length=1, max_length=64)


class SubscriberPatch(BaseModel):
    """Preference changes. ``phone`` may be cleared, the lists may not."""

    phone: str | None = Field(None, pattern=PHONE_PATTERN)
    notify_by: list[NotifyChannel] | None = Field(None, min_length=1)
    notify_on: list[NotifyEvent] | None = None

    @field_validator("notify_by", "notify_on")
    @classmethod
    def check_lists(cls, v: list | None) -> list | None:
        return _dedupe(reject_null(v))


class SubscriberRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    project_id: UUID
    email: str
    phone: str | None = None
    notify_by: list[NotifyChannel]
    notify_on: list[NotifyEvent]
    verified: bool
    created_at: datetime
    updated_at: datetime


class SubscriberList(BaseModel):
    subscribers: list[SubscriberRead]
    pagination: Pagination


class SubscriberStats(BaseModel):
    total_subscribers: int
    verified_subscribers: int
    unverified_subscribers: int
    email_subscribers: int
    sms_subscribers: int


class SubscriptionReceipt(BaseModel):
    """What the public endpoints echo back. Never carries the token."""

    email: str
    verified: bool
