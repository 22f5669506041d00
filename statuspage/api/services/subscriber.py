"""Subscription management for public status pages.

Subscriptions are created unverified with a one-time token. Delivering
the token (and any later notification) happens outside this service.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.core.errors import ConflictError, NotFoundError, PayloadValidationError
from statuspage.core.models import DEFAULT_NOTIFY_ON, NotifyChannel, Subscriber

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _check_channels(notify_by: Iterable[str], phone: str | None) -> None:
    if NotifyChannel.SMS in set(notify_by) and not phone:
        raise PayloadValidationError("Phone number is required for SMS notifications", field="phone")


class SubscriberService:
    """Create, verify, update and remove subscriptions. The caller commits."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_subscriber(self, project_id: uuid.UUID, subscriber_id: uuid.UUID) -> Subscriber:
        result = await self._session.execute(
            select(Subscriber).where(Subscriber.id == subscriber_id, Subscriber.project_id == project_id)
        )
        subscriber = result.scalar_one_or_none()
        if subscriber is None:
            raise NotFoundError(f"Subscriber {subscriber_id} not found")
        return subscriber

    async def list_subscribers(
        self,
        project_id: uuid.UUID,
        page: int = 1,
        limit: int = 50,
        verified: bool | None = None,
    ) -> tuple[list[Subscriber], int]:
        conditions = [Subscriber.project_id == project_id]
        if verified is not None:
            conditions.append(Subscriber.verified.is_(verified))

        result = await self._session.execute(
            select(Subscriber)
            .where(*conditions)
            .order_by(Subscriber.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        subscribers = list(result.scalars().all())
        count = await self._session.execute(select(func.count(Subscriber.id)).where(*conditions))
        return subscribers, count.scalar() or 0

    async def create_subscription(self, project_id: uuid.UUID, data: dict[str, Any]) -> tuple[Subscriber, bool]:
        """Subscribe an email address to the project.

        Returns:
            The subscriber and whether it was newly created. Re-subscribing
            an address that is still unverified returns the pending record.

        Raises:
            ConflictError: If the address is already verified for the project.
            PayloadValidationError: If SMS is requested without a phone number.
        """
        email = normalize_email(data["email"])
        notify_by = [str(channel) for channel in data["notify_by"]]
        notify_on = [str(event) for event in (data.get("notify_on") or DEFAULT_NOTIFY_ON)]
        _check_channels(notify_by, data.get("phone"))

        result = await self._session.execute(
            select(Subscriber).where(Subscriber.project_id == project_id, Subscriber.email == email)
        )
        existing = result.scalar_one_or_none()
        if existing is not None:
            if existing.verified:
                raise ConflictError("Email is already subscribed to this status page")
            logger.info("Subscriber %s re-subscribed while verification is pending", existing.id)
            return existing, False

        now = datetime.now(UTC)
        subscriber = Subscriber(
            id=uuid.uuid4(),
            project_id=project_id,
            email=email,
            phone=data.get("phone"),
            notify_by=notify_by,
            notify_on=notify_on,
            verified=False,
            verification_token=secrets.token_hex(32),
            created_at=now,
            updated_at=now,
        )
        self._session.add(subscriber)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError("Email is already subscribed to this status page") from exc
        logger.info("Subscriber %s created for project %s (notify_by=%s)", subscriber.id, project_id, notify_by)
        return subscriber, True

    async def verify_subscription(self, project_id: uuid.UUID, token: str) -> Subscriber:
        result = await self._session.execute(
            select(Subscriber).where(
                Subscriber.project_id == project_id,
                Subscriber.verification_token == token,
                Subscriber.verified.is_(False),
            )
        )
        subscriber = result.scalar_one_or_none()
        if subscriber is None:
            raise NotFoundError("Invalid or expired verification token")

        subscriber.verified = True
        subscriber.verification_token = None
        subscriber.updated_at = datetime.now(UTC)
        await self._session.flush()
        logger.info("Subscriber %s verified for project %s", subscriber.id, project_id)
        return subscriber

    async def update_subscriber(self, subscriber: Subscriber, changes: dict[str, Any]) -> Subscriber:
        phone = changes["phone"] if "phone" in changes else subscriber.phone
        notify_by = [str(c) for c in changes["notify_by"]] if changes.get("notify_by") else subscriber.notify_by
        _check_channels(notify_by, phone)

        subscriber.phone = phone
        subscriber.notify_by = notify_by
        if changes.get("notify_on") is not None:
            subscriber.notify_on = [str(event) for event in changes["notify_on"]]
        subscriber.updated_at = datetime.now(UTC)
        await self._session.flush()
        logger.info("Subscriber %s updated (%s)", subscriber.id, ", ".join(sorted(changes)))
        return subscriber

    async def unsubscribe(self, project_id: uuid.UUID, email: str) -> None:
        result = await self._session.execute(
            select(Subscriber).where(
                Subscriber.project_id == project_id,
                Subscriber.email == normalize_email(email),
            )
        )
        subscriber = result.scalar_one_or_none()
        if subscriber is None:
            raise NotFoundError("Subscription not found")
        await self.delete_subscriber(subscriber)

    async def delete_subscriber(self, subscriber: Subscriber) -> None:
        await self._session.delete(subscriber)
        await self._session.flush()
        logger.info("Subscriber %s removed from project %s", subscriber.id, subscriber.project_id)

    async def get_stats(self, project_id: uuid.UUID) -> dict[str, int]:
        result = await self._session.execute(
            select(
                func.count(Subscriber.id).label("total"),
                func.count(Subscriber.id).filter(Subscriber.verified.is_(True)).label("verified"),
                func.count(Subscriber.id).filter(Subscriber.notify_by.contains(["email"])).label("email"),
                func.count(Subscriber.id).filter(Subscriber.notify_by.contains(["sms"])).label("sms"),
            ).where(Subscriber.project_id == project_id)
        )
        row = result.one()
        total = int(row.total or 0)
        verified = int(row.verified or 0)
        return {
            "total_subscribers": total,
            "verified_subscribers": verified,
            "unverified_subscribers": total - verified,
            "email_subscribers": int(row.email or 0),
            "sms_subscribers": int(row.sms or 0),
        }
