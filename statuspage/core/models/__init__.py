"""SQLAlchemy models for the statuspage service.

Re-exports all models and enums from the domain modules so callers can
use ``from statuspage.core.models import X``.
"""

from statuspage.core.models.auth import User, UserRole
from statuspage.core.models.component import Component, ComponentStatus
from statuspage.core.models.incident import Incident, IncidentImpact, IncidentStatus, IncidentUpdate
from statuspage.core.models.project import DEFAULT_BRANDING, Project
from statuspage.core.models.subscriber import DEFAULT_NOTIFY_ON, NotifyChannel, NotifyEvent, Subscriber
from statuspage.core.models.uptime import UptimeCheck, UptimeLog, UptimeStatus

__all__ = [
    "DEFAULT_BRANDING",
    "DEFAULT_NOTIFY_ON",
    "Component",
    "ComponentStatus",
    "Incident",
    "IncidentImpact",
    "IncidentStatus",
    "IncidentUpdate",
    "NotifyChannel",
    "NotifyEvent",
    "Project",
    "Subscriber",
    "UptimeCheck",
    "UptimeLog",
    "UptimeStatus",
    "User",
    "UserRole",
]
