"""Tests for the project ownership guard."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException

from statuspage.core.models import Project, User, UserRole
from statuspage.core.permissions import can_manage_project, require_project_owner


def _user(role: UserRole = UserRole.OWNER) -> MagicMock:
    user = MagicMock(spec=User)
    user.id = uuid.uuid4()
    user.role = role
    return user


def _session_returning(project: Project | None) -> AsyncMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = project
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    return session


class TestCanManageProject:
    def test_owner(self) -> None:
        user = _user()
        assert can_manage_project(user, Project(user_id=user.id))

    def test_stranger(self) -> None:
        assert not can_manage_project(_user(), Project(user_id=uuid.uuid4()))

    def test_platform_admin_bypass(self) -> None:
        assert can_manage_project(_user(UserRole.PLATFORM_ADMIN), Project(user_id=uuid.uuid4()))


class TestRequireProjectOwner:
    async def test_returns_project_for_owner(self) -> None:
        user = _user()
        project = Project(id=uuid.uuid4(), user_id=user.id)

        result = await require_project_owner(project.id, user, _session_returning(project))
        assert result is project

    async def test_missing_project_is_404(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await require_project_owner(uuid.uuid4(), _user(), _session_returning(None))
        assert exc_info.value.status_code == 404

    async def test_non_owner_is_403(self) -> None:
        project = Project(id=uuid.uuid4(), user_id=uuid.uuid4())
        with pytest.raises(HTTPException) as exc_info:
            await require_project_owner(project.id, _user(), _session_returning(project))
        assert exc_info.value.status_code == 403
