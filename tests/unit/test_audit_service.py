"""Unit tests for AuditService."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.teamledger.models import AuditAction
from src.teamledger.services.audit_service import AuditService

pytestmark = pytest.mark.unit


@pytest.fixture
def mock_audit_repo() -> MagicMock:
    """Create mock audit repository."""
    repo = MagicMock()
    repo.add = MagicMock()
    repo.list_by_organization = AsyncMock(return_value=([], None, False))
    return repo


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create mock database session."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def audit_service(mock_audit_repo, mock_session) -> AuditService:
    return AuditService(mock_audit_repo, mock_session)


class TestLogAction:
    """Tests for log_action method."""

    async def test_log_action_creates_audit_log(self, audit_service, mock_audit_repo, mock_session):
        """log_action should add an AuditLog entry and commit."""
        org_id = uuid4()

        result = await audit_service.log_action(
            organization_id=org_id,
            action=AuditAction.ORG_UPDATE,
            entity_type="organization",
            entity_id=org_id,
        )

        assert result is not None
        assert result.organization_id == org_id
        assert result.action == "org.update"
        mock_audit_repo.add.assert_called_once()
        mock_session.commit.assert_called_once()

    async def test_log_action_records_changes(self, audit_service, mock_audit_repo):
        """previous_data and new_data are stored as given."""
        await audit_service.log_action(
            organization_id=uuid4(),
            action=AuditAction.MEMBER_ROLE_CHANGE,
            entity_type="membership",
            user_id=uuid4(),
            previous_data={"role": "member"},
            new_data={"role": "manager"},
        )

        entry = mock_audit_repo.add.call_args[0][0]
        assert entry.previous_data == {"role": "member"}
        assert entry.new_data == {"role": "manager"}

    async def test_log_action_failure_returns_none(self, audit_service, mock_session):
        """A failing commit is logged and rolled back, never raised."""
        mock_session.commit.side_effect = RuntimeError("database gone")

        result = await audit_service.log_action(
            organization_id=uuid4(),
            action=AuditAction.ORG_DELETE,
            entity_type="organization",
        )

        assert result is None
        mock_session.rollback.assert_called_once()

    async def test_log_action_survives_failing_rollback(self, audit_service, mock_session):
        mock_session.commit.side_effect = RuntimeError("database gone")
        mock_session.rollback.side_effect = RuntimeError("still gone")

        result = await audit_service.log_action(
            organization_id=uuid4(),
            action=AuditAction.ORG_DELETE,
            entity_type="organization",
        )

        assert result is None


class TestListLogs:
    async def test_delegates_to_repository(self, audit_service, mock_audit_repo):
        org_id = uuid4()

        await audit_service.list_logs(org_id, cursor="abc", limit=10, action="org.update")

        mock_audit_repo.list_by_organization.assert_awaited_once_with(
            organization_id=org_id, cursor="abc", limit=10, action="org.update"
        )
