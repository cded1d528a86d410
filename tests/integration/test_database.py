"""
Integration tests for the persistence glue.

Tests cover:
- Enum columns store member values
- UTC datetimes survive a round trip through SQLite
- The per-tenant reference number constraint
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from maintrack_backend.database import build_connect_args
from maintrack_backend.modules.maintenance_requests import services
from maintrack_backend.modules.maintenance_requests.crud import maintenance_request_crud
from maintrack_backend.modules.maintenance_requests.models import MaintenanceRequest
from tests.factories import build_request_create


class TestColumnTypes:
    @pytest.mark.asyncio
    async def test_enum_values_are_stored(self, db_session, tenant_id, actor_id, clock):
        request = await services.create_request(
            db_session, tenant_id, build_request_create(category="pest_control"), clock=clock
        )
        await services.start_work(db_session, tenant_id, request.id, actor_id, clock=clock)

        row = (
            await db_session.execute(
                text("SELECT status, category FROM maintenance_requests WHERE id = :id"),
                {"id": str(request.id)},
            )
        ).one()

        assert row.status == "in_progress"
        assert row.category == "pest_control"

    @pytest.mark.asyncio
    async def test_datetimes_come_back_as_utc(self, db_session, tenant_id, clock):
        plus_five = timezone(timedelta(hours=5))
        due = datetime(2024, 2, 1, 17, 0, tzinfo=plus_five)
        request = await services.create_request(
            db_session, tenant_id, build_request_create(due_date=due), clock=clock
        )
        db_session.expunge_all()

        loaded = await services.get_request(db_session, tenant_id, request.id)

        assert loaded.due_date.tzinfo is not None
        assert loaded.due_date == datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)
        assert loaded.created_at == clock.now()


class TestReferenceConstraint:
    @pytest.mark.asyncio
    async def test_duplicate_reference_in_tenant_is_rejected(
        self, db_session, tenant_id, clock
    ):
        existing = await services.create_request(
            db_session, tenant_id, build_request_create(), clock=clock
        )
        duplicate = MaintenanceRequest(
            tenant_organization_id=tenant_id,
            reference_number=existing.reference_number,
            title="Duplicate",
            property_id=uuid4(),
            requested_by_id=uuid4(),
            status_history=[],
            assignment_history=[],
            tags=[],
        )

        with pytest.raises(IntegrityError):
            await maintenance_request_crud.create(db_session, duplicate)


class TestConnectArgs:
    def test_mysql_gets_ssl_options(self):
        args = build_connect_args("mysql+asyncmy://u:p@db:3306/maintrack")
        assert set(args["ssl"]) == {
            "ssl_check_hostname",
            "ssl_verify_cert",
            "ssl_verify_identity",
        }

    def test_sqlite_needs_none(self):
        assert build_connect_args("sqlite+aiosqlite:///:memory:") == {}
