from unittest.mock import Mock

from sqlalchemy import select

from rbac_admin.audit import AuditSink, RequestContext
from rbac_admin.models.log import ActivityLog
from rbac_admin.rbac.service import RbacService


class TestAuditSink:
    def test_record_persists_entry(self, session_factory, ctx):
        sink = AuditSink(session_factory)

        sink.record(
            ctx,
            log_name="Permission",
            description="Created permissions.",
            event="Permissions Created",
            properties={"count": 2},
        )

        with session_factory() as session:
            entry = session.scalars(select(ActivityLog)).one()

        assert entry.log_name == "Permission"
        assert entry.event == "Permissions Created"
        assert entry.causer_id == ctx.actor
        assert entry.properties == {"ip_address": "10.0.0.7", "count": 2}
        assert entry.created_at is not None

    def test_anonymous_context(self, session_factory):
        sink = AuditSink(session_factory)

        sink.record(
            RequestContext(actor=None, ip_address=None),
            log_name="Role",
            description="Deleted role with ID: 1",
            event="Role Deleted",
        )

        with session_factory() as session:
            entry = session.scalars(select(ActivityLog)).one()

        assert entry.causer_id is None
        assert entry.properties == {"ip_address": None}

    def test_write_failure_is_swallowed(self, ctx):
        factory = Mock(side_effect=RuntimeError("audit database is down"))
        sink = AuditSink(factory)

        sink.record(
            ctx,
            log_name="Role",
            description="Deleted role with ID: 1",
            event="Role Deleted",
        )

        factory.assert_called_once()

    def test_write_failure_does_not_undo_operation(self, store, ctx):
        sink = AuditSink(Mock(side_effect=RuntimeError("audit database is down")))
        service = RbacService(store, sink, default_guard_name="web")

        created = service.create_permissions(ctx, [{"name": "view_users"}])

        assert created[0].id is not None
        assert [p.name for p in store.list_permissions()] == ["view_users"]
