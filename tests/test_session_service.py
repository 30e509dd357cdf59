"""Tests for admin session issuing and expiry."""
from datetime import datetime, timedelta

import pytest

from supportdesk.models import AdminSession
from supportdesk.services.session_service import AdminSessionService


@pytest.mark.unit
class TestAdminSessionService:

    def test_session_ids_are_unique_and_long(self):
        ids = {AdminSessionService.generate_session_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(len(i) >= 40 for i in ids)

    def test_issue_sets_expiry_from_lifetime(self, app, gateway):
        now = datetime(2024, 1, 1, 8, 0, 0)
        admin_session = AdminSessionService.issue('admin', now)
        assert admin_session.expiry == now + app.config['ADMIN_SESSION_LIFETIME']

    def test_new_login_replaces_previous_session(self, gateway):
        first = AdminSessionService.issue('admin').session_id
        second = AdminSessionService.issue('admin').session_id

        assert AdminSessionService.resolve(first) is None
        assert AdminSessionService.resolve(second).username == 'admin'

    def test_expired_session_is_removed_on_resolve(self, gateway):
        issued_at = datetime.now() - timedelta(days=1)
        session_id = AdminSessionService.issue('admin', issued_at).session_id

        assert AdminSessionService.resolve(session_id) is None
        assert AdminSession.query.filter_by(session_id=session_id).count() == 0

    def test_unknown_or_empty_token(self, gateway):
        assert AdminSessionService.resolve('') is None
        assert AdminSessionService.resolve('no-such-token') is None

    def test_issue_sweeps_other_expired_sessions(self, gateway):
        gateway.save_admin_session('stale', 'editor', datetime.now() - timedelta(hours=1))
        AdminSessionService.issue('admin')
        assert gateway.get_admin_session('stale') is None

    def test_sweep(self, gateway):
        gateway.save_admin_session('stale', 'editor', datetime.now() - timedelta(hours=1))
        assert AdminSessionService.sweep() == 1
