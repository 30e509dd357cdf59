"""Tests for the flask CLI commands."""
from datetime import datetime, timedelta

import pytest

from supportdesk.gateway import get_gateway


@pytest.mark.unit
class TestCommands:

    def test_init_db(self, app):
        result = app.test_cli_runner().invoke(args=['init-db'])
        assert result.exit_code == 0
        assert '数据库已就绪' in result.output
        assert 'admin' in result.output

    def test_status(self, app, sample_data):
        result = app.test_cli_runner().invoke(args=['status'])
        assert result.exit_code == 0
        assert '分类 (Categories): \t1' in result.output
        assert '草稿 (Drafts): \t1' in result.output

    def test_cleanup_sessions(self, app):
        with app.app_context():
            get_gateway().save_admin_session('stale', 'admin', datetime.now() - timedelta(hours=1))

        result = app.test_cli_runner().invoke(args=['cleanup-sessions'])
        assert result.exit_code == 0
        assert '已清理 1 个过期会话' in result.output
