"""Tests for admin login, logout and password change."""
from datetime import datetime, timedelta

import pytest

from supportdesk.models import AdminSession
from supportdesk.extensions import db
from tests.conftest import login, location_of


def _set_cookie_headers(response):
    return [h for h in response.headers.getlist('Set-Cookie') if h.startswith('admin_session=')]


@pytest.mark.integration
class TestLogin:

    def test_login_page_renders(self, client):
        response = client.get('/admin/login')
        assert response.status_code == 200
        assert '管理员登录' in response.get_data(as_text=True)

    def test_successful_login_sets_cookie_and_redirects(self, client):
        response = login(client)

        assert response.status_code == 303
        path, _ = location_of(response)
        assert path == '/admin/dashboard'

        cookie = _set_cookie_headers(response)[0]
        assert 'HttpOnly' in cookie
        assert 'SameSite=Strict' in cookie
        assert 'Path=/' in cookie
        assert 'Max-Age=43200' in cookie

        dashboard = client.get('/admin/dashboard')
        assert dashboard.status_code == 200
        assert '仪表板' in dashboard.get_data(as_text=True)

    @pytest.mark.parametrize('username,password', [
        ('admin', 'wrong-password'),
        ('nobody', 'admin'),
    ])
    def test_failed_login_uses_one_generic_message(self, client, username, password):
        response = login(client, username, password)
        assert response.status_code == 200
        assert '用户名或密码错误' in response.get_data(as_text=True)
        assert _set_cookie_headers(response) == []

    def test_blank_fields(self, client):
        response = login(client, '', '')
        assert '用户名和密码不能为空' in response.get_data(as_text=True)

    def test_logged_in_user_skips_login_page(self, admin_client):
        response = admin_client.get('/admin/login')
        assert response.status_code == 303
        assert location_of(response)[0] == '/admin/dashboard'


@pytest.mark.integration
class TestAdminGate:

    @pytest.mark.parametrize('url', [
        '/admin', '/admin/dashboard', '/admin/categories', '/admin/docs',
        '/admin/docs/edit', '/admin/images', '/admin/change-password',
    ])
    def test_anonymous_is_sent_to_login(self, client, url):
        response = client.get(url)
        assert response.status_code == 303
        assert location_of(response)[0] == '/admin/login'

    def test_expired_session_is_rejected_and_cleared(self, app, admin_client):
        with app.app_context():
            AdminSession.query.update({'expiry': datetime.now() - timedelta(seconds=1)})
            db.session.commit()

        response = admin_client.get('/admin/dashboard')
        assert response.status_code == 303
        assert location_of(response)[0] == '/admin/login'
        cleared = _set_cookie_headers(response)[0]
        assert 'Max-Age=0' in cleared or 'expires=Thu, 01 Jan 1970' in cleared

        with app.app_context():
            assert AdminSession.query.count() == 0

    def test_logout_revokes_session(self, app, admin_client):
        response = admin_client.get('/admin/logout')
        assert response.status_code == 303
        assert location_of(response)[0] == '/admin/login'

        with app.app_context():
            assert AdminSession.query.count() == 0
        assert admin_client.get('/admin/dashboard').status_code == 303


@pytest.mark.integration
class TestChangePassword:

    def _change(self, client, current, new, confirm=None):
        return client.post('/admin/change-password', data={
            'current_password': current,
            'new_password': new,
            'confirm_password': new if confirm is None else confirm,
        })

    def test_page_renders(self, admin_client):
        response = admin_client.get('/admin/change-password')
        assert response.status_code == 200
        assert '修改密码' in response.get_data(as_text=True)

    def test_wrong_current_password(self, admin_client):
        response = self._change(admin_client, 'not-admin', 'secret123')
        path, params = location_of(response)
        assert path == '/admin/change-password'
        assert params['type'] == 'danger'
        assert '当前密码不正确' in params['message']

    def test_too_short(self, admin_client):
        _, params = location_of(self._change(admin_client, 'admin', '123'))
        assert params['message'] == '新密码长度必须至少为6个字符'

    def test_mismatch(self, admin_client):
        _, params = location_of(self._change(admin_client, 'admin', 'secret123', 'secret124'))
        assert params['message'] == '新密码与确认密码不匹配'

    def test_success_and_new_password_works(self, app, admin_client):
        response = self._change(admin_client, 'admin', 'secret123')
        path, params = location_of(response)
        assert path == '/admin/dashboard'
        assert params == {'message': '密码已成功修改', 'type': 'success'}

        fresh = app.test_client()
        assert login(fresh, 'admin', 'admin').status_code == 200
        assert login(fresh, 'admin', 'secret123').status_code == 303
