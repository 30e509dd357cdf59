"""
Pytest configuration and fixtures for supportdesk tests.
"""
from datetime import date
from urllib.parse import urlsplit, parse_qs

import pytest

from supportdesk import create_app
from supportdesk.gateway import get_gateway


@pytest.fixture(scope="function")
def app(tmp_path):
    """Create an app bound to an in-memory database and a temporary data dir."""
    app = create_app('testing', {'DATA_DIR': str(tmp_path)})
    yield app


@pytest.fixture(scope="function")
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture(scope="function")
def gateway(app_ctx):
    return get_gateway()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


def login(client, username='admin', password='admin'):
    return client.post('/admin/login', data={'username': username, 'password': password})


@pytest.fixture(scope="function")
def admin_client(client):
    """A test client that already holds a valid admin_session cookie."""
    response = login(client)
    assert response.status_code == 303
    return client


@pytest.fixture(scope="function")
def sample_data(app):
    """One category with a published doc and a draft; returns their ids."""
    with app.app_context():
        gateway = get_gateway()
        category = gateway.add_category('常见问题')
        published = gateway.add_document(
            title='如何重置密码',
            content='# 重置密码\n\n进入 **设置** 页面，点击「重置密码」。',
            category_id=category.id,
            publish_date=date(2024, 1, 15),
            is_draft=False,
        )
        draft = gateway.add_document(
            title='未完成的草稿',
            content='还在写',
            category_id=category.id,
            publish_date=None,
            is_draft=True,
        )
        return {
            'category_id': category.id,
            'published_id': published.id,
            'draft_id': draft.id,
        }


def location_of(response):
    """Split a redirect Location into (path, query dict of single values)."""
    parts = urlsplit(response.headers['Location'])
    return parts.path, {k: v[0] for k, v in parse_qs(parts.query).items()}
