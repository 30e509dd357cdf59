"""Tests for the public site."""
import pytest
from sqlalchemy import text

from supportdesk.extensions import db
from supportdesk.gateway import get_gateway

from tests.conftest import location_of


@pytest.mark.integration
class TestIndex:

    def test_lists_categories(self, client, sample_data):
        response = client.get('/')
        assert response.status_code == 200
        assert '常见问题' in response.get_data(as_text=True)

    def test_category_shows_only_published_docs(self, client, sample_data):
        response = client.get('/?category_id=%d' % sample_data['category_id'])
        text = response.get_data(as_text=True)
        assert '如何重置密码' in text
        assert '未完成的草稿' not in text

    def test_empty_site(self, client):
        assert '暂无分类' in client.get('/').get_data(as_text=True)

    def test_legacy_index_redirect(self, client):
        response = client.get('/index?category_id=3')
        assert response.status_code == 301
        assert response.headers['Location'].endswith('/?category_id=3')


@pytest.mark.integration
class TestDocPage:

    def test_renders_markdown(self, client, sample_data):
        response = client.get('/doc?id=%d' % sample_data['published_id'])
        text = response.get_data(as_text=True)
        assert response.status_code == 200
        assert '<h1>重置密码</h1>' in text
        assert '<strong>设置</strong>' in text
        assert '2024-01-15' in text

    def test_draft_is_hidden(self, client, sample_data):
        assert client.get('/doc?id=%d' % sample_data['draft_id']).status_code == 404

    def test_missing_or_invalid_id(self, client):
        assert client.get('/doc').status_code == 404
        assert client.get('/doc?id=abc').status_code == 404
        assert client.get('/doc?id=987').status_code == 404


@pytest.mark.integration
class TestSearch:

    def test_finds_published_docs(self, client, sample_data):
        text = client.get('/search?query=密码').get_data(as_text=True)
        assert '如何重置密码' in text
        assert '未完成的草稿' not in text

    def test_no_results(self, client, sample_data):
        text = client.get('/search?query=不存在的词').get_data(as_text=True)
        assert '没有找到' in text

    def test_blank_query(self, client):
        assert '请输入搜索关键字' in client.get('/search?query=').get_data(as_text=True)


@pytest.mark.integration
class TestCategoryDocsJson:

    def test_returns_published_summaries(self, client, sample_data):
        response = client.get('/category-docs?category_id=%d' % sample_data['category_id'])
        payload = response.get_json()
        assert payload['status'] == 'success'
        assert [d['id'] for d in payload['result']] == [sample_data['published_id']]
        assert payload['result'][0]['category'] == '常见问题'
        assert payload['result'][0]['publish_date'] == '2024-01-15'
        assert 'content' not in payload['result'][0]

    def test_missing_category_id(self, client):
        response = client.get('/category-docs')
        assert response.status_code == 400
        assert response.get_json()['status'] == 'error'


@pytest.mark.integration
class TestLegacyPaths:

    def test_php_suffix_is_stripped(self, client):
        response = client.get('/doc.php?id=7')
        assert response.status_code == 301
        path, params = location_of(response)
        assert path == '/doc'
        assert params == {'id': '7'}

    def test_admin_php_paths(self, client):
        response = client.get('/admin/login.php')
        assert response.status_code == 301
        assert location_of(response)[0] == '/admin/login'

    def test_unknown_upload_is_404(self, client):
        assert client.get('/uploads/nothing.png').status_code == 404


@pytest.mark.integration
class TestStorageFailurePage:

    def test_database_failure_renders_generic_error(self, app, client):
        with app.app_context():
            get_gateway()._ready()
            db.session.execute(text('DROP TABLE categories'))
            db.session.commit()

        response = client.get('/')
        assert response.status_code == 500
        text_body = response.get_data(as_text=True)
        assert '服务器发生错误' in text_body
        assert 'no such table' not in text_body
