"""Tests for stored content encoding."""
import pytest

from supportdesk.utils.encoding import encode_content, decode_content


@pytest.mark.unit
class TestContentEncoding:

    def test_spaces_become_plus(self):
        assert encode_content('a b') == 'a+b'

    def test_multibyte_text_is_percent_encoded(self):
        assert encode_content('密码') == '%E5%AF%86%E7%A0%81'

    def test_markdown_survives_storage(self):
        text = '# 标题\n\n- a+b = c\n- 100% 完成 & <done>\n'
        stored = encode_content(text)
        assert '\n' not in stored
        assert decode_content(stored) == text

    def test_empty_values(self):
        assert encode_content(None) == ''
        assert decode_content(None) == ''
