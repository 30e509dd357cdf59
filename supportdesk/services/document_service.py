"""文档发布状态与发布日期处理"""
from datetime import date, datetime

import markdown
from flask import current_app

from supportdesk.extensions import cache
from supportdesk.utils.encoding import decode_content

DATE_FORMAT = '%Y-%m-%d'
MARKDOWN_EXTENSIONS = ['extra', 'sane_lists']


def parse_publish_date(value):
    """解析 YYYY-MM-DD，空字符串返回 None，格式错误抛出 ValueError"""
    value = (value or '').strip()
    if not value:
        return None
    return datetime.strptime(value, DATE_FORMAT).date()


class DocumentService:
    """文档草稿/发布流转"""

    @staticmethod
    def _supplied_date(supplied, today):
        """提交了日期就用它，格式错误时退回到今天，未提交返回 None"""
        try:
            return parse_publish_date(supplied)
        except ValueError:
            current_app.logger.warning(f'发布日期格式错误，改用当天: {supplied!r}')
            return today

    @staticmethod
    def publish_date_for_create(is_draft, supplied, today=None):
        """新建文档时的发布日期"""
        today = today or date.today()
        if is_draft:
            return None
        return DocumentService._supplied_date(supplied, today) or today

    @staticmethod
    def publish_date_for_update(old_publish_date, is_draft, supplied, today=None):
        """
        更新文档时的发布日期

        - 改为草稿：已发布文档保留原发布日期（取消发布不抹掉发布记录），
          一直是草稿的保持原值（只有曾经发布过的草稿才带日期）
        - 改为发布：优先用提交的日期，其次沿用原日期，都没有则用今天
        """
        today = today or date.today()
        if is_draft:
            return old_publish_date
        return (DocumentService._supplied_date(supplied, today)
                or old_publish_date
                or today)

    @staticmethod
    @cache.memoize()
    def render_markdown(stored_content):
        """把存储形式的内容解码并渲染为 HTML"""
        return markdown.markdown(decode_content(stored_content), extensions=MARKDOWN_EXTENSIONS)
