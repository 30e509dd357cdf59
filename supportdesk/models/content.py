from datetime import datetime
from supportdesk.utils.encoding import decode_content
from supportdesk.extensions import db
from .base import BaseModel


class Category(BaseModel):
    """文档分类"""
    __tablename__ = 'categories'

    name = db.Column(db.String(128), unique=True, nullable=False)

    def __repr__(self):
        return f'<Category {self.name}>'


class Document(BaseModel):
    """支援文档 (content 以 URL 编码后的 Markdown 存储)"""
    __tablename__ = 'docs'

    title = db.Column(db.String(256), nullable=False)
    content = db.Column(db.Text, nullable=False, default='')
    # 只按约定关联分类，不在存储层建外键
    category_id = db.Column(db.Integer, nullable=False, index=True)
    publish_date = db.Column(db.Date, nullable=True)
    last_edit_date = db.Column(db.DateTime, default=datetime.now)
    is_draft = db.Column(db.Boolean, default=False, nullable=False, index=True)

    category = db.relationship(
        'Category',
        primaryjoin='foreign(Document.category_id) == Category.id',
        lazy='joined',
        viewonly=True,
    )

    @property
    def markdown(self):
        """解码后的 Markdown 原文"""
        return decode_content(self.content)

    @property
    def category_name(self):
        return self.category.name if self.category else ''

    def to_summary(self):
        return {
            'id': self.id,
            'title': self.title,
            'category_id': self.category_id,
            'category': self.category_name,
            'publish_date': self.publish_date.isoformat() if self.publish_date else None,
            'last_edit_date': self.last_edit_date.isoformat() if self.last_edit_date else None,
        }

    def __repr__(self):
        return f'<Document {self.id} {self.title!r} draft={self.is_draft}>'


class Image(db.Model):
    """上传图片"""
    __tablename__ = 'images'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    filename = db.Column(db.String(256))  # 原始文件名
    path = db.Column(db.String(512))  # 磁盘路径
    url = db.Column(db.String(512))  # 对外访问地址
    size = db.Column(db.Integer)  # 字节数
    content_type = db.Column(db.String(64))
    upload_time = db.Column(db.DateTime, default=datetime.now, index=True)
