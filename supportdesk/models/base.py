from datetime import datetime
from supportdesk.extensions import db


class BaseModel(db.Model):
    """
    支援中心模型基类
    包含：ID主键, 创建时间, 更新时间
    """
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime, default=datetime.now, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)
