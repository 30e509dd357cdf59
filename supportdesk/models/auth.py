from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from supportdesk.extensions import db
from .base import BaseModel


class User(UserMixin, BaseModel):
    """后台管理员账号"""
    __tablename__ = 'users'
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    @property
    def password(self):
        raise AttributeError('密码不可读')

    @password.setter
    def password(self, password):
        self.password_hash = generate_password_hash(password)

    def verify_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'


class AdminSession(db.Model):
    """服务端保存的后台会话，Cookie 中只存 session_id"""
    __tablename__ = 'admin_sessions'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    session_id = db.Column(db.String(128), unique=True, nullable=False, index=True)
    username = db.Column(db.String(64), nullable=False, index=True)
    expiry = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    def is_expired(self, now=None):
        return (now or datetime.now()) > self.expiry

    def __repr__(self):
        return f'<AdminSession {self.username} until {self.expiry}>'
