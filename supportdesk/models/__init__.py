# 按照依赖顺序导入
from .base import BaseModel
from .auth import User, AdminSession
from .content import Category, Document, Image
