from flask import Blueprint

# 注意：url_prefix 在 supportdesk/__init__.py 注册时设置，这里不重复设置
main_bp = Blueprint('main', __name__)

from . import routes
