from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_caching import Cache
from flask_assets import Environment
from flask_wtf.csrf import CSRFProtect

# 初始化扩展对象 (暂不绑定 app)
db = SQLAlchemy()
migrate = Migrate()
cache = Cache()
assets = Environment()
login_manager = LoginManager()
csrf = CSRFProtect()

# 后台会话存放在服务端 admin_sessions 表，由 Cookie 引用，
# 不走 Flask-Login 的 session 保护
login_manager.session_protection = None
