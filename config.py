import os
from datetime import timedelta
from dotenv import load_dotenv

# 加载 .env 环境变量
load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    """基础配置类"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'hard-to-guess-string'
    SITE_TITLE = os.environ.get('SITE_TITLE', '支援中心')

    # 数据目录：SQLite 数据库与上传文件都放在这里
    DATA_DIR = os.environ.get('DATA_DIR') or os.path.join(basedir, 'data')

    # 数据库配置
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # 文件上传配置
    UPLOAD_URL_PATH = '/uploads/'
    MAX_CONTENT_LENGTH = 32 * 1024 * 1024  # 限制最大上传 32MB

    # 后台会话
    ADMIN_SESSION_COOKIE = 'admin_session'
    ADMIN_SESSION_LIFETIME = timedelta(hours=12)
    ADMIN_SESSION_COOKIE_SECURE = False
    DEFAULT_ADMIN_USERNAME = 'admin'
    DEFAULT_ADMIN_PASSWORD = 'admin'

    # 缓存配置 (默认使用 SimpleCache，生产环境可改 Redis)
    CACHE_TYPE = "SimpleCache"
    CACHE_DEFAULT_TIMEOUT = 300

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    @staticmethod
    def init_app(app):
        # 上传目录跟随 DATA_DIR（测试时会被覆盖）
        app.config.setdefault('UPLOAD_FOLDER', os.path.join(app.config['DATA_DIR'], 'uploads'))
        if not app.config.get('SQLALCHEMY_DATABASE_URI'):
            app.config['SQLALCHEMY_DATABASE_URI'] = \
                'sqlite:///' + os.path.join(app.config['DATA_DIR'], 'database.sqlite')


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    # 安全设置
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    ADMIN_SESSION_COOKIE_SECURE = os.environ.get('COOKIE_SECURE', 'false').lower() in ('1', 'true', 'yes')

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    CACHE_TYPE = 'NullCache'
    ASSETS_DEBUG = True


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
