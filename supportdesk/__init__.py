import logging
import colorlog
from flask import Flask, render_template, request, redirect
from flask_assets import Bundle
from config import config
from supportdesk.extensions import db, migrate, login_manager, cache, assets, csrf
from supportdesk.exceptions import NotFoundError, StorageError
from supportdesk.gateway import Gateway

# 导入 commands 模块，用于注册 CLI 命令
from supportdesk import commands


def create_app(config_name='default', test_config=None):
    """支援中心应用工厂函数"""
    app = Flask(__name__)

    # 1. 加载配置
    app.config.from_object(config[config_name])
    if test_config:
        app.config.update(test_config)
    config[config_name].init_app(app)

    # 2. 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    cache.init_app(app)
    assets.init_app(app)
    csrf.init_app(app)
    Gateway(db).init_app(app)
    register_assets()

    # 3. 配置日志
    configure_logging(app)

    # 4. 注册蓝图 (Blueprints)
    register_blueprints(app)

    # 5. 旧版 .php 地址兼容
    register_legacy_redirects(app)

    # 6. 注册全局错误处理
    register_error_handlers(app)

    # 7. 注册 CLI 命令
    register_commands(app)

    return app


def register_blueprints(app):
    """注册所有业务模块蓝图"""
    # 会话校验回调 (Flask-Login request_loader)
    from supportdesk.services import session_service  # noqa: F401

    # 前台蓝图
    from supportdesk.blueprints.main import main_bp
    app.register_blueprint(main_bp)

    # 登录/登出/修改密码
    from supportdesk.blueprints.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/admin')

    # 后台管理蓝图
    from supportdesk.blueprints.admin import admin_bp
    app.register_blueprint(admin_bp, url_prefix='/admin')


def register_assets():
    """前台与后台样式表"""
    if 'site_css' not in assets:
        assets.register('site_css', Bundle('css/site.css', output='gen/site.%(version)s.css'))
    if 'admin_css' not in assets:
        assets.register('admin_css', Bundle('css/admin.css', output='gen/admin.%(version)s.css'))


def register_legacy_redirects(app):
    @app.before_request
    def strip_php_extension():
        """旧站点的 xxx.php 地址一律 301 到去掉扩展名的地址"""
        if '.php' in request.path:
            target = request.path.replace('.php', '')
            if request.query_string:
                target += '?' + request.query_string.decode()
            return redirect(target, code=301)
        return None


def register_error_handlers(app):
    @app.errorhandler(404)
    def page_not_found(e):
        return render_template('errors/404.html'), 404

    @app.errorhandler(NotFoundError)
    def record_not_found(e):
        app.logger.info(f'记录不存在: {e.message}')
        return render_template('errors/404.html'), 404

    @app.errorhandler(StorageError)
    def storage_failure(e):
        # 详细原因已在网关中记录，页面只给出通用提示
        return render_template('errors/500.html'), 500

    @app.errorhandler(500)
    def internal_server_error(e):
        return render_template('errors/500.html'), 500


def register_commands(app):
    """注册 Flask CLI 命令"""
    app.cli.add_command(commands.init_db)
    app.cli.add_command(commands.status)
    app.cli.add_command(commands.cleanup_sessions)


def configure_logging(app):
    """配置控制台日志：开发环境彩色输出"""
    handler = logging.StreamHandler()
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    handler.setLevel(level)

    if app.debug:
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s %(blue)s%(message)s",
            datefmt="%H:%M:%S",
            reset=True,
            log_colors={
                'DEBUG':    'cyan',
                'INFO':     'green',
                'WARNING':  'yellow',
                'ERROR':    'red',
                'CRITICAL': 'red,bg_white',
            },
            secondary_log_colors={},
            style='%'
        )
    else:
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s")
    handler.setFormatter(formatter)
    # 同名 logger 在多次创建应用时共用，先移除旧的处理器
    for old_handler in list(app.logger.handlers):
        app.logger.removeHandler(old_handler)
    app.logger.addHandler(handler)
    app.logger.setLevel(level)
