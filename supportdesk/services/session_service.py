"""
后台会话服务

会话保存在 admin_sessions 表中，浏览器只持有 admin_session Cookie 里的随机令牌。
过期检查在每次访问后台时进行，不依赖后台定时任务。
"""
import secrets
from datetime import datetime

from flask import current_app, redirect, url_for

from supportdesk.extensions import login_manager
from supportdesk.gateway import get_gateway


class AdminSessionService:
    """后台会话的签发、校验与注销"""

    @staticmethod
    def generate_session_id():
        return secrets.token_urlsafe(32)

    @staticmethod
    def issue(username, now=None):
        """
        为用户签发新会话

        同一用户只保留一个会话，旧会话会被删除。
        返回 AdminSession 记录。
        """
        gateway = get_gateway()
        now = now or datetime.now()
        expiry = now + current_app.config['ADMIN_SESSION_LIFETIME']
        admin_session = gateway.save_admin_session(
            AdminSessionService.generate_session_id(), username, expiry
        )
        # 顺带清理其他已过期的会话
        removed = gateway.clean_expired_admin_sessions(now)
        if removed:
            current_app.logger.info(f'已清理 {removed} 个过期会话')
        return admin_session

    @staticmethod
    def resolve(session_id, now=None):
        """
        根据令牌找到有效会话

        令牌不存在返回 None；会话已过期则删除记录并返回 None。
        """
        if not session_id:
            return None
        gateway = get_gateway()
        admin_session = gateway.get_admin_session(session_id)
        if admin_session is None:
            return None
        if admin_session.is_expired(now):
            current_app.logger.info(f'会话已过期: {admin_session.username}')
            gateway.delete_admin_session(session_id)
            return None
        return admin_session

    @staticmethod
    def revoke(session_id):
        if session_id:
            get_gateway().delete_admin_session(session_id)

    @staticmethod
    def sweep(now=None):
        """删除所有已过期的会话，返回删除数量"""
        return get_gateway().clean_expired_admin_sessions(now)

    @staticmethod
    def set_cookie(response, admin_session):
        config = current_app.config
        lifetime = config['ADMIN_SESSION_LIFETIME']
        response.set_cookie(
            config['ADMIN_SESSION_COOKIE'],
            admin_session.session_id,
            max_age=int(lifetime.total_seconds()),
            path='/',
            httponly=True,
            samesite='Strict',
            secure=config['ADMIN_SESSION_COOKIE_SECURE'],
        )
        return response

    @staticmethod
    def clear_cookie(response):
        response.delete_cookie(
            current_app.config['ADMIN_SESSION_COOKIE'],
            path='/',
            httponly=True,
            samesite='Strict',
        )
        return response


@login_manager.request_loader
def load_user_from_request(request):
    """Flask-Login 回调：由 admin_session Cookie 找到当前管理员"""
    session_id = request.cookies.get(current_app.config['ADMIN_SESSION_COOKIE'])
    admin_session = AdminSessionService.resolve(session_id)
    if admin_session is None:
        return None
    return get_gateway().get_user_by_username(admin_session.username)


@login_manager.unauthorized_handler
def redirect_to_login():
    """未登录或会话过期：清除 Cookie 并跳转到登录页"""
    response = redirect(url_for('auth.login'), code=303)
    return AdminSessionService.clear_cookie(response)
