from flask import render_template, redirect, request, url_for, current_app
from flask_login import login_required, current_user

from supportdesk.blueprints.auth import auth_bp
from supportdesk.blueprints.auth.forms import LoginForm, ChangePasswordForm
from supportdesk.exceptions import SupportDeskError
from supportdesk.gateway import get_gateway
from supportdesk.services.session_service import AdminSessionService
from supportdesk.utils.helpers import redirect_with_message, first_form_error

# 用户不存在和密码错误使用同一条提示，不暴露是哪一项有误
LOGIN_FAILED = '用户名或密码错误'


def _login_page(form, error_message=None):
    return render_template('admin/login.html', form=form, error_message=error_message)


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    form = LoginForm()
    if request.method == 'GET':
        # 如果已登录，直接跳到仪表板
        if current_user.is_authenticated:
            return redirect(url_for('admin.dashboard'), code=303)
        return _login_page(form)

    if not form.validate_on_submit():
        return _login_page(form, first_form_error(form))

    user = get_gateway().get_user_by_username(form.username.data)
    if user is None or not user.verify_password(form.password.data):
        current_app.logger.warning(f'登录失败: {form.username.data} ({request.remote_addr})')
        return _login_page(form, LOGIN_FAILED)

    try:
        admin_session = AdminSessionService.issue(user.username)
    except SupportDeskError as e:
        current_app.logger.error(f'创建会话失败: {e.message}')
        return _login_page(form, '创建会话失败')

    current_app.logger.info(f'管理员登录: {user.username}')
    response = redirect(url_for('admin.dashboard'), code=303)
    return AdminSessionService.set_cookie(response, admin_session)


@auth_bp.route('/logout')
def logout():
    if current_user.is_authenticated:
        current_app.logger.info(f'管理员登出: {current_user.username}')
    session_id = request.cookies.get(current_app.config['ADMIN_SESSION_COOKIE'])
    AdminSessionService.revoke(session_id)
    response = redirect(url_for('auth.login'), code=303)
    return AdminSessionService.clear_cookie(response)


@auth_bp.route('/change-password', methods=['GET', 'POST'])
@login_required
def change_password():
    form = ChangePasswordForm()
    if request.method == 'GET':
        return render_template('admin/change_password.html', form=form, active='change_password')

    target = url_for('auth.change_password')
    if not form.validate_on_submit():
        return redirect_with_message(target, first_form_error(form), 'danger')

    try:
        get_gateway().change_user_password(current_user.username,
                                           form.current_password.data,
                                           form.new_password.data)
    except SupportDeskError as e:
        current_app.logger.warning(f'修改密码失败: {current_user.username} - {e.message}')
        return redirect_with_message(target, f'密码修改失败: {e.message}', 'danger')

    current_app.logger.info(f'管理员修改了密码: {current_user.username}')
    return redirect_with_message(url_for('admin.dashboard'), '密码已成功修改', 'success')
