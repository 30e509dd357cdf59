from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SubmitField
from wtforms.validators import DataRequired, EqualTo

from supportdesk.utils.validators import validate_new_password


class LoginForm(FlaskForm):
    """管理员登录表单"""
    username = StringField('用户名', validators=[
        DataRequired(message="用户名和密码不能为空")
    ])
    password = PasswordField('密码', validators=[
        DataRequired(message="用户名和密码不能为空")
    ])
    submit = SubmitField('登录')


class ChangePasswordForm(FlaskForm):
    """修改密码表单"""
    current_password = PasswordField('当前密码', validators=[
        DataRequired(message="所有栏位都必须填写")
    ])
    new_password = PasswordField('新密码', validators=[
        DataRequired(message="所有栏位都必须填写"),
        validate_new_password
    ])
    confirm_password = PasswordField('确认新密码', validators=[
        DataRequired(message="所有栏位都必须填写"),
        EqualTo('new_password', message='新密码与确认密码不匹配')
    ])
    submit = SubmitField('修改密码')
