"""
表单验证器
"""
from wtforms.validators import ValidationError


def validate_positive_id(form, field):
    """验证 ID 为正整数"""
    if field.data is not None and field.data <= 0:
        raise ValidationError('无效的ID')


def validate_new_password(form, field):
    """新密码长度至少 6 位"""
    if field.data and len(field.data) < 6:
        raise ValidationError('新密码长度必须至少为6个字符')
