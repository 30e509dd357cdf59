"""
请求处理辅助函数

操作结果通过重定向地址上的 message / type 参数传给下一个页面，不在服务端保存。
"""
from urllib.parse import urlencode

from flask import redirect


def redirect_with_message(path, message=None, message_type=None):
    """303 重定向，附带一次性提示信息"""
    target = path
    if message:
        params = {'message': message}
        if message_type:
            params['type'] = message_type
        target += ('&' if '?' in path else '?') + urlencode(params)
    return redirect(target, code=303)


def first_form_error(form, default='表单数据不正确'):
    """取出 WTForms 表单的第一条错误信息"""
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return default
