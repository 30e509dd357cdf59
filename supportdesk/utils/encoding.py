"""
文档内容的存储编码

文档内容在数据库中统一以 URL 百分号编码形式存放（空格编码为 ``+``），
仅在展示和编辑时解码，每次写入前重新编码。
"""
from urllib.parse import quote_plus, unquote_plus


def encode_content(text):
    """编码为存储形式"""
    return quote_plus(text or '')


def decode_content(stored):
    """从存储形式解码出 Markdown 原文"""
    return unquote_plus(stored or '')
