"""图片上传服务"""
import os
import secrets
import time

from flask import current_app

from supportdesk.exceptions import StorageError, ValidationError
from supportdesk.gateway import get_gateway

# 文件名后缀 -> 保存时使用的扩展名
SUFFIX_EXTENSIONS = {
    '.jpg': '.jpg',
    '.jpeg': '.jpg',
    '.png': '.png',
    '.gif': '.gif',
    '.webp': '.webp',
}

MIME_EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
    'image/webp': '.webp',
}

DEFAULT_EXTENSION = '.jpg'


def is_image_type(content_type):
    return bool(content_type) and content_type.startswith('image/')


def pick_extension(filename, content_type):
    """先看文件名后缀，再看 MIME 类型，都不认识时用 .jpg"""
    suffix = os.path.splitext(filename or '')[1].lower()
    if suffix in SUFFIX_EXTENSIONS:
        return SUFFIX_EXTENSIONS[suffix]
    return MIME_EXTENSIONS.get(content_type, DEFAULT_EXTENSION)


def generate_unique_filename(extension):
    """时间戳 + 随机数，避免文件名冲突"""
    return f'{time.time_ns()}_{secrets.randbelow(10000)}{extension}'


class ImageService:

    @staticmethod
    def save_upload(file):
        """
        保存上传的图片
        先写文件，再写数据库记录；两步之间出错会留下孤立文件。
        返回 Image 记录。
        """
        if not file or not file.filename:
            raise ValidationError('请选择要上传的图片')

        content_type = file.mimetype
        if not is_image_type(content_type):
            current_app.logger.warning(f'拒绝非图片上传: {file.filename} ({content_type})')
            raise ValidationError('仅支持图片文件')

        upload_folder = current_app.config['UPLOAD_FOLDER']
        os.makedirs(upload_folder, exist_ok=True)

        stored_name = generate_unique_filename(pick_extension(file.filename, content_type))
        save_path = os.path.join(upload_folder, stored_name)
        try:
            file.save(save_path)
            size = os.path.getsize(save_path)
        except OSError as e:
            current_app.logger.error(f'保存图片失败: {save_path} - {e}')
            raise StorageError('保存图片失败') from e
        current_app.logger.info(f'图片已保存: {save_path} ({size} bytes)')

        return get_gateway().add_image(
            filename=file.filename,
            path=save_path,
            url=current_app.config['UPLOAD_URL_PATH'] + stored_name,
            size=size,
            content_type=content_type,
        )
