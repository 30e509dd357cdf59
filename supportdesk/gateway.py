"""
持久化网关

所有数据读写都经过 Gateway。Gateway 在 create_app 中创建并绑定到应用
(app.extensions['gateway'])，第一次被调用时才创建数据目录、建表、写入默认管理员。
"""
import os
import threading
from contextlib import contextmanager
from datetime import datetime

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from supportdesk.exceptions import NotFoundError, StorageError, ValidationError
from supportdesk.models import User, AdminSession, Category, Document, Image
from supportdesk.utils.encoding import encode_content


def get_gateway():
    """取得当前应用绑定的网关"""
    return current_app.extensions['gateway']


def _escape_like(value):
    # 编码后的内容含 %，需按字面值匹配
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class Gateway:
    """数据库访问网关：分类、文档、用户、会话、图片"""

    def __init__(self, db, app=None):
        self.db = db
        self._lock = threading.Lock()
        self._initialized = False
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions['gateway'] = self

    # ------------------------------------------------------------------
    # 初始化
    # ------------------------------------------------------------------

    def _ready(self):
        """保证只初始化一次，返回共享的数据库会话"""
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    self._initialize()
                    self._initialized = True
        return self.db.session

    def _initialize(self):
        config = current_app.config
        os.makedirs(config['DATA_DIR'], exist_ok=True)

        # create_all 只会建立缺失的表，可重复执行
        self.db.create_all()

        # 只按行数判断是否写入默认管理员；多个进程同时首次启动时可能重复插入
        if User.query.count() == 0:
            admin = User(username=config['DEFAULT_ADMIN_USERNAME'])
            admin.password = config['DEFAULT_ADMIN_PASSWORD']
            self.db.session.add(admin)
            self._commit('创建默认管理员')
            current_app.logger.info(f'已创建默认管理员账号: {admin.username}')

    def _commit(self, action, conflict_message=None):
        session = self.db.session
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            current_app.logger.warning(f'{action}失败 (约束冲突): {e.orig}')
            raise ValidationError(conflict_message or f'{action}失败：数据冲突') from e
        except SQLAlchemyError as e:
            session.rollback()
            current_app.logger.error(f'{action}失败: {e}')
            raise StorageError(f'{action}失败') from e

    @contextmanager
    def _querying(self, action):
        """查询 (含批量删除) 出错时与提交一样回滚、记录并转为 StorageError"""
        try:
            yield self._ready()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            current_app.logger.error(f'{action}失败: {e}')
            raise StorageError(f'{action}失败') from e

    # ------------------------------------------------------------------
    # 分类
    # ------------------------------------------------------------------

    def list_categories(self):
        with self._querying('读取分类'):
            return Category.query.all()

    def get_category(self, category_id):
        with self._querying('读取分类'):
            category = self.db.session.get(Category, category_id)
        if category is None:
            raise NotFoundError(f'分类不存在: {category_id}')
        return category

    def add_category(self, name):
        session = self._ready()
        category = Category(name=name)
        session.add(category)
        self._commit('新增分类', conflict_message='分类名称已存在')
        return category

    def update_category(self, category_id, name):
        category = self.get_category(category_id)
        category.name = name
        self._commit('更新分类', conflict_message='分类名称已存在')
        return category

    def delete_category(self, category_id):
        """删除分类及其全部文档（同一事务，要么都删，要么都不删）"""
        session = self._ready()
        try:
            removed_docs = Document.query.filter_by(category_id=category_id) \
                .delete(synchronize_session=False)
            removed = Category.query.filter_by(id=category_id) \
                .delete(synchronize_session=False)
            if not removed:
                session.rollback()
                raise NotFoundError(f'分类不存在: {category_id}')
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            current_app.logger.error(f'删除分类 {category_id} 失败，已回滚: {e}')
            raise StorageError('删除分类失败') from e
        session.expire_all()
        return removed_docs

    # ------------------------------------------------------------------
    # 文档
    # ------------------------------------------------------------------

    def list_documents(self, category_id=None, status='all'):
        """status: all / published / drafts"""
        with self._querying('读取文档列表'):
            query = Document.query
            if category_id:
                query = query.filter(Document.category_id == category_id)
            if status == 'published':
                query = query.filter_by(is_draft=False)
            elif status == 'drafts':
                query = query.filter_by(is_draft=True)
            return query.all()

    def count_documents(self, status='all'):
        with self._querying('统计文档'):
            query = Document.query
            if status == 'published':
                query = query.filter_by(is_draft=False)
            elif status == 'drafts':
                query = query.filter_by(is_draft=True)
            return query.count()

    def get_document(self, doc_id):
        with self._querying('读取文档'):
            doc = self.db.session.get(Document, doc_id)
        if doc is None:
            raise NotFoundError(f'文档不存在: {doc_id}')
        return doc

    def add_document(self, title, content, category_id, publish_date, is_draft):
        """content 为 Markdown 原文，写入前统一编码"""
        session = self._ready()
        doc = Document(
            title=title,
            content=encode_content(content),
            category_id=category_id,
            publish_date=publish_date,
            is_draft=is_draft,
            last_edit_date=datetime.now(),
        )
        session.add(doc)
        self._commit('新增文档')
        return doc

    def update_document(self, doc_id, title, content, category_id, publish_date, is_draft):
        doc = self.get_document(doc_id)
        doc.title = title
        doc.content = encode_content(content)
        doc.category_id = category_id
        doc.publish_date = publish_date
        doc.is_draft = is_draft
        doc.last_edit_date = datetime.now()
        self._commit('更新文档')
        return doc

    def delete_document(self, doc_id):
        session = self._ready()
        doc = self.get_document(doc_id)
        session.delete(doc)
        self._commit('删除文档')

    def search_documents(self, keyword, published_only=True):
        """
        按标题或内容模糊搜索，不区分大小写

        内容是编码后存储的，数据库里先用编码后的关键字粗筛；
        编码片段可能落在转义序列中间 (如 0A 命中换行的 %0A)，
        所以再按解码后的原文逐篇确认。
        """
        with self._querying('搜索文档'):
            query = Document.query.filter(or_(
                Document.title.like(f'%{_escape_like(keyword)}%', escape='\\'),
                Document.content.like(f'%{_escape_like(encode_content(keyword))}%', escape='\\'),
            ))
            if published_only:
                query = query.filter_by(is_draft=False)
            candidates = query.all()

        needle = keyword.lower()
        return [doc for doc in candidates
                if needle in doc.title.lower() or needle in doc.markdown.lower()]

    # ------------------------------------------------------------------
    # 用户
    # ------------------------------------------------------------------

    def get_user_by_username(self, username):
        with self._querying('读取用户'):
            return User.query.filter_by(username=username).first()

    def change_user_password(self, username, current_password, new_password):
        self._ready()
        user = self.get_user_by_username(username)
        if user is None:
            raise NotFoundError('用户不存在')
        if not user.verify_password(current_password):
            raise ValidationError('当前密码不正确')
        user.password = new_password
        self._commit('修改密码')
        return user

    # ------------------------------------------------------------------
    # 后台会话
    # ------------------------------------------------------------------

    def save_admin_session(self, session_id, username, expiry):
        """每个用户只保留一个会话：先删掉旧会话再写入新的"""
        with self._querying('保存会话') as session:
            AdminSession.query.filter_by(username=username).delete(synchronize_session=False)
            admin_session = AdminSession(session_id=session_id, username=username, expiry=expiry)
            session.add(admin_session)
        self._commit('保存会话')
        return admin_session

    def get_admin_session(self, session_id):
        if not session_id:
            return None
        with self._querying('读取会话'):
            return AdminSession.query.filter_by(session_id=session_id).first()

    def delete_admin_session(self, session_id):
        with self._querying('删除会话'):
            removed = AdminSession.query.filter_by(session_id=session_id) \
                .delete(synchronize_session=False)
        self._commit('删除会话')
        return removed

    def clean_expired_admin_sessions(self, now=None):
        with self._querying('清理过期会话'):
            removed = AdminSession.query.filter(AdminSession.expiry < (now or datetime.now())) \
                .delete(synchronize_session=False)
        self._commit('清理过期会话')
        return removed

    # ------------------------------------------------------------------
    # 图片
    # ------------------------------------------------------------------

    def add_image(self, filename, path, url, size, content_type):
        session = self._ready()
        image = Image(
            filename=filename,
            path=path,
            url=url,
            size=size,
            content_type=content_type,
            upload_time=datetime.now(),
        )
        session.add(image)
        self._commit('保存图片记录')
        return image

    def get_image(self, image_id):
        with self._querying('读取图片'):
            image = self.db.session.get(Image, image_id)
        if image is None:
            raise NotFoundError(f'图片不存在: {image_id}')
        return image

    def list_images(self, keyword=None):
        """按上传时间倒序"""
        with self._querying('读取图片列表'):
            query = Image.query
            if keyword:
                query = query.filter(Image.filename.like(f'%{_escape_like(keyword)}%', escape='\\'))
            return query.order_by(Image.upload_time.desc(), Image.id.desc()).all()

    def delete_image(self, image_id):
        """删除图片文件和记录；文件已不存在不算错误"""
        session = self._ready()
        image = self.get_image(image_id)
        try:
            os.remove(image.path)
        except FileNotFoundError:
            current_app.logger.warning(f'图片文件已不存在: {image.path}')
        except OSError as e:
            current_app.logger.error(f'删除图片文件失败: {image.path} - {e}')
            raise StorageError('删除图片文件失败') from e
        session.delete(image)
        self._commit('删除图片记录')
