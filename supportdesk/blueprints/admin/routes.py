from datetime import date

from flask import render_template, redirect, request, url_for, jsonify, current_app
from flask_login import login_required

from supportdesk.blueprints.admin import admin_bp
from supportdesk.blueprints.admin.forms import CategoryForm, DeleteForm, DocumentForm, ImageUploadForm
from supportdesk.exceptions import SupportDeskError, NotFoundError, ValidationError
from supportdesk.gateway import get_gateway
from supportdesk.services.document_service import DocumentService
from supportdesk.services.image_service import ImageService
from supportdesk.utils.file_helper import format_size
from supportdesk.utils.helpers import redirect_with_message, first_form_error

DOC_FILTERS = ('all', 'published', 'drafts')


# ----------------------------------------------------------------------
# 仪表板
# ----------------------------------------------------------------------

@admin_bp.route('')
@admin_bp.route('/dashboard')
@login_required
def dashboard():
    gateway = get_gateway()
    stats = {
        'categories': len(gateway.list_categories()),
        'docs': gateway.count_documents(),
        'drafts': gateway.count_documents('drafts'),
        'images': len(gateway.list_images()),
    }
    return render_template('admin/dashboard.html', stats=stats, active='dashboard')


# ----------------------------------------------------------------------
# 分类管理
# ----------------------------------------------------------------------

@admin_bp.route('/categories')
@login_required
def categories():
    return render_template('admin/categories.html',
                           categories=get_gateway().list_categories(),
                           form=CategoryForm(),
                           active='categories')


@admin_bp.route('/categories/add', methods=['GET', 'POST'])
@login_required
def category_add():
    target = url_for('admin.categories')
    if request.method != 'POST':
        return redirect(target, code=303)

    form = CategoryForm()
    if not form.validate_on_submit():
        return redirect_with_message(target, first_form_error(form), 'danger')

    name = form.name.data.strip()
    try:
        get_gateway().add_category(name)
    except SupportDeskError as e:
        return redirect_with_message(target, f'新增分类失败: {e.message}', 'danger')

    current_app.logger.info(f'新增分类: {name}')
    return redirect_with_message(target, f'成功新增分类: {name}', 'success')


@admin_bp.route('/categories/edit', methods=['GET', 'POST'])
@login_required
def category_edit():
    target = url_for('admin.categories')
    if request.method != 'POST':
        return redirect(target, code=303)

    form = CategoryForm()
    if not form.validate_on_submit() or not form.id.data:
        return redirect_with_message(target, first_form_error(form, '无效的ID'), 'danger')

    try:
        get_gateway().update_category(form.id.data, form.name.data.strip())
    except SupportDeskError as e:
        return redirect_with_message(target, f'更新分类失败: {e.message}', 'danger')

    current_app.logger.info(f'更新分类 {form.id.data}: {form.name.data}')
    return redirect_with_message(target, '成功更新分类', 'success')


@admin_bp.route('/categories/delete', methods=['GET', 'POST'])
@login_required
def category_delete():
    target = url_for('admin.categories')
    if request.method != 'POST':
        return redirect(target, code=303)

    form = DeleteForm()
    if not form.validate_on_submit():
        return redirect_with_message(target, '无效的ID', 'danger')

    try:
        removed_docs = get_gateway().delete_category(form.id.data)
    except SupportDeskError as e:
        return redirect_with_message(target, f'删除分类失败: {e.message}', 'danger')

    current_app.logger.info(f'删除分类 {form.id.data}，连同 {removed_docs} 篇文档')
    return redirect_with_message(target, '成功删除分类及其文档', 'success')


# ----------------------------------------------------------------------
# 文档管理
# ----------------------------------------------------------------------

@admin_bp.route('/docs')
@login_required
def docs():
    gateway = get_gateway()
    category_id = request.args.get('category_id', 0, type=int)
    doc_filter = request.args.get('filter') or 'all'
    if doc_filter not in DOC_FILTERS:
        doc_filter = 'all'

    return render_template('admin/docs.html',
                           docs=gateway.list_documents(category_id or None, status=doc_filter),
                           categories=gateway.list_categories(),
                           today=date.today().isoformat(),
                           filter=doc_filter,
                           filter_category_id=category_id,
                           delete_form=DeleteForm(),
                           active='docs')


@admin_bp.route('/docs/edit')
@login_required
def doc_edit():
    """编辑页；id 为空或 0 时是新建文档"""
    gateway = get_gateway()
    raw_id = request.args.get('id', '')
    is_new_doc = raw_id in ('', '0')
    document = None

    if is_new_doc:
        form = DocumentForm(data={'is_draft': True, 'publish_date': date.today().isoformat()})
    else:
        try:
            document = gateway.get_document(int(raw_id))
        except (ValueError, NotFoundError) as e:
            current_app.logger.warning(f'打开文档编辑页失败: {raw_id!r} - {e}')
            return redirect_with_message(url_for('admin.docs'), '文档不存在', 'danger')
        form = DocumentForm(data={
            'id': document.id,
            'title': document.title,
            'category_id': document.category_id,
            'publish_date': document.publish_date.isoformat() if document.publish_date else '',
            # 编辑时显示解码后的 Markdown
            'content': document.markdown,
            'is_draft': document.is_draft,
            'auto_close': request.args.get('autoClose', ''),
        })

    return render_template('admin/doc_edit.html',
                           form=form,
                           doc=document,
                           is_new_doc=is_new_doc,
                           categories=gateway.list_categories(),
                           upload_form=ImageUploadForm(),
                           active='docs')


@admin_bp.route('/docs/add', methods=['GET', 'POST'])
@login_required
def doc_add():
    target = url_for('admin.docs')
    if request.method != 'POST':
        return redirect(target, code=303)

    form = DocumentForm()
    if not form.validate_on_submit():
        return redirect_with_message(target, first_form_error(form), 'danger')

    is_draft = form.is_draft.data
    publish_date = DocumentService.publish_date_for_create(is_draft, form.publish_date.data)
    try:
        get_gateway().add_document(title=form.title.data,
                                   content=form.content.data,
                                   category_id=form.category_id.data,
                                   publish_date=publish_date,
                                   is_draft=is_draft)
    except SupportDeskError as e:
        return redirect_with_message(target, f'新增文档失败: {e.message}', 'danger')

    title = form.title.data
    current_app.logger.info(f'新增文档: {title} (草稿={is_draft})')
    message = f'成功储存草稿: {title}' if is_draft else f'成功新增文档: {title}'
    return redirect_with_message(target, message, 'success')


@admin_bp.route('/docs/update', methods=['GET', 'POST'])
@login_required
def doc_update():
    target = url_for('admin.docs')
    if request.method != 'POST':
        return redirect(target, code=303)

    form = DocumentForm()
    if not form.validate_on_submit() or not form.id.data:
        return redirect_with_message(target, first_form_error(form, '必填栏位不能为空'), 'danger')

    gateway = get_gateway()
    doc_id = form.id.data
    edit_url = url_for('admin.doc_edit', id=doc_id)
    try:
        old_doc = gateway.get_document(doc_id)
    except NotFoundError:
        return redirect_with_message(edit_url, '无法获取原始文档资料', 'danger')

    is_draft = form.is_draft.data
    publish_date = DocumentService.publish_date_for_update(old_doc.publish_date,
                                                           is_draft,
                                                           form.publish_date.data)
    try:
        gateway.update_document(doc_id,
                                title=form.title.data,
                                content=form.content.data,
                                category_id=form.category_id.data,
                                publish_date=publish_date,
                                is_draft=is_draft)
    except SupportDeskError as e:
        return redirect_with_message(edit_url, f'更新文档失败: {e.message}', 'danger')

    current_app.logger.info(f'更新文档 {doc_id} (草稿={is_draft}, 发布日期={publish_date})')
    if form.auto_close.data == 'true':
        edit_url = url_for('admin.doc_edit', id=doc_id, autoClose='true')
    message = '草稿已成功更新' if is_draft else '文档已成功更新'
    return redirect_with_message(edit_url, message, 'success')


@admin_bp.route('/docs/delete', methods=['GET', 'POST'])
@login_required
def doc_delete():
    target = url_for('admin.docs')
    if request.method != 'POST':
        return redirect(target, code=303)

    form = DeleteForm()
    if not form.validate_on_submit():
        return redirect_with_message(target, '无效的文档ID', 'danger')

    try:
        get_gateway().delete_document(form.id.data)
    except SupportDeskError as e:
        return redirect_with_message(target, f'删除文档失败: {e.message}', 'danger')

    current_app.logger.info(f'删除文档 {form.id.data}')
    return redirect_with_message(target, '文档已成功删除', 'success')


# ----------------------------------------------------------------------
# 图片管理
# ----------------------------------------------------------------------

@admin_bp.route('/images')
@login_required
def images():
    keyword = request.args.get('q', '').strip()
    return render_template('admin/images.html',
                           images=get_gateway().list_images(keyword or None),
                           keyword=keyword,
                           upload_form=ImageUploadForm(),
                           delete_form=DeleteForm(),
                           format_size=format_size,
                           active='images')


def _upload_failed(from_editor, error):
    if from_editor:
        return jsonify(error.to_dict()), error.code
    return redirect_with_message(url_for('admin.images'), error.message, 'danger')


@admin_bp.route('/images/upload', methods=['POST'])
@login_required
def image_upload():
    """
    图片上传
    source=editor (编辑器内上传) 返回 JSON，其余情况重定向回图片列表
    """
    form = ImageUploadForm()
    from_editor = form.source.data == 'editor'
    if not form.validate_on_submit():
        return _upload_failed(from_editor, ValidationError(first_form_error(form)))

    try:
        image = ImageService.save_upload(form.image.data)
    except SupportDeskError as e:
        return _upload_failed(from_editor, e)

    if from_editor:
        return jsonify({'success': True, 'url': image.url, 'id': image.id})
    return redirect_with_message(url_for('admin.images'), '图片上传成功', 'success')


@admin_bp.route('/images/delete', methods=['GET', 'POST'])
@login_required
def image_delete():
    target = url_for('admin.images')
    if request.method != 'POST':
        return redirect(target, code=303)

    form = DeleteForm()
    if not form.validate_on_submit():
        return redirect_with_message(target, '无效的图片ID', 'danger')

    try:
        get_gateway().delete_image(form.id.data)
    except SupportDeskError as e:
        return redirect_with_message(target, f'删除图片失败: {e.message}', 'danger')

    current_app.logger.info(f'删除图片 {form.id.data}')
    return redirect_with_message(target, '图片已成功删除', 'success')
