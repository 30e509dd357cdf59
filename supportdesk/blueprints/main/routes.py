from flask import render_template, request, redirect, url_for, jsonify, abort, current_app, send_from_directory
from markupsafe import Markup

from supportdesk.blueprints.main import main_bp
from supportdesk.exceptions import NotFoundError
from supportdesk.gateway import get_gateway
from supportdesk.services.document_service import DocumentService


@main_bp.route('/')
def index():
    """分类列表；指定 category_id 时同时列出该分类下已发布的文档"""
    gateway = get_gateway()
    category_id = request.args.get('category_id', type=int)
    category_name = request.args.get('category_name', '')

    categories = gateway.list_categories()
    docs = []
    if category_id:
        docs = gateway.list_documents(category_id, status='published')
        if not category_name:
            category_name = next((c.name for c in categories if c.id == category_id), '')

    return render_template('index.html',
                           title=current_app.config['SITE_TITLE'],
                           categories=categories,
                           docs=docs,
                           current_category=category_name,
                           current_category_id=category_id or 0)


@main_bp.route('/index')
def legacy_index():
    """旧首页地址"""
    target = url_for('main.index')
    if request.query_string:
        target += '?' + request.query_string.decode()
    return redirect(target, code=301)


@main_bp.route('/doc')
def doc():
    """显示单篇已发布文档"""
    doc_id = request.args.get('id', type=int)
    if not doc_id:
        abort(404)

    gateway = get_gateway()
    document = gateway.get_document(doc_id)
    # 草稿不对外显示
    if document.is_draft:
        raise NotFoundError(f'文档未发布: {doc_id}')

    html_content = DocumentService.render_markdown(document.content)
    site_title = current_app.config['SITE_TITLE']
    return render_template('doc.html',
                           title=f'{document.title} | {site_title}',
                           doc=document,
                           html_content=Markup(html_content),
                           categories=gateway.list_categories(),
                           current_category=request.args.get('category') or document.category_name,
                           current_category_id=document.category_id)


@main_bp.route('/search')
def search():
    """关键字搜索，返回 HTML 片段"""
    query = request.args.get('query', '').strip()
    results = get_gateway().search_documents(query) if query else None
    return render_template('search_results.html', query=query, results=results)


@main_bp.route('/category-docs')
def category_docs():
    """某分类下已发布文档的 JSON 列表"""
    category_id = request.args.get('category_id', type=int)
    if not category_id:
        return jsonify({'status': 'error', 'message': '无效的分类ID'}), 400
    docs = get_gateway().list_documents(category_id, status='published')
    return jsonify({'status': 'success', 'result': [d.to_summary() for d in docs]})


@main_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    """上传图片的公开访问地址"""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
