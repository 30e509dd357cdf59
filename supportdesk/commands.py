import click
from datetime import datetime
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from supportdesk.exceptions import SupportDeskError
from supportdesk.gateway import get_gateway
from supportdesk.services.session_service import AdminSessionService


@click.command('init-db')
@with_appcontext
def init_db():
    """
    建立数据目录与数据表，并在没有任何用户时写入默认管理员。
    可重复执行，已有数据不受影响。
    """
    try:
        admin = get_gateway().get_user_by_username(current_app.config['DEFAULT_ADMIN_USERNAME'])
    except SupportDeskError as e:
        click.echo(click.style(f'✘ 初始化失败: {e.message}', fg='red'))
        raise SystemExit(1)

    click.echo(click.style('✔ 数据库已就绪。', fg='green'))
    if admin is not None:
        click.echo(f' - 默认管理员: {admin.username}')


@click.command('status')
@with_appcontext
def status():
    """查看当前数据库中的数据统计"""
    click.echo(click.style('📊 支援中心数据库状态:', fg='cyan', bold=True))

    try:
        gateway = get_gateway()
        click.echo(f" - 分类 (Categories): \t{len(gateway.list_categories())}")
        click.echo(f" - 文档 (Docs): \t\t{gateway.count_documents()}")
        click.echo(f" - 草稿 (Drafts): \t{gateway.count_documents('drafts')}")
        click.echo(f" - 图片 (Images): \t{len(gateway.list_images())}")
    except (SupportDeskError, SQLAlchemyError) as e:
        click.echo(click.style(f'✘ 数据库读取失败: {str(e)}', fg='red'))
        click.echo("请检查 DATA_DIR 是否可写，或先执行 'flask init-db'")
        raise SystemExit(1)


@click.command('cleanup-sessions')
@with_appcontext
def cleanup_sessions():
    """删除所有已过期的后台会话"""
    removed = AdminSessionService.sweep(datetime.now())
    click.echo(click.style(f'✔ 已清理 {removed} 个过期会话。', fg='green'))
