import os
from supportdesk import create_app
from supportdesk.extensions import db
from supportdesk.models import User, AdminSession, Category, Document, Image

# 从环境变量获取配置模式
# 支持 FLASK_ENV 或 FLASK_CONFIG
config_name = os.getenv('FLASK_ENV') or os.getenv('FLASK_CONFIG') or 'default'
if config_name == 'dev':
    config_name = 'development'

app = create_app(config_name)


@app.shell_context_processor
def make_shell_context():
    """
    配置 Flask Shell 上下文。
    允许在命令行中使用 'flask shell' 时自动导入 db 和模型。
    """
    return dict(
        db=db,
        app=app,
        User=User,
        AdminSession=AdminSession,
        Category=Category,
        Document=Document,
        Image=Image,
    )


if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    print("-------------------------------------------------------")
    print(f"   支援中心启动中: http://localhost:{port}")
    print("   后台入口: /admin (默认账号 admin / admin)")
    print("-------------------------------------------------------")
    app.run(host='0.0.0.0', port=port)
