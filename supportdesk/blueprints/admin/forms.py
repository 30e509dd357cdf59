from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import StringField, TextAreaField, IntegerField, BooleanField, HiddenField, SubmitField
from wtforms.validators import DataRequired, InputRequired, Length, Optional

from supportdesk.utils.validators import validate_positive_id

REQUIRED_DOC_FIELDS = '标题、分类和内容不能为空'


class CategoryForm(FlaskForm):
    """分类新增/编辑表单 (id 为空表示新增)"""
    id = IntegerField(validators=[Optional(), validate_positive_id])
    name = StringField('分类名称', validators=[
        DataRequired(message='分类名称不能为空'),
        Length(max=128, message='分类名称过长')
    ])
    submit = SubmitField('保存')


class DeleteForm(FlaskForm):
    """按 ID 删除"""
    id = IntegerField(validators=[InputRequired(message='无效的ID'), validate_positive_id])


class DocumentForm(FlaskForm):
    """文档编辑表单，content 为 Markdown 原文"""
    id = IntegerField(validators=[Optional(), validate_positive_id])
    title = StringField('标题', validators=[
        DataRequired(message=REQUIRED_DOC_FIELDS),
        Length(max=256, message='标题过长')
    ])
    category_id = IntegerField('分类', validators=[
        DataRequired(message=REQUIRED_DOC_FIELDS),
        validate_positive_id
    ])
    # 日期在业务层解析，格式错误时退回到当天
    publish_date = StringField('发布日期', validators=[Optional()])
    content = TextAreaField('内容', validators=[DataRequired(message=REQUIRED_DOC_FIELDS)])
    is_draft = BooleanField('存为草稿')
    auto_close = HiddenField()
    submit = SubmitField('保存')


class ImageUploadForm(FlaskForm):
    """图片上传表单；source=editor 时返回 JSON"""
    image = FileField('选择图片', validators=[FileRequired(message='请选择要上传的图片')])
    source = HiddenField()
    submit = SubmitField('上传')
