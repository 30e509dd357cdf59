class SupportDeskError(Exception):
    """支援中心基础异常类"""
    def __init__(self, message, code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['code'] = self.code
        rv['success'] = False
        return rv


class ValidationError(SupportDeskError):
    """输入数据不合法"""
    def __init__(self, message="Invalid data", payload=None):
        super().__init__(message, code=400, payload=payload)


class NotFoundError(SupportDeskError):
    """记录不存在"""
    def __init__(self, message="Not found", payload=None):
        super().__init__(message, code=404, payload=payload)


class StorageError(SupportDeskError):
    """数据库或文件存储失败"""
    def __init__(self, message="Storage failure", payload=None):
        super().__init__(message, code=500, payload=payload)
