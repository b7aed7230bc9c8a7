"""业务异常 - 统一映射为 {message, error?} 响应"""
from fastapi import HTTPException


class ValidationError(HTTPException):
    """缺少必填字段或字段格式错误"""
    def __init__(self, detail: str = "请求数据无效"):
        super().__init__(status_code=400, detail=detail)


class NotFoundError(HTTPException):
    """引用的记录不存在"""
    def __init__(self, detail: str = "记录不存在"):
        super().__init__(status_code=404, detail=detail)


class DuplicateKeyError(HTTPException):
    """唯一约束冲突（编号或标题重复）"""
    def __init__(self, detail: str = "数据重复，违反唯一约束"):
        super().__init__(status_code=400, detail=detail)
