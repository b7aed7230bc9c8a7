from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from quotedesk.core.config import settings
from quotedesk.core.exceptions import DuplicateKeyError
from quotedesk.core.logging_config import get_logger

logger = get_logger(__name__)


def error_body(message: str, error=None) -> dict:
    """统一的错误响应体"""
    body = {"message": message}
    if error is not None:
        body["error"] = error
    return body


def setup_exception_handlers(app: FastAPI):
    """设置异常处理器"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
        else:
            logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    # 请求参数校验失败统一按 400 返回
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"请求验证错误: {request.method} {request.url.path} {exc.errors()}")
        error_details = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
            error_details.append(f"{field}: {error['msg']}")

        return JSONResponse(
            status_code=400,
            content=error_body("请求参数验证失败", error_details),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        logger.error(f"唯一约束冲突: {request.method} {request.url.path} {exc.orig}")
        duplicate = DuplicateKeyError()
        return JSONResponse(
            status_code=duplicate.status_code,
            content=error_body(
                duplicate.detail,
                str(exc.orig) if settings.is_development else None,
            ),
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        logger.exception(f"未处理的异常: {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_body(
                "服务器内部错误",
                str(exc) if settings.is_development else None,
            ),
        )
