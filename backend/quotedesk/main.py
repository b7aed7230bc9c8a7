from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quotedesk.api.api_v1.api import api_router
from quotedesk.core.config import settings
from quotedesk.core.error_handler import setup_exception_handlers
from quotedesk.core.logging_config import setup_logging, get_logger
from quotedesk.db.session import SessionLocal
from quotedesk.db.migrations import run_migrations
from quotedesk.db.init_db import ensure_tables_exist

# 初始化日志系统
setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时
    logger.info("🚀 应用启动中...")

    # 确保数据库表存在
    await ensure_tables_exist()
    logger.info("📊 数据库表已就绪")

    # 运行数据库迁移和基础数据检查
    async with SessionLocal() as db:
        result = await run_migrations(db)

    if result.get("columns_added"):
        logger.info(f"📦 数据库结构更新: 添加了 {len(result['columns_added'])} 个字段")
        for col in result["columns_added"]:
            logger.info(f"   ✅ {col}")

    catalog_result = result.get("component_catalog", {})
    if catalog_result.get("action") == "seeded":
        logger.info(f"🔧 基础数据: 已写入 {catalog_result['seeded']} 个默认配件")

    if result.get("old_version") != result.get("new_version"):
        logger.info(f"📊 数据库版本: {result.get('old_version') or '初始'} → {result.get('new_version')}")

    for error in result.get("errors", []):
        logger.warning(f"数据库迁移未完成: {error}")

    yield
    # 关闭时
    logger.info("🛑 应用关闭中...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    description="PC配件报价系统 - 单机版",
    lifespan=lifespan
)

# CORS配置
if settings.BACKEND_CORS_ORIGINS:
    logger.info(f"配置CORS，允许的源: {settings.BACKEND_CORS_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

setup_exception_handlers(app)

logger.info(f"注册API路由，前缀: {settings.API_PREFIX}")
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {"message": "PC配件报价系统 - 单机版"}


@app.get("/health")
@app.get(f"{settings.API_PREFIX}/health")
async def health():
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}


# PyInstaller 打包后的入口点
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")
