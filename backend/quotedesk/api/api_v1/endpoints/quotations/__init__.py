"""
报价单管理API模块

按功能拆分为多个子模块：
- core: 响应构建、通用查询
- crud: 创建、读取、更新、删除操作
- revisions: 修订版创建与查询
"""

from fastapi import APIRouter
from .crud import router as crud_router
from .revisions import router as revisions_router

router = APIRouter()

# 合并所有路由（修订路由带 /{id}/revisions 后缀，与 crud 不冲突）
router.include_router(crud_router)
router.include_router(revisions_router)
