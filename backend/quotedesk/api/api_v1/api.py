"""API 路由聚合 - 单机版（无认证）"""
from fastapi import APIRouter

from quotedesk.api.api_v1.endpoints import parties, components
# 报价单按功能拆分为多个子模块
from quotedesk.api.api_v1.endpoints.quotations import router as quotations_router

api_router = APIRouter()

api_router.include_router(parties.router, prefix="/parties", tags=["客户管理"])
api_router.include_router(components.router, prefix="/components", tags=["配件目录"])
api_router.include_router(quotations_router, prefix="/quotations", tags=["报价单管理"])
