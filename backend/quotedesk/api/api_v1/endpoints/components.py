"""配件目录API（单机版）"""

from decimal import Decimal
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quotedesk.core.config import settings
from quotedesk.core.deps import get_db
from quotedesk.core.exceptions import NotFoundError
from quotedesk.core.logging_config import get_logger
from quotedesk.models.component import Component, ComponentModel
from quotedesk.schemas.component import (
    ComponentCreate, ComponentUpdate, ComponentResponse, ComponentListResponse
)

router = APIRouter()
logger = get_logger(__name__)


def component_query():
    """配件查询（预加载型号）"""
    return select(Component).options(selectinload(Component.models))


def build_models(models_in) -> List[ComponentModel]:
    """按提交顺序构建型号行"""
    return [
        ComponentModel(
            model=m.model,
            hsn_sac=m.hsn_sac or settings.DEFAULT_HSN_SAC,
            warranty=m.warranty,
            purchase_with_gst=Decimal(str(m.purchase_with_gst)),
            sale_with_gst=Decimal(str(m.sale_with_gst)),
            sort_order=index,
        )
        for index, m in enumerate(models_in)
    ]


async def load_component(db: AsyncSession, component_id: int) -> Optional[Component]:
    result = await db.execute(
        component_query().where(Component.id == component_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_components(db: AsyncSession, *conditions) -> List[Component]:
    result = await db.execute(
        component_query().where(*conditions).order_by(Component.category, Component.brand, Component.id)
    )
    return list(result.scalars().all())


@router.get("/", response_model=ComponentListResponse)
async def list_components(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    category: Optional[str] = Query(None, description="分类"),
    brand: Optional[str] = Query(None, description="品牌"),
) -> Any:
    """获取配件列表"""
    query = select(Component)

    if category:
        query = query.where(Component.category == category)
    if brand:
        query = query.where(Component.brand == brand)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    query = query.options(selectinload(Component.models))
    query = query.order_by(Component.category, Component.brand, Component.id)
    query = query.offset((page - 1) * limit).limit(limit)

    result = await db.execute(query)
    components = result.scalars().all()

    return ComponentListResponse(
        data=[ComponentResponse.model_validate(c) for c in components],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/search", response_model=List[ComponentResponse])
async def search_components(
    *,
    db: AsyncSession = Depends(get_db),
    query: str = Query(..., min_length=1, description="关键字（匹配分类/品牌/型号）"),
) -> Any:
    """按关键字搜索配件"""
    keyword = query.strip()
    model_match = select(ComponentModel.component_id).where(ComponentModel.model.contains(keyword))
    components = await find_components(
        db,
        Component.category.contains(keyword) |
        Component.brand.contains(keyword) |
        Component.id.in_(model_match),
    )
    return [ComponentResponse.model_validate(c) for c in components]


@router.get("/category/{category}", response_model=List[ComponentResponse])
async def list_by_category(
    *,
    db: AsyncSession = Depends(get_db),
    category: str,
) -> Any:
    """按分类获取配件"""
    components = await find_components(db, Component.category == category)
    if not components:
        raise NotFoundError(f"分类 {category} 下没有配件")
    return [ComponentResponse.model_validate(c) for c in components]


@router.get("/brand/{brand}", response_model=List[ComponentResponse])
async def list_by_brand(
    *,
    db: AsyncSession = Depends(get_db),
    brand: str,
) -> Any:
    """按品牌获取配件"""
    components = await find_components(db, Component.brand == brand)
    if not components:
        raise NotFoundError(f"品牌 {brand} 下没有配件")
    return [ComponentResponse.model_validate(c) for c in components]


@router.post("/", response_model=ComponentResponse, status_code=201)
async def create_component(
    *,
    db: AsyncSession = Depends(get_db),
    component_in: ComponentCreate,
) -> Any:
    """创建配件"""
    component = Component(
        category=component_in.category,
        brand=component_in.brand,
    )
    component.models = build_models(component_in.models)

    db.add(component)
    await db.commit()

    logger.info(f"创建配件: {component.category}/{component.brand}，{len(component_in.models)} 个型号")
    component = await load_component(db, component.id)
    return ComponentResponse.model_validate(component)


@router.get("/{component_id}", response_model=ComponentResponse)
async def get_component(
    *,
    db: AsyncSession = Depends(get_db),
    component_id: int,
) -> Any:
    """获取配件详情"""
    component = await load_component(db, component_id)
    if not component:
        raise NotFoundError("配件不存在")
    return ComponentResponse.model_validate(component)


@router.put("/{component_id}", response_model=ComponentResponse)
async def update_component(
    *,
    db: AsyncSession = Depends(get_db),
    component_id: int,
    component_in: ComponentUpdate,
) -> Any:
    """更新配件，提供 models 时整体替换型号列表"""
    component = await load_component(db, component_id)
    if not component:
        raise NotFoundError("配件不存在")

    update_data = component_in.model_dump(exclude_unset=True, exclude={"models"})
    for field, value in update_data.items():
        if value is not None:
            setattr(component, field, value)

    if component_in.models is not None:
        component.models = build_models(component_in.models)

    await db.commit()

    logger.info(f"更新配件: {component.category}/{component.brand}")
    component = await load_component(db, component_id)
    return ComponentResponse.model_validate(component)


@router.delete("/{component_id}")
async def delete_component(
    *,
    db: AsyncSession = Depends(get_db),
    component_id: int,
) -> Any:
    """删除配件（已生成的报价明细是快照，不受影响）"""
    component = await load_component(db, component_id)
    if not component:
        raise NotFoundError("配件不存在")

    await db.delete(component)
    await db.commit()

    logger.info(f"删除配件: {component.category}/{component.brand}")
    return {"message": "删除成功", "id": component_id}
