"""客户管理API（单机版）"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.core.deps import get_db
from quotedesk.core.exceptions import NotFoundError, ValidationError
from quotedesk.core.logging_config import get_logger
from quotedesk.models.party import Party
from quotedesk.models.quotation import Quotation
from quotedesk.schemas.party import (
    PartyCreate, PartyUpdate, PartyResponse, PartyListResponse
)
from quotedesk.services.numbering import next_party_id

router = APIRouter()
logger = get_logger(__name__)


async def count_party_quotations(db: AsyncSession, party_id: int) -> int:
    """统计引用该客户的报价单数量"""
    return (await db.execute(
        select(func.count(Quotation.id)).where(Quotation.party_id == party_id)
    )).scalar() or 0


@router.get("/", response_model=PartyListResponse)
async def list_parties(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    search: Optional[str] = Query(None, description="按名称/编号/电话搜索"),
) -> Any:
    """获取客户列表（新建的在前）"""
    query = select(Party)

    if search:
        query = query.where(
            Party.name.contains(search) |
            Party.party_code.contains(search) |
            Party.phone.contains(search)
        )

    # 统计总数
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    # 分页查询
    query = query.order_by(Party.created_at.desc(), Party.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)

    result = await db.execute(query)
    parties = result.scalars().all()

    # 批量统计报价单数量
    counts = {}
    if parties:
        count_result = await db.execute(
            select(Quotation.party_id, func.count(Quotation.id))
            .where(Quotation.party_id.in_([p.id for p in parties]))
            .group_by(Quotation.party_id)
        )
        counts = dict(count_result.all())

    data = []
    for p in parties:
        resp = PartyResponse.model_validate(p)
        resp.quotation_count = counts.get(p.id, 0)
        data.append(resp)

    return PartyListResponse(data=data, total=total, page=page, limit=limit)


@router.post("/", response_model=PartyResponse, status_code=201)
async def create_party(
    *,
    db: AsyncSession = Depends(get_db),
    party_in: PartyCreate,
) -> Any:
    """创建客户，自动分配编号"""
    party_code = await next_party_id(db)

    party = Party(
        **party_in.model_dump(),
        party_code=party_code,
    )
    if party.address is None:
        party.address = ""

    db.add(party)
    await db.commit()
    await db.refresh(party)

    logger.info(f"创建客户: {party.party_code} {party.name}")
    return PartyResponse.model_validate(party)


@router.get("/{party_id}", response_model=PartyResponse)
async def get_party(
    *,
    db: AsyncSession = Depends(get_db),
    party_id: int,
) -> Any:
    """获取客户详情"""
    party = await db.get(Party, party_id)
    if not party:
        raise NotFoundError("客户不存在")

    resp = PartyResponse.model_validate(party)
    resp.quotation_count = await count_party_quotations(db, party_id)
    return resp


@router.put("/{party_id}", response_model=PartyResponse)
async def update_party(
    *,
    db: AsyncSession = Depends(get_db),
    party_id: int,
    party_in: PartyUpdate,
) -> Any:
    """更新客户（编号不可修改）"""
    party = await db.get(Party, party_id)
    if not party:
        raise NotFoundError("客户不存在")

    update_data = party_in.model_dump(exclude_unset=True)
    for field in ("name", "phone"):
        if field in update_data and not update_data[field]:
            raise ValidationError("名称和电话为必填项")
    if "address" in update_data and update_data["address"] is None:
        update_data["address"] = ""

    for field, value in update_data.items():
        setattr(party, field, value)

    await db.commit()
    await db.refresh(party)

    logger.info(f"更新客户: {party.party_code} 字段 {list(update_data.keys())}")
    resp = PartyResponse.model_validate(party)
    resp.quotation_count = await count_party_quotations(db, party_id)
    return resp


@router.delete("/{party_id}")
async def delete_party(
    *,
    db: AsyncSession = Depends(get_db),
    party_id: int,
) -> Any:
    """删除客户（已被报价单引用的客户不能删除）"""
    party = await db.get(Party, party_id)
    if not party:
        raise NotFoundError("客户不存在")

    quotation_count = await count_party_quotations(db, party_id)
    if quotation_count > 0:
        raise ValidationError(f"该客户已被 {quotation_count} 个报价单引用，无法删除")

    await db.delete(party)
    await db.commit()

    logger.info(f"删除客户: {party.party_code} {party.name}")
    return {"message": "删除成功", "id": party_id}
