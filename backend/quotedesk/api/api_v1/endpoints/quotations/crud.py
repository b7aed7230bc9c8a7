"""报价单 CRUD 操作"""

from datetime import datetime, timedelta
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.core.config import settings
from quotedesk.core.deps import get_db
from quotedesk.core.exceptions import NotFoundError, ValidationError
from quotedesk.core.logging_config import get_logger
from quotedesk.models.party import Party
from quotedesk.models.quotation import Quotation
from quotedesk.schemas.quotation import (
    QuotationCreate, QuotationUpdate, QuotationResponse, QuotationListResponse,
    QuotationStatus
)
from quotedesk.services.numbering import ensure_title_available, next_quotation_number, unique_title
from quotedesk.services.quotations import base_quotation_query, load_quotation, set_quotation_items
from .core import build_quotation_response, merge_business_details

router = APIRouter()
logger = get_logger(__name__)


async def get_party_or_404(db: AsyncSession, party_id: int) -> Party:
    party = await db.get(Party, party_id)
    if not party:
        raise NotFoundError("客户不存在")
    return party


async def check_revision_of(db: AsyncSession, revision_of: Optional[int], self_id: Optional[int] = None) -> None:
    """修订来源必须是已存在的其他报价单"""
    if revision_of is None:
        return
    if self_id is not None and revision_of == self_id:
        raise ValidationError("报价单不能修订自身")
    if not await db.get(Quotation, revision_of):
        raise NotFoundError("修订来源报价单不存在")


@router.get("/", response_model=QuotationListResponse)
async def list_quotations(
    *,
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[QuotationStatus] = Query(None, description="状态筛选"),
    search: Optional[str] = Query(None, description="按标题/单号/客户名搜索"),
) -> Any:
    """获取报价单列表（按报价日期倒序）"""
    query = base_quotation_query()

    if status:
        query = query.where(Quotation.status == status)

    if search:
        party_match = select(Party.id).where(Party.name.contains(search))
        query = query.where(
            Quotation.title.contains(search) |
            Quotation.quotation_number.contains(search) |
            Quotation.party_id.in_(party_match)
        )

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    query = query.order_by(Quotation.date.desc(), Quotation.id.desc())
    query = query.offset((page - 1) * limit).limit(limit)

    result = await db.execute(query)
    quotations = result.scalars().all()

    return QuotationListResponse(
        data=[build_quotation_response(q) for q in quotations],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/party/{party_id}", response_model=List[QuotationResponse])
async def list_party_quotations(
    *,
    db: AsyncSession = Depends(get_db),
    party_id: int,
) -> Any:
    """获取某客户的全部报价单"""
    await get_party_or_404(db, party_id)

    result = await db.execute(
        base_quotation_query()
        .where(Quotation.party_id == party_id)
        .order_by(Quotation.date.desc(), Quotation.id.desc())
    )
    return [build_quotation_response(q) for q in result.scalars().all()]


@router.post("/", response_model=QuotationResponse, status_code=201)
async def create_quotation(
    *,
    db: AsyncSession = Depends(get_db),
    quotation_in: QuotationCreate,
) -> Any:
    """
    创建报价单

    - 未指定标题时按“客户名_Quotation”生成，重名时自动追加 _vN
    - 指定标题时必须未被占用
    - 金额由明细计算，不接受客户端提交的汇总值
    """
    party = await get_party_or_404(db, quotation_in.party_id)
    await check_revision_of(db, quotation_in.revision_of)

    if quotation_in.title:
        await ensure_title_available(db, quotation_in.title)
        title = quotation_in.title
    else:
        title = await unique_title(db, f"{party.name}_Quotation")

    now = datetime.utcnow()
    date = quotation_in.date or now
    business = quotation_in.business_details.model_dump() if quotation_in.business_details else None

    quotation = Quotation(
        party_id=party.id,
        title=title,
        quotation_number=await next_quotation_number(db),
        date=date,
        valid_until=quotation_in.valid_until or date + timedelta(days=settings.QUOTATION_VALID_DAYS),
        business_details=merge_business_details(business),
        notes=quotation_in.notes or "",
        terms_conditions=quotation_in.terms_conditions or "",
        status=quotation_in.status,
        revision_number=quotation_in.revision_number,
        revision_of=quotation_in.revision_of,
    )
    set_quotation_items(quotation, quotation_in.items)

    db.add(quotation)
    await db.commit()

    logger.info(
        f"创建报价单: {quotation.quotation_number} {quotation.title}，"
        f"{len(quotation_in.items)} 行，总额 {quotation.total_amount}"
    )
    quotation = await load_quotation(db, quotation.id)
    return build_quotation_response(quotation)


@router.get("/{quotation_id}", response_model=QuotationResponse)
async def get_quotation(
    *,
    db: AsyncSession = Depends(get_db),
    quotation_id: int,
) -> Any:
    """获取报价单详情"""
    quotation = await load_quotation(db, quotation_id)
    if not quotation:
        raise NotFoundError("报价单不存在")
    return build_quotation_response(quotation)


@router.put("/{quotation_id}", response_model=QuotationResponse)
async def update_quotation(
    *,
    db: AsyncSession = Depends(get_db),
    quotation_id: int,
    quotation_in: QuotationUpdate,
) -> Any:
    """
    更新报价单

    只覆盖提交的字段；提交 items 时替换全部明细并重算金额，
    否则已保存的金额保持不变。状态可以设为任意合法值。
    """
    quotation = await load_quotation(db, quotation_id)
    if not quotation:
        raise NotFoundError("报价单不存在")

    update_data = quotation_in.model_dump(exclude_unset=True, exclude={"items", "business_details"})

    if update_data.get("party_id") is not None and update_data["party_id"] != quotation.party_id:
        await get_party_or_404(db, update_data["party_id"])

    if update_data.get("title") and update_data["title"] != quotation.title:
        await ensure_title_available(db, update_data["title"], exclude_id=quotation.id)

    if "revision_of" in update_data:
        await check_revision_of(db, update_data["revision_of"], self_id=quotation.id)

    for field, value in update_data.items():
        # 必填字段传 null 视为未修改
        if value is None and field in ("party_id", "title", "status", "revision_number"):
            continue
        setattr(quotation, field, value)

    if quotation_in.business_details is not None:
        quotation.business_details = merge_business_details(quotation_in.business_details.model_dump())

    if quotation_in.items is not None:
        set_quotation_items(quotation, quotation_in.items)

    await db.commit()

    logger.info(f"更新报价单: {quotation.title} 字段 {sorted(quotation_in.model_fields_set)}")
    quotation = await load_quotation(db, quotation_id)
    return build_quotation_response(quotation)


@router.delete("/{quotation_id}")
async def delete_quotation(
    *,
    db: AsyncSession = Depends(get_db),
    quotation_id: int,
) -> Any:
    """删除报价单（其修订版保留，revision_of 指向已删除的ID）"""
    quotation = await load_quotation(db, quotation_id)
    if not quotation:
        raise NotFoundError("报价单不存在")

    title = quotation.title
    await db.delete(quotation)
    await db.commit()

    logger.info(f"删除报价单: {title}")
    return {"message": "删除成功", "id": quotation_id}
