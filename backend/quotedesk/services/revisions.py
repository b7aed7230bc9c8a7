"""
报价单修订

- create_revision: 复制一份报价单作为新修订版（草稿），修订号 +1
- list_revisions: 找到修订树的根，返回根及其全部后代
"""

import copy
from datetime import datetime, timedelta
from typing import List, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.core.config import settings
from quotedesk.core.exceptions import NotFoundError
from quotedesk.core.logging_config import get_logger
from quotedesk.models.quotation import Quotation
from quotedesk.services.numbering import (
    ensure_title_available, parse_revision_token, revision_quotation_number, unique_title
)
from quotedesk.services.quotations import base_quotation_query, build_items, load_quotation

logger = get_logger(__name__)


def determine_revision_number(source: Quotation) -> int:
    """
    计算新修订版的修订号

    1. 原单有修订号（>0）则 +1
    2. 否则尝试从 quote-xxx-N 格式的单号或标题中解析 N，再 +1
    3. 都没有则为 1
    """
    if source.revision_number:
        return int(source.revision_number) + 1

    for text in (source.quotation_number, source.title):
        parsed = parse_revision_token(text)
        if parsed is not None:
            return parsed + 1

    return 1


async def create_revision(
    db: AsyncSession,
    source_id: int,
    title: Optional[str] = None,
    notes: Optional[str] = None,
) -> Quotation:
    """基于已有报价单创建修订版"""
    source = await load_quotation(db, source_id)
    if not source:
        raise NotFoundError("原报价单不存在")

    revision_number = determine_revision_number(source)
    party_code = source.party.party_code if source.party else ""
    quotation_number = revision_quotation_number(party_code, revision_number)

    if title:
        await ensure_title_available(db, title)
    else:
        title = await unique_title(db, quotation_number)

    now = datetime.utcnow()
    revision = Quotation(
        party_id=source.party_id,
        title=title,
        quotation_number=quotation_number,
        date=now,
        valid_until=now + timedelta(days=settings.QUOTATION_VALID_DAYS),
        business_details=copy.deepcopy(source.business_details),
        total_amount=source.total_amount,
        total_purchase=source.total_purchase,
        total_tax=source.total_tax,
        notes=notes if notes else source.notes,
        terms_conditions=source.terms_conditions,
        # 新修订版一律从草稿开始
        status="draft",
        revision_of=source.id,
        revision_number=revision_number,
    )
    # 明细原样复制，金额沿用原单已保存的汇总
    revision.items = build_items(source.items)
    db.add(revision)
    await db.commit()

    logger.info(f"创建修订版: {source.title} -> {revision.title} (修订号 {revision_number})")
    return await load_quotation(db, revision.id)


async def find_revision_root(db: AsyncSession, quotation: Quotation) -> int:
    """沿 revision_of 向上找到根报价单ID（父单已删除或出现环时停止）"""
    current = quotation
    visited: Set[int] = {quotation.id}
    while current.revision_of is not None and current.revision_of not in visited:
        parent = await db.get(Quotation, current.revision_of)
        if parent is None:
            # 父单已被删除：保留悬空引用的ID作为根，兄弟修订版仍能被一起找到
            return current.revision_of
        visited.add(parent.id)
        current = parent
    return current.id


async def list_revisions(db: AsyncSession, quotation_id: int) -> List[Quotation]:
    """获取报价单所在修订树的全部报价单，按修订号、日期升序"""
    quotation = await db.get(Quotation, quotation_id)
    if not quotation:
        raise NotFoundError("报价单不存在")

    root_id = await find_revision_root(db, quotation)

    # 自根向下逐层收集后代
    member_ids: Set[int] = {root_id}
    frontier = {root_id}
    while frontier:
        result = await db.execute(
            select(Quotation.id).where(Quotation.revision_of.in_(frontier))
        )
        children = set(result.scalars().all()) - member_ids
        member_ids |= children
        frontier = children

    result = await db.execute(
        base_quotation_query()
        .where(Quotation.id.in_(member_ids))
        .order_by(Quotation.revision_number.asc(), Quotation.date.asc(), Quotation.id.asc())
    )
    return list(result.scalars().all())
