"""报价单加载与明细维护"""

from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quotedesk.core.config import settings
from quotedesk.models.quotation import Quotation, QuotationItem


def base_quotation_query():
    """构建包含常用关联关系的基础查询"""
    return select(Quotation).options(
        selectinload(Quotation.party),
        selectinload(Quotation.items),
        selectinload(Quotation.revision_parent),
    )


async def load_quotation(db: AsyncSession, quotation_id: int) -> Optional[Quotation]:
    """加载包含关联的报价单"""
    result = await db.execute(
        base_quotation_query().where(Quotation.id == quotation_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def build_items(items_data: Iterable) -> List[QuotationItem]:
    """根据明细数据（schema 或 ORM 对象）构建新的明细行"""
    items = []
    for index, item_in in enumerate(items_data):
        gst = item_in.gst_percentage
        items.append(QuotationItem(
            category=item_in.category,
            brand=item_in.brand,
            model=item_in.model,
            hsn_sac=item_in.hsn_sac or "",
            warranty=item_in.warranty or "",
            quantity=int(item_in.quantity),
            purchase_with_gst=Decimal(str(item_in.purchase_with_gst or 0)),
            sale_with_gst=Decimal(str(item_in.sale_with_gst or 0)),
            gst_percentage=Decimal(str(gst if gst is not None else settings.DEFAULT_GST_PERCENTAGE)),
            sort_order=index,
        ))
    return items


def set_quotation_items(quotation: Quotation, items_data: Iterable) -> None:
    """替换报价明细并重新计算汇总金额"""
    quotation.items = build_items(items_data)
    quotation.recalculate_totals(prices_include_gst=settings.PRICES_INCLUDE_GST)
