"""报价单修订操作"""

from typing import Any, List, Optional
from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.core.deps import get_db
from quotedesk.schemas.quotation import QuotationResponse, RevisionCreate
from quotedesk.services import revisions as revision_service
from .core import build_quotation_response

router = APIRouter()


@router.post("/{quotation_id}/revisions", response_model=QuotationResponse, status_code=201)
async def create_revision(
    *,
    db: AsyncSession = Depends(get_db),
    quotation_id: int,
    revision_in: Optional[RevisionCreate] = Body(None),
) -> Any:
    """基于报价单创建修订版（草稿），可选覆盖标题和备注"""
    revision_in = revision_in or RevisionCreate()
    revision = await revision_service.create_revision(
        db,
        quotation_id,
        title=revision_in.title,
        notes=revision_in.notes,
    )
    return build_quotation_response(revision)


@router.get("/{quotation_id}/revisions", response_model=List[QuotationResponse])
async def list_revisions(
    *,
    db: AsyncSession = Depends(get_db),
    quotation_id: int,
) -> Any:
    """获取报价单所在修订集合（含根报价单），按修订号升序"""
    quotations = await revision_service.list_revisions(db, quotation_id)
    return [build_quotation_response(q) for q in quotations]
