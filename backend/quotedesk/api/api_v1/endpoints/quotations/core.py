"""
报价单核心功能模块
- 响应构建
- 基础查询
"""

from typing import Optional

from quotedesk.core.config import settings
from quotedesk.models.quotation import Quotation
from quotedesk.schemas.party import PartyBrief
from quotedesk.schemas.quotation import (
    BusinessDetails, QuotationItemResponse, QuotationResponse, RevisionRef
)
from quotedesk.services.financials import item_totals, to_decimal


def merge_business_details(details: Optional[dict]) -> dict:
    """提交的商户信息覆盖系统默认值，空值沿用默认"""
    merged = settings.default_business_details
    for key, value in (details or {}).items():
        if value not in (None, ""):
            merged[key] = value
    return merged


def build_quotation_response(quotation: Quotation) -> QuotationResponse:
    """构建报价单响应"""
    total_amount = to_decimal(quotation.total_amount)
    total_tax = to_decimal(quotation.total_tax)

    resp = QuotationResponse(
        id=quotation.id,
        party_id=quotation.party_id,
        title=quotation.title,
        quotation_number=quotation.quotation_number,
        date=quotation.date,
        valid_until=quotation.valid_until,
        business_details=BusinessDetails(**quotation.business_details) if quotation.business_details else None,
        notes=quotation.notes or "",
        terms_conditions=quotation.terms_conditions or "",
        status=quotation.status,
        status_display=quotation.status_display,
        subtotal=float(total_amount - total_tax),
        total_amount=float(total_amount),
        total_purchase=float(quotation.total_purchase or 0),
        total_tax=float(total_tax),
        margin=float(quotation.margin),
        margin_percentage=float(quotation.margin_percentage),
        revision_number=quotation.revision_number or 0,
        revision_of=quotation.revision_of,
        created_at=quotation.created_at,
        updated_at=quotation.updated_at,
        items=[],
    )

    if quotation.party:
        resp.party = PartyBrief.model_validate(quotation.party)

    if quotation.revision_parent:
        parent = quotation.revision_parent
        resp.revision_of_info = RevisionRef(
            id=parent.id,
            quotation_number=parent.quotation_number,
            title=parent.title,
        )

    for item in quotation.items:
        line = item_totals(item, prices_include_gst=settings.PRICES_INCLUDE_GST)
        resp.items.append(QuotationItemResponse(
            id=item.id,
            category=item.category,
            brand=item.brand,
            model=item.model,
            hsn_sac=item.hsn_sac or "",
            warranty=item.warranty or "",
            quantity=item.quantity,
            purchase_with_gst=float(item.purchase_with_gst or 0),
            sale_with_gst=float(item.sale_with_gst or 0),
            gst_percentage=float(item.gst_percentage or 0),
            tax_amount=float(line.tax_amount),
            item_total=float(line.total),
        ))

    return resp
