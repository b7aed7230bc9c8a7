"""报价单Schema"""
from typing import Optional, List, Any, Literal
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from quotedesk.schemas.party import PartyBrief

QuotationStatus = Literal["draft", "sent", "accepted", "rejected", "expired"]


def blank_to_none(v: Any) -> Any:
    """去掉首尾空格，空串视为未填写"""
    if isinstance(v, str):
        return v.strip() or None
    return v


# ===== 明细 =====
class QuotationItemBase(BaseModel):
    """明细基础字段"""
    category: str = Field(..., min_length=1, max_length=50, description="分类")
    brand: str = Field(..., min_length=1, max_length=50, description="品牌")
    model: str = Field(..., min_length=1, max_length=100, description="型号")
    hsn_sac: Optional[str] = Field("", max_length=20, description="HSN/SAC 税则编码")
    warranty: Optional[str] = Field("", max_length=50, description="保修")
    quantity: int = Field(default=1, gt=0, description="数量")
    purchase_with_gst: float = Field(default=0, ge=0, description="进货单价")
    sale_with_gst: float = Field(default=0, ge=0, description="销售单价")
    gst_percentage: Optional[float] = Field(None, ge=0, le=100, description="税率(%)，不填默认18")

    @field_validator("category", "brand", "model", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class QuotationItemCreate(QuotationItemBase):
    """创建明细"""
    pass


class QuotationItemResponse(QuotationItemBase):
    """明细响应"""
    id: int
    gst_percentage: float = 0
    tax_amount: float = 0
    item_total: float = 0

    class Config:
        from_attributes = True


# ===== 报价单 =====
class BusinessDetails(BaseModel):
    """商户信息（打印在报价单抬头）"""
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    gstin: Optional[str] = None
    logo: Optional[str] = None


class QuotationCreate(BaseModel):
    """创建报价单"""
    party_id: int = Field(..., description="客户ID")
    title: Optional[str] = Field(None, max_length=200, description="标题，不填则按客户名生成")
    date: Optional[datetime] = Field(None, description="报价日期")
    valid_until: Optional[datetime] = Field(None, description="有效期至")
    business_details: Optional[BusinessDetails] = Field(None, description="商户信息，缺省字段使用系统配置")
    items: List[QuotationItemCreate] = Field(..., min_length=1, description="明细列表")
    notes: Optional[str] = Field("", description="备注")
    terms_conditions: Optional[str] = Field("", description="条款")
    status: QuotationStatus = Field(default="draft", description="状态")
    revision_number: int = Field(default=0, ge=0, description="修订号")
    revision_of: Optional[int] = Field(None, description="修订自报价单ID")

    @field_validator("title", mode="before")
    @classmethod
    def blank_title(cls, v: Any) -> Any:
        return blank_to_none(v)


class QuotationUpdate(BaseModel):
    """更新报价单，未提交的字段保持不变"""
    party_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    date: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    business_details: Optional[BusinessDetails] = None
    items: Optional[List[QuotationItemCreate]] = Field(None, min_length=1, description="提供时替换全部明细并重算金额")
    notes: Optional[str] = None
    terms_conditions: Optional[str] = None
    status: Optional[QuotationStatus] = None
    revision_number: Optional[int] = Field(None, ge=0)
    revision_of: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def blank_title(cls, v: Any) -> Any:
        return blank_to_none(v)


class RevisionCreate(BaseModel):
    """创建修订版"""
    title: Optional[str] = Field(None, max_length=200, description="新标题，不填则使用修订单号")
    notes: Optional[str] = Field(None, description="新备注，不填则沿用原单")

    @field_validator("title", mode="before")
    @classmethod
    def blank_title(cls, v: Any) -> Any:
        return blank_to_none(v)


class RevisionRef(BaseModel):
    """被修订报价单的简要信息"""
    id: int
    quotation_number: Optional[str] = None
    title: str


class QuotationResponse(BaseModel):
    """报价单响应"""
    id: int
    party_id: int
    party: Optional[PartyBrief] = None
    title: str
    quotation_number: Optional[str] = None
    date: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    business_details: Optional[BusinessDetails] = None
    items: List[QuotationItemResponse] = []
    notes: Optional[str] = ""
    terms_conditions: Optional[str] = ""
    status: str
    status_display: str = ""

    # 汇总
    subtotal: float = 0
    total_amount: float = 0
    total_purchase: float = 0
    total_tax: float = 0
    margin: float = 0
    margin_percentage: float = 0

    # 修订
    revision_number: int = 0
    revision_of: Optional[int] = None
    revision_of_info: Optional[RevisionRef] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QuotationListResponse(BaseModel):
    """报价单列表响应"""
    data: List[QuotationResponse]
    total: int
    page: int
    limit: int
