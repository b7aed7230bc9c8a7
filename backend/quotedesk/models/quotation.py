"""
报价单模型

报价单引用一个客户，包含有序的报价明细。
修订版通过 revision_of 指回被修订的报价单，形成一棵树：
根报价单 revision_of 为空，同一棵树上的报价单构成一个修订集合。

状态流转（仅作提示，不强制）：
draft → sent → accepted / rejected
sent → expired
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, DECIMAL, JSON
from sqlalchemy.orm import relationship
from quotedesk.db.base import Base
from quotedesk.services.financials import compute_margin, summarize_items


QUOTATION_STATUSES = ("draft", "sent", "accepted", "rejected", "expired")


class Quotation(Base):
    """报价单"""
    __tablename__ = "quotations"

    id = Column(Integer, primary_key=True, index=True)

    # 客户
    party_id = Column(Integer, ForeignKey("parties.id"), nullable=False, index=True, comment="客户ID")

    # 标题（唯一）和报价单号
    # 新建：QT{年月}-{序号}，如 QT2610-001
    # 修订：quote-{客户编号前8位}-{修订号}
    title = Column(String(200), unique=True, nullable=False, index=True, comment="标题")
    quotation_number = Column(String(50), index=True, comment="报价单号")

    date = Column(DateTime, default=datetime.utcnow, index=True, comment="报价日期")
    valid_until = Column(DateTime, comment="有效期至")

    # 商户信息快照：name/address/phone/email/gstin/logo
    business_details = Column(JSON, comment="商户信息")

    # 金额汇总（从明细计算得出）
    total_amount = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="报价总额")
    total_purchase = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="进货总额")
    total_tax = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="税额")

    notes = Column(Text, default="", comment="备注")
    terms_conditions = Column(Text, default="", comment="条款")

    status = Column(String(20), nullable=False, default="draft", index=True, comment="状态")

    # 修订关系（弱引用，删除原单不级联）
    revision_number = Column(Integer, nullable=False, default=0, comment="修订号，原始报价为0")
    revision_of = Column(Integer, ForeignKey("quotations.id"), index=True, comment="修订自报价单ID")

    # 审计字段
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 关系
    party = relationship("Party", back_populates="quotations")
    items = relationship(
        "QuotationItem",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationItem.sort_order",
    )
    revision_parent = relationship("Quotation", remote_side=[id], foreign_keys=[revision_of])

    def __repr__(self):
        return f"<Quotation {self.quotation_number or self.id}: {self.title} (rev {self.revision_number}, {self.status})>"

    @property
    def status_display(self) -> str:
        """状态显示名称"""
        status_map = {
            "draft": "草稿",
            "sent": "已发送",
            "accepted": "已接受",
            "rejected": "已拒绝",
            "expired": "已过期",
        }
        return status_map.get(self.status, self.status)

    @property
    def margin(self) -> Decimal:
        """毛利 = 报价总额 - 进货总额"""
        return compute_margin(self.total_amount, self.total_purchase)[0]

    @property
    def margin_percentage(self) -> Decimal:
        """毛利率（%）"""
        return compute_margin(self.total_amount, self.total_purchase)[1]

    def recalculate_totals(self, prices_include_gst: bool = True):
        """根据明细重新计算汇总金额"""
        summary = summarize_items(self.items, prices_include_gst=prices_include_gst)
        self.total_amount = summary.total_amount
        self.total_purchase = summary.total_purchase
        self.total_tax = summary.tax_amount
        return summary


class QuotationItem(Base):
    """报价明细 - 下单时的配件快照"""
    __tablename__ = "quotation_items"

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(Integer, ForeignKey("quotations.id"), nullable=False, index=True)

    category = Column(String(50), nullable=False, comment="分类")
    brand = Column(String(50), nullable=False, comment="品牌")
    model = Column(String(100), nullable=False, comment="型号")
    hsn_sac = Column(String(20), default="", comment="HSN/SAC 税则编码")
    warranty = Column(String(50), default="", comment="保修")

    quantity = Column(Integer, nullable=False, default=1, comment="数量")
    purchase_with_gst = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="进货单价")
    sale_with_gst = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="销售单价")
    gst_percentage = Column(DECIMAL(5, 2), nullable=False, default=Decimal("18"), comment="税率(%)")

    sort_order = Column(Integer, default=0, comment="排序")

    quotation = relationship("Quotation", back_populates="items")

    def __repr__(self):
        return f"<QuotationItem {self.brand} {self.model} x {self.quantity} @ {self.sale_with_gst}>"
