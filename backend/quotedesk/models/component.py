"""
配件目录模型
一个配件条目 = 分类 + 品牌 + 有序的型号列表
型号上的价格只是报价时的模板，报价明细会保存快照
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from quotedesk.db.base import Base


class Component(Base):
    """配件条目"""
    __tablename__ = "components"

    id = Column(Integer, primary_key=True, index=True)

    category = Column(String(50), nullable=False, index=True, comment="分类，如 Processor")
    brand = Column(String(50), nullable=False, index=True, comment="品牌")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    models = relationship(
        "ComponentModel",
        back_populates="component",
        cascade="all, delete-orphan",
        order_by="ComponentModel.sort_order",
    )

    def __repr__(self):
        return f"<Component {self.category}/{self.brand} ({len(self.models or [])} models)>"


class ComponentModel(Base):
    """配件型号"""
    __tablename__ = "component_models"

    id = Column(Integer, primary_key=True, index=True)
    component_id = Column(Integer, ForeignKey("components.id"), nullable=False, index=True)

    model = Column(String(100), nullable=False, comment="型号")
    hsn_sac = Column(String(20), default="84733099", comment="HSN/SAC 税则编码")
    warranty = Column(String(50), comment="保修")
    purchase_with_gst = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="进价（含税）")
    sale_with_gst = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="售价（含税）")

    # 保持型号列表顺序
    sort_order = Column(Integer, default=0, comment="排序")

    component = relationship("Component", back_populates="models")

    def __repr__(self):
        return f"<ComponentModel {self.model} @ {self.sale_with_gst}>"
