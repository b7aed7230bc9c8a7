"""
客户模型 - 报价单的对象方
party_code 为展示用编号（P001、P002…，接口字段 partyId），分配后不再变更
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from quotedesk.db.base import Base


class Party(Base):
    """客户"""
    __tablename__ = "parties"

    id = Column(Integer, primary_key=True, index=True)

    # 展示编号（自动生成，唯一）
    party_code = Column(String(20), unique=True, nullable=False, index=True, comment="客户编号")

    # 基本信息
    name = Column(String(100), nullable=False, index=True, comment="名称")
    phone = Column(String(20), nullable=False, comment="电话")
    address = Column(Text, default="", comment="地址")
    email = Column(String(120), comment="邮箱")

    # 审计字段
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 关系（报价单引用客户，客户不拥有报价单）
    # 删除客户前须确认没有报价单引用
    quotations = relationship("Quotation", back_populates="party", passive_deletes=True)

    def __repr__(self):
        return f"<Party {self.party_code}: {self.name}>"
