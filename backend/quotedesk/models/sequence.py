"""
编号计数器
每条编号流（客户编号、每月报价单号）一行，靠单条 upsert（INSERT ... ON CONFLICT DO UPDATE）原子递增
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from quotedesk.db.base import Base


class SequenceCounter(Base):
    """编号计数器"""
    __tablename__ = "sequence_counters"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(50), unique=True, nullable=False, index=True, comment="编号流，如 party、quotation:QT2610")
    value = Column(Integer, nullable=False, default=0, comment="最近一次分配的序号")
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<SequenceCounter {self.key}={self.value}>"
