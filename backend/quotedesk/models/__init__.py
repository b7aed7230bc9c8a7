# models包初始化文件

from quotedesk.models.party import Party
from quotedesk.models.component import Component, ComponentModel
from quotedesk.models.quotation import Quotation, QuotationItem, QUOTATION_STATUSES
from quotedesk.models.sequence import SequenceCounter

__all__ = [
    "Party",
    "Component",
    "ComponentModel",
    "Quotation",
    "QuotationItem",
    "QUOTATION_STATUSES",
    "SequenceCounter",
]
