"""
报价金额计算

单行：
    税额 = 单价 × 数量 × 税率 / 100
    行合计 = 单价 × 数量 + 税额
整单：
    小计 = Σ 单价 × 数量
    税额 = Σ 单行税额
    总额 = 小计 + 税额

含税模式（进价/售价已含 GST）下，总额直接等于 Σ 售价 × 数量，
税额为其中包含的部分：售价 × 数量 × 税率 / (100 + 税率)。

两种模式下：
    进货总额 = Σ 进价 × 数量
    毛利 = 总额 - 进货总额
    毛利率 = 毛利 / 总额 × 100（总额为 0 时为 0）
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Tuple

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """None 视为 0，其余经 str 转换避免浮点误差"""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Decimal) -> Decimal:
    """金额保留两位小数（四舍五入）"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class ItemTotals:
    """单行金额"""
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass
class QuotationTotals:
    """整单金额"""
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    total_purchase: Decimal
    margin: Decimal
    margin_percentage: Decimal


def compute_item(unit_price: Any, quantity: Any, tax_rate: Any) -> ItemTotals:
    """计算不含税单价下的单行税额和合计"""
    line = money(to_decimal(unit_price) * to_decimal(quantity))
    tax = money(line * to_decimal(tax_rate) / HUNDRED)
    return ItemTotals(subtotal=line, tax_amount=tax, total=line + tax)


def compute_inclusive_item(unit_price: Any, quantity: Any, tax_rate: Any) -> ItemTotals:
    """计算含税单价下的单行金额，税额从合计中拆出"""
    total = money(to_decimal(unit_price) * to_decimal(quantity))
    rate = to_decimal(tax_rate)
    tax = money(total * rate / (HUNDRED + rate)) if rate > 0 else ZERO
    return ItemTotals(subtotal=total - tax, tax_amount=tax, total=total)


def item_totals(item: Any, prices_include_gst: bool = True) -> ItemTotals:
    """按报价明细（ORM 或 schema 对象）计算单行金额"""
    calc = compute_inclusive_item if prices_include_gst else compute_item
    return calc(item.sale_with_gst, item.quantity, item.gst_percentage)


def compute_margin(total_amount: Any, total_purchase: Any) -> Tuple[Decimal, Decimal]:
    """返回 (毛利, 毛利率%)"""
    amount = to_decimal(total_amount)
    margin = amount - to_decimal(total_purchase)
    percentage = margin / amount * HUNDRED if amount > 0 else ZERO
    return money(margin), money(percentage)


def summarize_items(items: Iterable[Any], prices_include_gst: bool = True) -> QuotationTotals:
    """汇总报价明细"""
    subtotal = ZERO
    tax_amount = ZERO
    total_purchase = ZERO

    for item in items:
        line = item_totals(item, prices_include_gst)
        subtotal += line.subtotal
        tax_amount += line.tax_amount
        total_purchase += to_decimal(item.purchase_with_gst) * to_decimal(item.quantity)

    total_amount = subtotal + tax_amount
    margin, margin_percentage = compute_margin(total_amount, total_purchase)
    return QuotationTotals(
        subtotal=money(subtotal),
        tax_amount=money(tax_amount),
        total_amount=money(total_amount),
        total_purchase=money(total_purchase),
        margin=margin,
        margin_percentage=margin_percentage,
    )
