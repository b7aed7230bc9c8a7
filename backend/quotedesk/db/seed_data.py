"""
默认配件目录

首次启动时（配件表为空）写入，也可通过 scripts/seed_components.py 重新写入。
价格为含税价（INR）。
"""

from decimal import Decimal
from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.core.logging_config import get_logger
from quotedesk.models.component import Component, ComponentModel

logger = get_logger(__name__)

# (型号, HSN/SAC, 保修, 进价, 售价)
DEFAULT_CATALOG = [
    {
        "category": "Processor",
        "brand": "Intel",
        "models": [
            ("Core i5-12400F", "84733099", "3 Years", "16000", "18500"),
            ("Core i7-12700K", "84733099", "3 Years", "28000", "31500"),
            ("Core i9-13900K", "84733099", "3 Years", "50000", "56500"),
        ],
    },
    {
        "category": "Graphics Card",
        "brand": "NVIDIA",
        "models": [
            ("RTX 3060", "84733099", "3 Years", "30000", "34000"),
            ("RTX 4070", "84733099", "3 Years", "55000", "61000"),
            ("RTX 4090", "84733099", "3 Years", "140000", "152000"),
        ],
    },
    {
        "category": "Motherboard",
        "brand": "ASUS",
        "models": [
            ("ROG Strix B660-F", "84733099", "3 Years", "17500", "19500"),
            ("TUF Gaming X670E", "84733099", "3 Years", "29500", "32500"),
            ("PRIME Z790-P", "84733099", "3 Years", "21500", "23800"),
        ],
    },
    {
        "category": "RAM",
        "brand": "Corsair",
        "models": [
            ("Vengeance LPX 16GB DDR4", "84733092", "10 Years", "4000", "4600"),
            ("Vengeance RGB Pro 32GB DDR4", "84733092", "10 Years", "8200", "9100"),
            ("Dominator Platinum RGB 32GB DDR5", "84733092", "10 Years", "15500", "17200"),
        ],
    },
    {
        "category": "SSD",
        "brand": "Samsung",
        "models": [
            ("970 EVO Plus 500GB NVMe", "84717020", "5 Years", "3300", "3900"),
            ("980 PRO 1TB NVMe", "84717020", "5 Years", "7500", "8500"),
            ("990 PRO 2TB NVMe", "84717020", "5 Years", "15800", "17400"),
        ],
    },
    {
        "category": "Power Supply",
        "brand": "Cooler Master",
        "models": [
            ("MWE 550 Bronze V2", "85044010", "5 Years", "3300", "3800"),
            ("MWE 750 White V2", "85044010", "5 Years", "4300", "4900"),
            ("V850 Gold V2 Full Modular", "85044010", "10 Years", "9900", "10800"),
        ],
    },
    {
        "category": "Cabinet",
        "brand": "NZXT",
        "models": [
            ("H510", "84733099", "2 Years", "5200", "5900"),
            ("H7 Flow RGB", "84733099", "2 Years", "8800", "9800"),
            ("H9 Elite", "84733099", "2 Years", "13200", "14500"),
        ],
    },
]


def build_catalog() -> List[Component]:
    components = []
    for entry in DEFAULT_CATALOG:
        component = Component(category=entry["category"], brand=entry["brand"])
        component.models = [
            ComponentModel(
                model=model,
                hsn_sac=hsn_sac,
                warranty=warranty,
                purchase_with_gst=Decimal(purchase),
                sale_with_gst=Decimal(sale),
                sort_order=index,
            )
            for index, (model, hsn_sac, warranty, purchase, sale) in enumerate(entry["models"])
        ]
        components.append(component)
    return components


async def count_components(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Component.id)))).scalar() or 0


async def seed_components(db: AsyncSession, replace: bool = False) -> int:
    """
    写入默认配件目录，返回写入的配件条目数

    replace=True 时先清空现有目录（已生成的报价明细为快照，不受影响）；
    否则目录非空时不做任何修改。
    """
    if replace:
        await db.execute(delete(ComponentModel))
        await db.execute(delete(Component))
        # 清空后会话中的旧对象不再有效
        db.expunge_all()
    elif await count_components(db) > 0:
        return 0

    components = build_catalog()
    db.add_all(components)
    await db.commit()

    logger.info(f"已写入默认配件目录: {len(components)} 个配件")
    return len(components)
