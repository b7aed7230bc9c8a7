"""
重新写入默认配件目录

用法：
    python scripts/seed_components.py            # 目录为空时写入
    python scripts/seed_components.py --replace  # 清空现有目录后重新写入

已生成报价单中的明细为快照，不受影响。
"""

import argparse
import asyncio
import sys
import os

# 添加项目路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quotedesk.core.config import settings
from quotedesk.core.logging_config import setup_logging, get_logger
from quotedesk.db.init_db import ensure_tables_exist
from quotedesk.db.seed_data import seed_components
from quotedesk.db.session import SessionLocal

logger = get_logger("seed_components")


async def main(replace: bool) -> int:
    await ensure_tables_exist()
    async with SessionLocal() as db:
        count = await seed_components(db, replace=replace)

    if count:
        logger.info(f"✅ 已写入 {count} 个配件")
    else:
        logger.info("配件目录非空，未做修改（使用 --replace 强制重写）")
    return count


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="写入默认配件目录")
    parser.add_argument("--replace", action="store_true", help="清空现有配件后重新写入")
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)
    asyncio.run(main(args.replace))
