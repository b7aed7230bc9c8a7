"""
数据库版本迁移模块

在启动时自动检查并更新数据库结构，兼容旧版本的数据库文件。
同时补齐基础数据（默认配件目录）。

迁移策略：
1. 每次启动都检查所有必需的列，不依赖版本号
2. 旧数据中的 NULL 字段统一修复为默认值
3. 版本号用于追踪，但不作为迁移的唯一依据
"""

import logging
from typing import Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.core.config import settings
from quotedesk.db.seed_data import seed_components

logger = logging.getLogger(__name__)

# 当前数据库版本 - 每次有重要更新时递增
CURRENT_DB_VERSION = "1.0.0"


async def get_db_version(db: AsyncSession) -> Optional[str]:
    """获取数据库版本，如果没有版本表则返回 None"""
    try:
        result = await db.execute(text(
            "SELECT value FROM system_config WHERE key = 'db_version'"
        ))
        row = result.fetchone()
        return row[0] if row else None
    except Exception as e:
        logger.debug(f"读取数据库版本失败: {e}")
        await db.rollback()
        return None


async def set_db_version(db: AsyncSession, version: str) -> None:
    """设置数据库版本"""
    await db.execute(text(
        "INSERT OR REPLACE INTO system_config (key, value, updated_at) "
        "VALUES ('db_version', :version, CURRENT_TIMESTAMP)"
    ), {"version": version})
    await db.commit()


async def ensure_system_config_table(db: AsyncSession) -> None:
    """确保 system_config 表存在"""
    await db.execute(text("""
        CREATE TABLE IF NOT EXISTS system_config (
            key TEXT PRIMARY KEY,
            value TEXT,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """))
    await db.commit()


async def get_columns(db: AsyncSession, table: str) -> list:
    """获取表的列名，表不存在时返回空列表"""
    result = await db.execute(text(f"PRAGMA table_info({table})"))
    return [row[1] for row in result.fetchall()]


async def check_table_exists(db: AsyncSession, table: str) -> bool:
    """检查表是否存在"""
    result = await db.execute(
        text("SELECT name FROM sqlite_master WHERE type='table' AND name=:table"),
        {"table": table},
    )
    return result.fetchone() is not None


async def add_column_if_not_exists(
    db: AsyncSession,
    table: str,
    column: str,
    column_type: str,
    default: str = None
) -> bool:
    """
    如果列不存在则添加

    返回值:
        True: 成功添加了列
        False: 表不存在、列已存在或添加失败
    """
    if not await check_table_exists(db, table):
        logger.debug(f"表 {table} 不存在，跳过添加列 {column}")
        return False

    if column in await get_columns(db, table):
        return False

    try:
        sql = f"ALTER TABLE {table} ADD COLUMN {column} {column_type}"
        if default is not None:
            sql += f" DEFAULT {default}"
        await db.execute(text(sql))
        await db.commit()
        logger.info(f"[+] 已添加列: {table}.{column}")
        return True
    except Exception as e:
        # 单列添加失败不影响其他列，回滚并继续
        logger.warning(f"添加列 {table}.{column} 失败: {e}")
        await db.rollback()
        return False


# ========== 必需的数据库列定义 ==========
# 格式: (表名, 列名, 列类型, 默认值)
# 这里列出版本迭代中新增的列，老数据库升级时自动添加
REQUIRED_COLUMNS = [
    # ========== parties ==========
    ("parties", "email", "VARCHAR(120)", None),

    # ========== quotations ==========
    ("quotations", "quotation_number", "VARCHAR(50)", None),
    ("quotations", "revision_number", "INTEGER", "0"),
    ("quotations", "revision_of", "INTEGER", None),
    ("quotations", "terms_conditions", "TEXT", "''"),
    ("quotations", "total_tax", "DECIMAL(12,2)", "0"),

    # ========== quotation_items ==========
    ("quotation_items", "hsn_sac", "VARCHAR(20)", "''"),
    ("quotation_items", "warranty", "VARCHAR(50)", "''"),
    ("quotation_items", "sort_order", "INTEGER", "0"),

    # ========== component_models ==========
    ("component_models", "sort_order", "INTEGER", "0"),
]


async def ensure_all_columns(db: AsyncSession) -> dict:
    """
    确保所有必需的列都存在
    每次启动都会检查，不依赖版本号
    """
    result = {
        "checked": 0,
        "added": 0,
        "columns_added": []
    }

    for table, column, col_type, default in REQUIRED_COLUMNS:
        result["checked"] += 1
        added = await add_column_if_not_exists(db, table, column, col_type, default)
        if added:
            result["added"] += 1
            result["columns_added"].append(f"{table}.{column}")

    return result


# 旧数据中的 NULL 字段 -> 默认值
NULL_FIELD_FIXES = [
    "UPDATE parties SET address = '' WHERE address IS NULL",
    "UPDATE quotations SET revision_number = 0 WHERE revision_number IS NULL",
    "UPDATE quotations SET status = 'draft' WHERE status IS NULL",
    "UPDATE quotations SET notes = '' WHERE notes IS NULL",
    "UPDATE quotations SET terms_conditions = '' WHERE terms_conditions IS NULL",
    "UPDATE quotations SET total_tax = 0 WHERE total_tax IS NULL",
    f"UPDATE quotation_items SET gst_percentage = {settings.DEFAULT_GST_PERCENTAGE} WHERE gst_percentage IS NULL",
    f"UPDATE component_models SET hsn_sac = '{settings.DEFAULT_HSN_SAC}' WHERE hsn_sac IS NULL OR hsn_sac = ''",
]


async def fix_null_fields(db: AsyncSession) -> dict:
    """修复数据库中的 NULL 字段，设置为默认值"""
    result = {"fixed": 0}

    for sql in NULL_FIELD_FIXES:
        try:
            outcome = await db.execute(text(sql))
            await db.commit()
            result["fixed"] += outcome.rowcount or 0
        except Exception as e:
            logger.warning(f"修复 NULL 字段时出错: {e}")
            await db.rollback()

    if result["fixed"]:
        logger.info(f"已修复 {result['fixed']} 条记录的空字段")
    return result


async def ensure_component_catalog(db: AsyncSession) -> dict:
    """配件目录为空时写入默认配件"""
    result = {"action": "none", "seeded": 0}

    if not settings.SEED_COMPONENTS_ON_STARTUP:
        result["action"] = "disabled"
        return result

    if not await check_table_exists(db, "components"):
        result["action"] = "table_not_exists"
        return result

    seeded = await seed_components(db)
    if seeded:
        result["action"] = "seeded"
        result["seeded"] = seeded
    else:
        result["action"] = "ok"
    return result


async def run_migrations(db: AsyncSession) -> dict:
    """
    运行数据库迁移

    每次启动都检查所有必需列，不仅仅依赖版本号
    """
    result = {
        "old_version": None,
        "new_version": CURRENT_DB_VERSION,
        "columns_added": [],
        "errors": []
    }

    try:
        await ensure_system_config_table(db)

        current_version = await get_db_version(db)
        result["old_version"] = current_version
        logger.info(f"数据库版本检查: {current_version or '未知'} -> {CURRENT_DB_VERSION}")

        column_result = await ensure_all_columns(db)
        result["columns_added"] = column_result["columns_added"]
        if column_result["added"] == 0:
            logger.info("数据库结构完整，无需更新")

        result["null_fields"] = await fix_null_fields(db)
        result["component_catalog"] = await ensure_component_catalog(db)

        if current_version != CURRENT_DB_VERSION:
            await set_db_version(db, CURRENT_DB_VERSION)
            logger.info(f"数据库版本已更新为: {CURRENT_DB_VERSION}")

    except Exception as e:
        error_msg = f"数据库迁移出错: {e}"
        logger.error(error_msg)
        result["errors"].append(error_msg)
        await db.rollback()

    return result
