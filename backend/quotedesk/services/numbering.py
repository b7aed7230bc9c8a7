"""
编号与标题生成

编号流：
- 客户编号：P001、P002 …
- 报价单号：QT{年月}-{序号}，序号按月从 001 重新开始，如 QT2610-001
- 修订单号：quote-{客户编号前8位}-{修订号}

分配方式：先扫描已有记录中最大的数字后缀，再对计数器行做一次
原子的 upsert：value = max(value, 扫描值) + 1。
计数器保证同一数据库内并发创建不会拿到相同序号；
客户编号上的唯一索引作为最后一道保障。

标题去重：
已存在 "X" 或 "X_v2"… 时返回 "X_v{最大版本+1}"，
按最大版本而不是数量计算，删除中间版本后也不会撞号。
"""

import re
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.core.config import settings
from quotedesk.core.exceptions import DuplicateKeyError
from quotedesk.core.logging_config import get_logger
from quotedesk.models.party import Party
from quotedesk.models.quotation import Quotation
from quotedesk.models.sequence import SequenceCounter

logger = get_logger(__name__)

TITLE_VERSION_MARKER = "_v"
REVISION_TOKEN = re.compile(r"quote-.*?-(\d+)$")


def escape_like(value: str) -> str:
    """转义 LIKE 通配符，使其按字面匹配"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def parse_suffix(identifier: Optional[str], prefix: str) -> Optional[int]:
    """解析编号前缀之后的数字部分，无法解析时返回 None"""
    if not identifier or not identifier.startswith(prefix):
        return None
    try:
        return int(identifier[len(prefix):])
    except ValueError:
        return None


async def scan_max_suffix(db: AsyncSession, column, prefix: str) -> int:
    """
    扫描已有编号中最大的数字后缀

    先按长度再按值倒序，保证 P1000 排在 P999 之前。
    所有候选都无法解析时返回 0，由调用方从起始值开始。
    """
    result = await db.execute(
        select(column)
        .where(column.op("GLOB")(f"{prefix}[0-9]*"))
        .order_by(func.length(column).desc(), column.desc())
    )
    for identifier in result.scalars():
        number = parse_suffix(identifier, prefix)
        if number is not None:
            return number
        logger.warning(f"编号 {identifier} 后缀无法解析，已跳过")
    return 0


async def bump_counter(db: AsyncSession, key: str, at_least: int) -> int:
    """原子递增计数器并返回新值，计数器不存在时自动创建"""
    now = datetime.utcnow()
    stmt = (
        sqlite_insert(SequenceCounter)
        .values(key=key, value=at_least + 1, updated_at=now)
        .on_conflict_do_update(
            index_elements=[SequenceCounter.key],
            set_={
                "value": func.max(SequenceCounter.value, at_least) + 1,
                "updated_at": now,
            },
        )
        .returning(SequenceCounter.value)
    )
    result = await db.execute(stmt)
    return result.scalar_one()


async def next_party_id(db: AsyncSession) -> str:
    """生成下一个客户编号，如 P008"""
    prefix = settings.PARTY_ID_PREFIX
    scanned = await scan_max_suffix(db, Party.party_code, prefix)
    seq = await bump_counter(db, "party", scanned)
    return f"{prefix}{seq:0{settings.PARTY_ID_WIDTH}d}"


async def next_quotation_number(db: AsyncSession, now: Optional[datetime] = None) -> str:
    """生成下一个报价单号，如 QT2610-003"""
    now = now or datetime.now()
    prefix = f"{settings.QUOTATION_NUMBER_PREFIX}{now.strftime('%y%m')}-"
    scanned = await scan_max_suffix(db, Quotation.quotation_number, prefix)
    seq = await bump_counter(db, f"quotation:{prefix}", scanned)
    return f"{prefix}{seq:03d}"


def revision_quotation_number(party_code: str, revision_number: int) -> str:
    """修订单号：quote-{客户编号前8位}-{修订号}"""
    return f"quote-{(party_code or '')[:8]}-{revision_number}"


def parse_revision_token(text: Optional[str]) -> Optional[int]:
    """从 quote-xxx-N 格式的单号/标题中取出修订号"""
    if not text:
        return None
    match = REVISION_TOKEN.search(text)
    return int(match.group(1)) if match else None


def next_title_version(base: str, existing: Iterable[str]) -> str:
    """
    根据已有标题计算不冲突的标题

    base 本身视为第 1 版，base_vN 视为第 N 版。
    """
    pattern = re.compile(rf"^{re.escape(base)}{TITLE_VERSION_MARKER}(\d+)$", re.IGNORECASE)
    max_version = 0
    for title in existing:
        if title.lower() == base.lower():
            max_version = max(max_version, 1)
            continue
        match = pattern.match(title)
        if match:
            max_version = max(max_version, int(match.group(1)))

    if max_version == 0:
        return base
    return f"{base}{TITLE_VERSION_MARKER}{max_version + 1}"


async def unique_title(db: AsyncSession, base: str, exclude_id: Optional[int] = None) -> str:
    """返回与已有报价单不冲突的标题"""
    base = base.strip()
    lowered = base.lower()
    query = select(Quotation.title).where(
        or_(
            func.lower(Quotation.title) == lowered,
            func.lower(Quotation.title).like(
                f"{escape_like(lowered + TITLE_VERSION_MARKER)}%", escape="\\"
            ),
        )
    )
    if exclude_id is not None:
        query = query.where(Quotation.id != exclude_id)

    result = await db.execute(query)
    return next_title_version(base, result.scalars().all())


async def ensure_title_available(db: AsyncSession, title: str, exclude_id: Optional[int] = None) -> None:
    """手工指定的标题必须未被占用"""
    query = select(func.count(Quotation.id)).where(Quotation.title == title)
    if exclude_id is not None:
        query = query.where(Quotation.id != exclude_id)
    if (await db.execute(query)).scalar():
        raise DuplicateKeyError(f"报价单标题“{title}”已存在")
