"""
测试公共夹具

每个测试使用 tmp_path 下独立的 SQLite 文件，
接口测试通过 dependency_overrides 替换 get_db。
"""
import os
import tempfile

# 导入应用前设置环境，避免日志和数据库落到工作目录
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="quotedesk-logs-"))
os.environ.setdefault("SQLITE_DATABASE_URI", f"sqlite:///{tempfile.mkdtemp(prefix='quotedesk-db-')}/test.db")
os.environ.setdefault("SEED_COMPONENTS_ON_STARTUP", "false")

from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from quotedesk.main import app
from quotedesk.core.deps import get_db
from quotedesk.db.base import Base
from quotedesk.models import Party, Quotation, QuotationItem


@pytest.fixture
async def engine(tmp_path):
    """测试数据库引擎"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    """测试数据库会话"""
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    """测试客户端"""
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_party(db):
    """直接写库创建客户"""
    async def _make(party_code="P001", name="Acme Computers", phone="9876543210"):
        party = Party(party_code=party_code, name=name, phone=phone, address="")
        db.add(party)
        await db.commit()
        return party
    return _make


@pytest.fixture
def make_quotation(db):
    """直接写库创建报价单（金额按明细计算）"""
    async def _make(party, title, quotation_number=None, revision_number=0, revision_of=None, items=None):
        quotation = Quotation(
            party_id=party.id,
            title=title,
            quotation_number=quotation_number,
            business_details={"name": "EmpressPC"},
            notes="original notes",
            terms_conditions="50% advance",
            status="sent",
            revision_number=revision_number,
            revision_of=revision_of,
        )
        quotation.items = items or [
            QuotationItem(
                category="Processor", brand="Intel", model="Core i5-12400F",
                hsn_sac="84733099", warranty="3 Years", quantity=2,
                purchase_with_gst=Decimal("16000"), sale_with_gst=Decimal("18500"),
                gst_percentage=Decimal("18"), sort_order=0,
            ),
        ]
        quotation.recalculate_totals()
        db.add(quotation)
        await db.commit()
        return quotation
    return _make
