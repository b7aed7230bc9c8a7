"""编号与标题生成测试"""
from datetime import datetime

import pytest

from quotedesk.core.exceptions import DuplicateKeyError
from quotedesk.services.numbering import (
    ensure_title_available, next_party_id, next_quotation_number, next_title_version,
    parse_revision_token, revision_quotation_number, unique_title
)


class TestPartyId:
    """客户编号"""

    async def test_first_party_id(self, db):
        assert await next_party_id(db) == "P001"

    async def test_unparsable_suffix_is_skipped(self, db, make_party):
        await make_party("P12abc", name="A")
        await make_party("P005", name="B")
        assert await next_party_id(db) == "P006"

    async def test_sequential_without_saving(self, db):
        assert await next_party_id(db) == "P001"
        assert await next_party_id(db) == "P002"

    async def test_follows_existing_max(self, db, make_party):
        await make_party("P007")
        assert await next_party_id(db) == "P008"

    async def test_orders_by_length_before_value(self, db, make_party):
        await make_party("P999", name="A")
        await make_party("P1000", name="B")
        assert await next_party_id(db) == "P1001"

    async def test_unparsable_suffix_falls_back(self, db, make_party):
        await make_party("P12abc")
        assert await next_party_id(db) == "P001"

    async def test_counter_never_goes_back(self, db, make_party):
        party = await make_party("P005")
        assert await next_party_id(db) == "P006"
        await db.delete(party)
        await db.commit()
        assert await next_party_id(db) == "P007"


class TestQuotationNumber:
    """报价单号"""

    async def test_monthly_sequence(self, db):
        october = datetime(2026, 10, 5)
        assert await next_quotation_number(db, october) == "QT2610-001"
        assert await next_quotation_number(db, october) == "QT2610-002"

    async def test_sequence_restarts_each_month(self, db):
        assert await next_quotation_number(db, datetime(2026, 10, 31)) == "QT2610-001"
        assert await next_quotation_number(db, datetime(2026, 11, 1)) == "QT2611-001"

    async def test_follows_existing_numbers(self, db, make_party, make_quotation):
        party = await make_party()
        await make_quotation(party, "Existing", quotation_number="QT2610-041")
        assert await next_quotation_number(db, datetime(2026, 10, 20)) == "QT2610-042"


class TestRevisionIdentifiers:
    """修订单号"""

    def test_format_uses_first_eight_chars(self):
        assert revision_quotation_number("P001", 3) == "quote-P001-3"
        assert revision_quotation_number("P123456789", 1) == "quote-P1234567-1"

    def test_parse_revision_token(self):
        assert parse_revision_token("quote-P001-4") == 4
        assert parse_revision_token("quote-P001-12") == 12
        assert parse_revision_token("QT2610-001") is None
        assert parse_revision_token(None) is None


class TestTitles:
    """标题去重"""

    def test_no_match_keeps_base(self):
        assert next_title_version("B", []) == "B"

    def test_exact_base_counts_as_v1(self):
        assert next_title_version("B", ["B"]) == "B_v2"

    def test_uses_max_version_not_count(self):
        assert next_title_version("B", ["B_v1", "B_v3"]) == "B_v4"

    def test_case_insensitive(self):
        assert next_title_version("Acme", ["acme", "ACME_V2"]) == "Acme_v3"

    def test_ignores_other_suffixes(self):
        assert next_title_version("B", ["B_vx", "B_v2_old", "BB"]) == "B"

    async def test_unique_title_from_database(self, db, make_party, make_quotation):
        party = await make_party()
        await make_quotation(party, "Acme_Quotation")
        await make_quotation(party, "Acme_Quotation_v2")
        assert await unique_title(db, "Acme_Quotation") == "Acme_Quotation_v3"

    async def test_unique_title_matches_wildcards_literally(self, db, make_party, make_quotation):
        party = await make_party()
        await make_quotation(party, "AxB_v2")
        await make_quotation(party, "100 deal")
        assert await unique_title(db, "A_B") == "A_B"
        assert await unique_title(db, "100%") == "100%"

    async def test_unique_title_excludes_self(self, db, make_party, make_quotation):
        party = await make_party()
        quotation = await make_quotation(party, "Solo")
        assert await unique_title(db, "Solo", exclude_id=quotation.id) == "Solo"

    async def test_ensure_title_available(self, db, make_party, make_quotation):
        party = await make_party()
        quotation = await make_quotation(party, "Taken")
        with pytest.raises(DuplicateKeyError):
            await ensure_title_available(db, "Taken")
        await ensure_title_available(db, "Taken", exclude_id=quotation.id)
        await ensure_title_available(db, "Free")
