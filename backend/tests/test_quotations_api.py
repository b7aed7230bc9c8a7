"""报价单API测试"""
from datetime import datetime

import pytest

from quotedesk.core.config import settings


ITEMS = [
    {"category": "Processor", "brand": "Intel", "model": "Core i5-12400F", "hsn_sac": "84733099",
     "warranty": "3 Years", "quantity": 2, "purchase_with_gst": 16000, "sale_with_gst": 18500},
    {"category": "RAM", "brand": "Corsair", "model": "Vengeance LPX 16GB DDR4", "hsn_sac": "84733092",
     "warranty": "10 Years", "quantity": 1, "purchase_with_gst": 4000, "sale_with_gst": 4600,
     "gst_percentage": 28},
]


@pytest.fixture
async def party(client):
    response = await client.post("/api/parties/", json={"name": "Acme", "phone": "9876543210"})
    assert response.status_code == 201
    return response.json()


async def create_quotation(client, party, **overrides):
    payload = {"party_id": party["id"], "items": ITEMS, **overrides}
    response = await client.post("/api/quotations/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateQuotation:
    """创建报价单"""

    async def test_defaults_and_totals(self, client, party):
        data = await create_quotation(client, party)

        assert data["title"] == "Acme_Quotation"
        assert data["quotation_number"].startswith("QT" + datetime.now().strftime("%y%m") + "-")
        assert data["status"] == "draft"
        assert data["revision_number"] == 0
        assert data["party"]["partyId"] == "P001"
        assert data["business_details"]["name"] == "EmpressPC"
        assert data["business_details"]["gstin"] == "GSTIN1234567890"

        # 含税价：总额 = 18500*2 + 4600
        assert data["total_amount"] == 41600
        assert data["total_purchase"] == 36000
        assert data["margin"] == 5600
        assert data["margin_percentage"] == 13.46
        # 税额 = 37000*18/118 + 4600*28/128
        assert data["total_tax"] == pytest.approx(5644.07 + 1006.25)
        assert data["subtotal"] == pytest.approx(41600 - 6650.32)

        items = data["items"]
        assert [i["model"] for i in items] == ["Core i5-12400F", "Vengeance LPX 16GB DDR4"]
        assert items[0]["gst_percentage"] == 18
        assert items[1]["gst_percentage"] == 28
        assert items[0]["item_total"] == 37000

    async def test_default_title_is_disambiguated(self, client, party):
        first = await create_quotation(client, party)
        second = await create_quotation(client, party)
        third = await create_quotation(client, party)

        assert first["title"] == "Acme_Quotation"
        assert second["title"] == "Acme_Quotation_v2"
        assert third["title"] == "Acme_Quotation_v3"
        assert first["quotation_number"] != second["quotation_number"]

    async def test_explicit_title_must_be_unique(self, client, party):
        await create_quotation(client, party, title="Gaming rig")

        response = await client.post("/api/quotations/", json={"party_id": party["id"], "items": ITEMS,
                                                               "title": "Gaming rig"})
        assert response.status_code == 400
        assert "已存在" in response.json()["message"]

    async def test_business_details_override(self, client, party):
        data = await create_quotation(client, party, business_details={"name": "Other Shop", "phone": ""})
        assert data["business_details"]["name"] == "Other Shop"
        assert data["business_details"]["phone"] == "+91 9876543210"

    async def test_validation(self, client, party):
        response = await client.post("/api/quotations/", json={"party_id": party["id"], "items": []})
        assert response.status_code == 400

        response = await client.post("/api/quotations/", json={"items": ITEMS})
        assert response.status_code == 400

        bad_item = {**ITEMS[0], "quantity": 0}
        response = await client.post("/api/quotations/", json={"party_id": party["id"], "items": [bad_item]})
        assert response.status_code == 400

    async def test_unknown_party(self, client):
        response = await client.post("/api/quotations/", json={"party_id": 999, "items": ITEMS})
        assert response.status_code == 404


class TestQuotationQueries:
    """报价单查询"""

    async def test_get_and_not_found(self, client, party):
        created = await create_quotation(client, party)

        response = await client.get(f"/api/quotations/{created['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == created["title"]

        response = await client.get("/api/quotations/999")
        assert response.status_code == 404
        assert response.json()["message"] == "报价单不存在"

    async def test_list_with_status_and_search(self, client, party):
        await create_quotation(client, party, title="Office PCs")
        await create_quotation(client, party, title="Gaming rig", status="sent")

        response = await client.get("/api/quotations/")
        data = response.json()
        assert data["total"] == 2
        assert data["page"] == 1

        response = await client.get("/api/quotations/", params={"status": "sent"})
        assert [q["title"] for q in response.json()["data"]] == ["Gaming rig"]

        response = await client.get("/api/quotations/", params={"search": "Office"})
        assert [q["title"] for q in response.json()["data"]] == ["Office PCs"]

        response = await client.get("/api/quotations/", params={"search": "Acme"})
        assert response.json()["total"] == 2

    async def test_party_quotations(self, client, party):
        await create_quotation(client, party)
        other = (await client.post("/api/parties/", json={"name": "Bolt", "phone": "1"})).json()
        await create_quotation(client, other)

        response = await client.get(f"/api/quotations/party/{party['id']}")
        assert response.status_code == 200
        data = response.json()
        assert isinstance(data, list)
        assert [q["party_id"] for q in data] == [party["id"]]

        response = await client.get("/api/quotations/party/999")
        assert response.status_code == 404


class TestUpdateQuotation:
    """更新报价单"""

    async def test_partial_update_keeps_totals(self, client, party):
        created = await create_quotation(client, party)

        response = await client.put(f"/api/quotations/{created['id']}", json={"notes": "call back", "status": "sent"})
        assert response.status_code == 200
        data = response.json()
        assert data["notes"] == "call back"
        assert data["status"] == "sent"
        assert data["total_amount"] == created["total_amount"]
        assert data["total_tax"] == created["total_tax"]
        assert len(data["items"]) == 2

    async def test_items_update_recomputes(self, client, party):
        created = await create_quotation(client, party)

        new_items = [{**ITEMS[0], "quantity": 1}]
        response = await client.put(f"/api/quotations/{created['id']}", json={"items": new_items})
        data = response.json()
        assert data["total_amount"] == 18500
        assert data["total_purchase"] == 16000
        assert data["margin"] == 2500
        assert len(data["items"]) == 1

    async def test_any_status_is_accepted(self, client, party):
        created = await create_quotation(client, party)
        response = await client.put(f"/api/quotations/{created['id']}", json={"status": "expired"})
        assert response.json()["status"] == "expired"

        response = await client.put(f"/api/quotations/{created['id']}", json={"status": "archived"})
        assert response.status_code == 400

    async def test_title_conflict(self, client, party):
        first = await create_quotation(client, party)
        second = await create_quotation(client, party)

        response = await client.put(f"/api/quotations/{second['id']}", json={"title": first["title"]})
        assert response.status_code == 400

        response = await client.put(f"/api/quotations/{first['id']}", json={"title": first["title"]})
        assert response.status_code == 200

    async def test_blank_title_is_ignored(self, client, party):
        first = await create_quotation(client, party)
        second = await create_quotation(client, party)

        for quotation in (first, second):
            response = await client.put(f"/api/quotations/{quotation['id']}", json={"title": "   "})
            assert response.status_code == 200
            assert response.json()["title"] == quotation["title"]

        response = await client.put(f"/api/quotations/{first['id']}", json={"title": "  Renamed  "})
        assert response.json()["title"] == "Renamed"

    async def test_update_missing(self, client):
        response = await client.put("/api/quotations/999", json={"notes": "x"})
        assert response.status_code == 404


class TestRevisionsAPI:
    """修订版"""

    async def test_create_and_list(self, client, party):
        root = await create_quotation(client, party)

        response = await client.post(f"/api/quotations/{root['id']}/revisions")
        assert response.status_code == 201
        first = response.json()
        assert first["revision_number"] == 1
        assert first["quotation_number"] == "quote-P001-1"
        assert first["revision_of"] == root["id"]
        assert first["revision_of_info"]["title"] == root["title"]
        assert first["total_amount"] == root["total_amount"]

        response = await client.post(f"/api/quotations/{first['id']}/revisions", json={"notes": "v2 notes"})
        second = response.json()
        assert second["revision_number"] == 2
        assert second["notes"] == "v2 notes"

        response = await client.get(f"/api/quotations/{second['id']}/revisions")
        assert response.status_code == 200
        assert [q["id"] for q in response.json()] == [root["id"], first["id"], second["id"]]

    async def test_blank_revision_title_uses_quotation_number(self, client, party):
        root = await create_quotation(client, party)

        response = await client.post(f"/api/quotations/{root['id']}/revisions", json={"title": "   "})
        assert response.status_code == 201
        assert response.json()["title"] == "quote-P001-1"

    async def test_revision_not_found(self, client):
        response = await client.post("/api/quotations/999/revisions")
        assert response.status_code == 404

        response = await client.get("/api/quotations/999/revisions")
        assert response.status_code == 404

    async def test_delete_leaves_revisions(self, client, party):
        root = await create_quotation(client, party)
        revision = (await client.post(f"/api/quotations/{root['id']}/revisions")).json()

        response = await client.delete(f"/api/quotations/{root['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == root["id"]

        response = await client.get(f"/api/quotations/{revision['id']}")
        data = response.json()
        assert data["revision_of"] == root["id"]
        assert data["revision_of_info"] is None


class TestTaxExclusivePricing:
    """不含税价模式：税额加在单价之上"""

    @pytest.fixture(autouse=True)
    def tax_exclusive(self, monkeypatch):
        monkeypatch.setattr(settings, "PRICES_INCLUDE_GST", False)

    async def test_tax_added_on_top(self, client, party):
        item = {"category": "Processor", "brand": "Intel", "model": "Core i5-12400F",
                "quantity": 2, "purchase_with_gst": 75, "sale_with_gst": 100, "gst_percentage": 18}
        data = await create_quotation(client, party, items=[item])

        assert data["subtotal"] == 200
        assert data["total_tax"] == 36
        assert data["total_amount"] == 236
        assert data["total_purchase"] == 150
        assert data["margin"] == 86
        assert data["margin_percentage"] == 36.44
        assert data["items"][0]["tax_amount"] == 36
        assert data["items"][0]["item_total"] == 236

    async def test_items_update_recomputes(self, client, party):
        created = await create_quotation(client, party)

        response = await client.put(f"/api/quotations/{created['id']}", json={"items": [
            {"category": "RAM", "brand": "Corsair", "model": "Vengeance LPX 16GB DDR4",
             "quantity": 1, "purchase_with_gst": 4000, "sale_with_gst": 4600},
        ]})
        data = response.json()
        # 4600 + 18% = 5428
        assert data["total_amount"] == 5428
        assert data["total_tax"] == 828
        assert data["margin"] == 1428
