"""配件目录API测试"""
from quotedesk.db.seed_data import DEFAULT_CATALOG, seed_components


CPU = {
    "category": "Processor",
    "brand": "Intel",
    "models": [
        {"model": "Core i5-12400F", "warranty": "3 Years", "purchase_with_gst": 16000, "sale_with_gst": 18500},
        {"model": "Core i7-12700K", "hsn_sac": "84733092", "purchase_with_gst": 28000, "sale_with_gst": 31500},
    ],
}
GPU = {
    "category": "Graphics Card",
    "brand": "NVIDIA",
    "models": [{"model": "RTX 4070", "purchase_with_gst": 55000, "sale_with_gst": 61000}],
}


async def create_component(client, payload):
    response = await client.post("/api/components/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestComponentsAPI:
    """配件目录API测试"""

    async def test_create_keeps_model_order_and_defaults(self, client):
        data = await create_component(client, CPU)

        assert data["category"] == "Processor"
        assert [m["model"] for m in data["models"]] == ["Core i5-12400F", "Core i7-12700K"]
        assert data["models"][0]["hsn_sac"] == "84733099"
        assert data["models"][1]["hsn_sac"] == "84733092"
        assert data["models"][0]["sale_with_gst"] == 18500

    async def test_create_requires_models(self, client):
        response = await client.post("/api/components/", json={"category": "RAM", "brand": "Corsair", "models": []})
        assert response.status_code == 400

        response = await client.post("/api/components/", json={"brand": "Corsair", "models": [{"model": "X"}]})
        assert response.status_code == 400

    async def test_list_filters(self, client):
        await create_component(client, CPU)
        await create_component(client, GPU)

        response = await client.get("/api/components/")
        assert response.json()["total"] == 2

        response = await client.get("/api/components/", params={"brand": "NVIDIA"})
        data = response.json()
        assert data["total"] == 1
        assert data["data"][0]["category"] == "Graphics Card"

    async def test_category_and_brand_routes(self, client):
        await create_component(client, CPU)

        response = await client.get("/api/components/category/Processor")
        assert response.status_code == 200
        assert len(response.json()) == 1

        response = await client.get("/api/components/brand/Intel")
        assert response.status_code == 200

        response = await client.get("/api/components/category/Monitor")
        assert response.status_code == 404

        response = await client.get("/api/components/brand/AMD")
        assert response.status_code == 404

    async def test_search_matches_model_names(self, client):
        await create_component(client, CPU)
        await create_component(client, GPU)

        response = await client.get("/api/components/search", params={"query": "12700"})
        assert response.status_code == 200
        assert [c["brand"] for c in response.json()] == ["Intel"]

        response = await client.get("/api/components/search", params={"query": "nothing-like-this"})
        assert response.json() == []

    async def test_update_replaces_models(self, client):
        component = await create_component(client, CPU)

        response = await client.put(
            f"/api/components/{component['id']}",
            json={"brand": "Intel Corp", "models": [{"model": "Core Ultra 7", "sale_with_gst": 42000}]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["brand"] == "Intel Corp"
        assert data["category"] == "Processor"
        assert [m["model"] for m in data["models"]] == ["Core Ultra 7"]

    async def test_update_without_models_keeps_them(self, client):
        component = await create_component(client, CPU)

        response = await client.put(f"/api/components/{component['id']}", json={"category": "CPU"})
        assert response.status_code == 200
        assert len(response.json()["models"]) == 2

    async def test_update_rejects_blank_text(self, client):
        component = await create_component(client, CPU)

        response = await client.put(f"/api/components/{component['id']}", json={"category": "   "})
        assert response.status_code == 400

        response = await client.put(f"/api/components/{component['id']}", json={"brand": "  AMD  "})
        assert response.status_code == 200
        assert response.json()["brand"] == "AMD"

        response = await client.get("/api/components/")
        assert response.status_code == 200
        assert response.json()["data"][0]["category"] == "Processor"

    async def test_get_and_delete(self, client):
        component = await create_component(client, GPU)

        response = await client.get(f"/api/components/{component['id']}")
        assert response.status_code == 200

        response = await client.delete(f"/api/components/{component['id']}")
        assert response.status_code == 200

        response = await client.get(f"/api/components/{component['id']}")
        assert response.status_code == 404


async def test_seed_components(db):
    assert await seed_components(db) == len(DEFAULT_CATALOG)
    # 目录非空时不重复写入
    assert await seed_components(db) == 0
    assert await seed_components(db, replace=True) == len(DEFAULT_CATALOG)
