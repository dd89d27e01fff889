class TestModelsEndpoint:
    async def test_pinned_first(self, client):
        response = await client.get("/api/models")
        assert response.status_code == 200
        models = response.json()
        assert [m["id"] for m in models] == ["llama3_70b", "sd_xl", "codellama", "mistral_7b"]
        assert models[0]["isPinned"] is True
        assert models[0]["vramFootprint"] == 42

    async def test_get(self, client):
        response = await client.get("/api/models/mistral_7b")
        assert response.status_code == 200
        assert response.json()["provider"] == "LMStudio"

    async def test_unknown(self, client):
        response = await client.get("/api/models/gpt-99")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"
