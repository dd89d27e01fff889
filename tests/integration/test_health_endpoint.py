class TestHealthEndpoint:
    async def test_reports_degraded_services(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["commandMode"] == "fallback"
        assert body["servicesTotal"] == 8
        assert body["servicesDegraded"] == 1
        assert body["observers"] == 0

    async def test_ok_when_all_operational(self, client):
        await client.patch("/api/services/qdrant", json={"status": "operational"})
        body = (await client.get("/api/health")).json()
        assert body["status"] == "ok"

    async def test_delegated_mode(self, delegated_client):
        body = (await delegated_client.get("/api/health")).json()
        assert body["commandMode"] == "delegated"

    async def test_root(self, client):
        response = await client.get("/")
        assert response.json() == {"service": "unified-dash", "version": "0.1.0"}
