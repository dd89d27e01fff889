import pytest

INVALID = {
    "intent": "unknown",
    "confidence": 0,
    "message": "Invalid command format",
    "requiresConfirmation": False,
}
FAILURE_MESSAGE = "Sorry, I encountered an error processing your command."


class TestCommandValidation:
    @pytest.mark.parametrize(
        "payload",
        [{}, {"command": ""}, {"command": "   "}, {"command": 5}, {"command": None}, ["open langfuse"]],
    )
    async def test_invalid_payloads(self, client, payload):
        response = await client.post("/api/ai/command", json=payload)
        assert response.status_code == 400
        assert response.json() == INVALID

    async def test_non_json_body(self, client):
        response = await client.post(
            "/api/ai/command", content="open langfuse", headers={"content-type": "text/plain"}
        )
        assert response.status_code == 400
        assert response.json() == INVALID

    async def test_invalid_payload_never_reaches_backend(self, delegated_client):
        from tests.mocks.fake_openai import app as fake_app

        await delegated_client.post("/api/ai/command", json={"command": ""})
        assert fake_app.state.requests == []


class TestFallbackCommands:
    async def test_open_service(self, client):
        response = await client.post("/api/ai/command", json={"command": "open langfuse"})
        assert response.status_code == 200
        assert response.json() == {
            "intent": "open_service",
            "confidence": 0.7,
            "serviceId": "langfuse",
            "message": "Opening Langfuse in a new tab...",
            "requiresConfirmation": False,
        }

    async def test_open_service_without_url(self, client):
        body = (await client.post("/api/ai/command", json={"command": "open caddy"})).json()
        assert body["intent"] == "open_service"
        assert body["message"] == "Caddy doesn't have a URL configured."

    async def test_unrecognized(self, client):
        body = (await client.post("/api/ai/command", json={"command": "restart everything"})).json()
        assert body["intent"] == "unknown"
        assert body["confidence"] == 0.7
        assert "serviceId" not in body
        assert body["requiresConfirmation"] is False


class TestDelegatedCommands:
    async def test_open_service(self, delegated_client):
        from tests.mocks.fake_openai import app as fake_app

        response = await delegated_client.post("/api/ai/command", json={"command": "open langfuse"})
        assert response.status_code == 200
        body = response.json()
        assert body["intent"] == "open_service"
        assert body["serviceId"] == "langfuse"
        assert body["confidence"] == 0.95
        assert body["message"] == "Opening Langfuse in a new tab..."

        system_prompt = fake_app.state.requests[-1]["messages"][0]["content"]
        assert "langfuse: Langfuse (ai)" in system_prompt

    async def test_open_service_without_url_downgraded(self, delegated_client):
        body = (await delegated_client.post("/api/ai/command", json={"command": "open caddy"})).json()
        assert body["intent"] == "unknown"
        assert body["serviceId"] == "caddy"
        assert body["message"] == "Caddy doesn't have a URL configured."

    async def test_open_unknown_service_downgraded(self, delegated_client):
        body = (await delegated_client.post("/api/ai/command", json={"command": "open nowhere"})).json()
        assert body["intent"] == "unknown"
        assert body["message"] == "Service doesn't have a URL configured."

    async def test_open_service_without_id_passes_through(self, delegated_client):
        body = (await delegated_client.post("/api/ai/command", json={"command": "open something ambiguous"})).json()
        assert body == {
            "intent": "open_service",
            "confidence": 0.9,
            "message": "Which one?",
            "requiresConfirmation": False,
        }

    async def test_restart_requires_confirmation(self, delegated_client):
        body = (await delegated_client.post("/api/ai/command", json={"command": "restart qdrant"})).json()
        assert body["intent"] == "restart_service"
        assert body["serviceId"] == "qdrant"
        assert body["requiresConfirmation"] is True

    async def test_view_logs(self, delegated_client):
        body = (await delegated_client.post("/api/ai/command", json={"command": "show n8n logs"})).json()
        assert body == {
            "intent": "view_logs",
            "confidence": 0.8,
            "serviceId": "n8n",
            "message": "Showing n8n logs.",
            "requiresConfirmation": False,
        }

    async def test_sparse_reply_gets_defaults(self, delegated_client):
        body = (await delegated_client.post("/api/ai/command", json={"command": "sparse"})).json()
        assert body["intent"] == "unknown"
        assert body["confidence"] == 0.5
        assert body["message"] == "I'm not sure what you want to do."

    async def test_out_of_contract_reply_coerced(self, delegated_client):
        body = (await delegated_client.post("/api/ai/command", json={"command": "invent a thing"})).json()
        assert body["intent"] == "unknown"
        assert body["confidence"] == 1

    @pytest.mark.parametrize("command", ["explode", "garbage please", "list services"])
    async def test_backend_failure_collapses(self, delegated_client, command):
        response = await delegated_client.post("/api/ai/command", json={"command": command})
        assert response.status_code == 200
        assert response.json() == {
            "intent": "unknown",
            "confidence": 0,
            "message": FAILURE_MESSAGE,
            "requiresConfirmation": False,
        }
