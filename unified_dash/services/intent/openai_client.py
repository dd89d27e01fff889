import json

import httpx
import structlog

from unified_dash.core.exceptions import CapabilityError
from unified_dash.services.intent.base import IntentBackend

logger = structlog.get_logger()


class OpenAIIntentBackend(IntentBackend):
    """Intent classification through any OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = "gpt-5",
        max_tokens: int = 500,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self._headers = {"Authorization": f"Bearer {api_key}"}
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(connect=5.0, read=60.0, write=5.0, pool=5.0)
        )

    async def classify(self, system_prompt: str, command: str) -> dict:
        url = f"{self.base_url}/chat/completions"
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": command},
            ],
            "response_format": {"type": "json_object"},
            "max_completion_tokens": self.max_tokens,
        }

        try:
            response = await self._client.post(url, json=payload, headers=self._headers)
            response.raise_for_status()
            data = response.json()
        except httpx.ConnectError as e:
            raise CapabilityError(f"Cannot connect to language backend at {self.base_url}: {e}")
        except httpx.HTTPStatusError as e:
            raise CapabilityError(f"Language backend returned error: {e.response.status_code}")
        except httpx.TimeoutException:
            raise CapabilityError("Language backend request timed out.")
        except (httpx.HTTPError, ValueError) as e:
            raise CapabilityError(f"Language backend request failed: {e}")

        return self._parse_content(data)

    def _parse_content(self, data: dict) -> dict:
        """Pull ``choices[0].message.content`` and decode it as a JSON object."""
        try:
            content = data["choices"][0]["message"].get("content") or "{}"
        except (KeyError, IndexError, TypeError, AttributeError):
            raise CapabilityError("Language backend response had no choices.")

        try:
            parsed = json.loads(content)
        except (json.JSONDecodeError, TypeError):
            logger.warning("intent_response_not_json", preview=str(content)[:200])
            raise CapabilityError("Language backend returned malformed JSON.")

        if not isinstance(parsed, dict):
            raise CapabilityError("Language backend returned a non-object JSON payload.")
        return parsed

    async def close(self) -> None:
        """Close the HTTP client if this backend created it."""
        if self._owns_client:
            await self._client.aclose()
