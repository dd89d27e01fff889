import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from unified_dash.config import Settings
from unified_dash.services.repository import Repository
from unified_dash.services.seed import seed_repository

FAKE_OPENAI_URL = "http://fake-openai/v1"


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values = {
        "ai_integrations_openai_base_url": None,
        "ai_integrations_openai_api_key": None,
        "dash_broadcast_interval": 0.05,
        "dash_telemetry_probe_enabled": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest_asyncio.fixture
async def repository():
    """Repository with the demo inventory installed."""
    repo = Repository()
    await seed_repository(repo)
    return repo


@pytest_asyncio.fixture
async def empty_repository():
    return Repository()


@pytest_asyncio.fixture
async def fake_openai_client():
    """httpx client wired to the fake OpenAI app via in-process ASGITransport."""
    from tests.mocks.fake_openai import app as fake_openai_app

    fake_openai_app.state.requests = []
    transport = ASGITransport(app=fake_openai_app)
    client = AsyncClient(transport=transport, base_url="http://fake-openai")
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def app_with_state(settings):
    """FastAPI app with a freshly seeded repository in fallback command mode."""
    from unified_dash.main import app, init_state

    await init_state(app, settings)
    yield app
    await app.state.broadcaster.close_all()


@pytest_asyncio.fixture
async def delegated_app(fake_openai_client):
    """FastAPI app whose command router delegates to the fake OpenAI backend."""
    from unified_dash.main import app, init_state

    config = make_settings(
        ai_integrations_openai_base_url=FAKE_OPENAI_URL,
        ai_integrations_openai_api_key="sk-test",
    )
    await init_state(app, config, http_client=fake_openai_client)
    yield app
    await app.state.broadcaster.close_all()


@pytest_asyncio.fixture
async def client(app_with_state):
    transport = ASGITransport(app=app_with_state)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def delegated_client(delegated_app):
    transport = ASGITransport(app=delegated_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
