"""
AppCraft - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, List

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient

# Set testing environment before the settings object is created
os.environ['ENVIRONMENT'] = 'testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['PROXY_BASE_URL'] = 'https://api.test'
os.environ['LOG_FILE'] = ''

from appcraft.main import create_app
from appcraft.modules.proxy.cache import ResponseCache
from appcraft.modules.proxy.normalizer import ProxyDefaults
from appcraft.modules.proxy.service import ProxyService
from appcraft.services.codegen_service import CodeGenerationService

from mocks.mock_upstream import MockUpstream

fake = Faker()

BASE_URL = 'https://api.test'
CODEGEN_URL = 'https://codegen.test/api/code-generator'


class FakeClock:
    """Wall clock in seconds that only moves when told to"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000


class SleepRecorder:
    """Stand-in for asyncio.sleep that records backoff delays without waiting"""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def upstream() -> MockUpstream:
    return MockUpstream()


@pytest.fixture
def defaults() -> ProxyDefaults:
    return ProxyDefaults(base_url=BASE_URL)


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(sweep_interval_ms=60000, retention_ms=300000, clock=clock)


@pytest.fixture
async def proxy_service(
    cache: ResponseCache,
    upstream: MockUpstream,
    defaults: ProxyDefaults,
    sleeps: SleepRecorder,
) -> AsyncGenerator[ProxyService, None]:
    service = ProxyService(
        cache,
        transport=upstream.transport,
        defaults=defaults,
        user_agent='AppCraft-Test/1.0',
        backoff_base=2.0,
        sleep=sleeps,
    )
    yield service
    await service.aclose()


@pytest.fixture
def codegen_service(proxy_service: ProxyService) -> CodeGenerationService:
    return CodeGenerationService(
        proxy_service,
        api_url=CODEGEN_URL,
        timeout_ms=30000,
        max_retries=0,
        user_agent='AppCraft-Chat/1.0',
    )


@pytest.fixture
def app(cache: ResponseCache, proxy_service: ProxyService, codegen_service: CodeGenerationService):
    """
    App with test services on app.state.

    ASGITransport does not run the lifespan, so the state it would set up
    is assigned here instead.
    """
    application = create_app()
    application.state.response_cache = cache
    application.state.proxy_service = proxy_service
    application.state.codegen_service = codegen_service
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac


@pytest.fixture
def sample_post() -> dict:
    return {
        'id': fake.random_int(min=1, max=1000),
        'title': fake.sentence(),
        'body': fake.paragraph(),
        'userId': fake.random_int(min=1, max=10),
    }
