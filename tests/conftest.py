import httpx
import pytest
import pytest_asyncio

from expense_dashboard.config import Settings
from expense_dashboard.db import init_models
from expense_dashboard.main import create_app


@pytest_asyncio.fixture
async def app(tmp_path):
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'expenses.db'}",
        seed_demo_data=False,
        static_dir=str(tmp_path / "static"),
    )
    app = create_app(settings)
    await init_models(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def expense_store(app):
    return app.state.expense_store


@pytest.fixture
def budget_store(app):
    return app.state.budget_store
