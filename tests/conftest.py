"""
Pytest configuration and shared fixtures.

The application settings are read at import time, so the database URL is
pointed at a throwaway file before anything from ``grocerywatch`` loads.
"""

import os
import tempfile
import typing as t
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

_TEMP_DIR = tempfile.mkdtemp(prefix="grocerywatch-tests-")
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{Path(_TEMP_DIR) / 'default.db'}"
)
os.environ["SMTP_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""

# pylint: disable=wrong-import-position
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from grocerywatch.core.database import (
    build_session_maker,
    close_db,
    get_db,
    init_db,
)
from grocerywatch.core.models import ItemCategory, ItemStatus
from grocerywatch.main import APPLICATION
from grocerywatch.schemas.grocery_item import GroceryItemRecord
from grocerywatch.services import (
    ChangeNotifier,
    ContentService,
    ItemService,
    NullContentGenerator,
    TextLabelExtractor,
)

DAY = date(2025, 6, 15)


@pytest.fixture
def day() -> date:
    """A fixed reference day."""
    return DAY


@pytest.fixture
async def engine(tmp_path: Path) -> t.AsyncGenerator[AsyncEngine, None]:
    """A fresh SQLite database per test."""
    test_engine: AsyncEngine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    )
    await init_db(test_engine)
    yield test_engine
    await close_db(test_engine)


@pytest.fixture
def session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    return build_session_maker(engine)


@pytest.fixture
async def session(
    session_maker: async_sessionmaker[AsyncSession],
) -> t.AsyncGenerator[AsyncSession, None]:
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier(max_queue_size=10)


@pytest.fixture
def item_service(
    session: AsyncSession, notifier: ChangeNotifier
) -> ItemService:
    return ItemService(session, notifier)


@pytest.fixture
def make_record() -> t.Callable[..., GroceryItemRecord]:
    """Build detached item records without touching the database."""
    counter = {"n": 0}

    def _make(
        expiry_date: date,
        status: ItemStatus = ItemStatus.ACTIVE,
        product_name: str = "Milk",
        category: ItemCategory = ItemCategory.DAIRY,
        quantity: int = 1,
        item_id: str | None = None,
    ) -> GroceryItemRecord:
        counter["n"] += 1
        return GroceryItemRecord(
            id=item_id or f"item-{counter['n']}",
            product_name=product_name,
            category=category,
            quantity=quantity,
            expiry_date=expiry_date,
            purchase_date=DAY - timedelta(days=10),
            status=status,
            completed_date=(
                DAY if status == ItemStatus.COMPLETED else None
            ),
            created_at=datetime(2025, 6, 1, tzinfo=timezone.utc)
            + timedelta(seconds=counter["n"]),
        )

    return _make


@pytest.fixture
def client(tmp_path: Path) -> t.Generator[TestClient, None, None]:
    """Test client on an isolated database, without the scheduler.

    Everything runs on the client's single event loop so websocket
    subscribers and HTTP requests share the notifier.
    """
    api_engine: AsyncEngine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"
    )
    api_session_maker = build_session_maker(api_engine)

    @asynccontextmanager
    async def _test_lifespan(app: FastAPI) -> t.AsyncGenerator[None, None]:
        await init_db(api_engine)
        app.state.notifier = ChangeNotifier(max_queue_size=10)
        app.state.content_service = ContentService(NullContentGenerator())
        app.state.label_extractor = TextLabelExtractor(lambda: DAY)
        yield
        await close_db(api_engine)

    async def _override_get_db() -> t.AsyncGenerator[AsyncSession, None]:
        async with api_session_maker() as db_session:
            try:
                yield db_session
                await db_session.commit()
            except Exception:
                await db_session.rollback()
                raise

    original_lifespan = APPLICATION.router.lifespan_context
    APPLICATION.router.lifespan_context = _test_lifespan
    APPLICATION.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(APPLICATION) as test_client:
            yield test_client
    finally:
        APPLICATION.dependency_overrides.clear()
        APPLICATION.router.lifespan_context = original_lifespan
