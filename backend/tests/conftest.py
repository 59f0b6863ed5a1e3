"""
Shared test fixtures
"""
import os

# Point the app at SQLite before core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_tracker.db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import date, datetime
from uuid import uuid4

import pytest
import pytest_asyncio

from core.database import build_engine, build_session_factory, init_db
from domain.entities import Application
from domain.enums import ApplicationStatus, Platform
from infrastructure.persistence.repositories.application import SQLAlchemyApplicationRepository


WALLET = "GBTESTWALLETAAAA1"
OTHER_WALLET = "GBTESTWALLETBBBB2"


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh SQLite database per test"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}", debug=False)
    await init_db(engine)
    
    yield build_session_factory(engine)
    
    await engine.dispose()


@pytest.fixture
def repository(session_factory):
    return SQLAlchemyApplicationRepository(session_factory)


@pytest.fixture
def make_application():
    """Factory for in-memory Application entities"""
    def _make(**overrides) -> Application:
        values = {
            "id": uuid4(),
            "wallet_address": WALLET,
            "company_name": "Acme",
            "position_title": "Backend Developer",
            "platform": Platform.LINKEDIN,
            "application_date": date(2024, 3, 1),
            "status": ApplicationStatus.PENDIENTE,
            "created_at": datetime(2024, 3, 1, 12, 0),
            "updated_at": datetime(2024, 3, 1, 12, 0),
        }
        values.update(overrides)
        return Application(**values)
    
    return _make


@pytest.fixture
def acme_fields():
    return {
        "company_name": "Acme",
        "position_title": "Dev",
        "platform": "linkedin",
        "application_date": "2024-03-01",
    }
