import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.domain.rate_snapshot import RateSnapshot
from tests.factories import make_account


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def mock_account_repo():
    return MagicMock()


@pytest.fixture
def mock_entry_repo():
    return MagicMock()


@pytest.fixture
def mock_rate_repo():
    """Rate repository with nothing configured (built-in default applies)"""
    repo = MagicMock()
    repo.get_current = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def sample_account():
    """Account holding 100 points"""
    return make_account()


@pytest.fixture
def configured_rates():
    return RateSnapshot(
        version=2,
        earn_rate=Decimal("2"),
        redeem_rate=Decimal("0.02"),
        updated_by="admin_7",
        effective_at=datetime(2024, 1, 1),
    )
