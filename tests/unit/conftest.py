import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.services.access import AccessScope, Role


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
def system_scope():
    return AccessScope.system(actor_id="tester")


@pytest.fixture
def manager_scope():
    """Manager of hotel 1 who can see invoices 1-3"""
    return AccessScope.for_hotels(
        actor_id="mgr_1", role=Role.MANAGER, hotel_ids=[1], invoice_ids=[1, 2, 3]
    )
