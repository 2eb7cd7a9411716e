import pytest

from tourdesk.app.config import Settings
from tourdesk.app.services.mock_client import MockApiClient
from tourdesk.app.store.resources import configure_store


@pytest.fixture()
def settings():
    return Settings(use_mock_data=True, price_debounce_seconds=0.01)


@pytest.fixture()
def mock_api(settings):
    return MockApiClient(settings)


@pytest.fixture()
def store(mock_api, settings):
    return configure_store(mock_api, settings)
