import pytest

from app import app as flask_app
from app.rule_store import InMemoryRuleStore


@pytest.fixture
def store():
    return InMemoryRuleStore()


@pytest.fixture
def client(store):
    """Test client backed by a fresh in-memory rule store."""
    flask_app.config['TESTING'] = True
    flask_app.extensions['rule_store'] = store
    with flask_app.test_client() as test_client:
        yield test_client


@pytest.fixture
def alice():
    return {'X-User-Id': 'alice'}
