import pytest
from fastapi.testclient import TestClient

from altcha_bench.main import app
from altcha_bench.middleware.rate_limit import limiter


@pytest.fixture
def client():
    """Create a test client with rate limiting disabled."""
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    limiter.enabled = True
