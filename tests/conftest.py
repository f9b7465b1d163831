import pytest

from sitesearch import create_app
from sitesearch.config import Config


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app():
    config = Config(
        persistent_store="memory",
        cache_sweep_interval=0,
        disable_rate_limiting=True,
    )
    app = create_app(config)
    app.config["TESTING"] = True
    yield app
    app.extensions["sitesearch"].close()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
