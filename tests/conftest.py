import pytest

from basketry import CheckoutEngine, EngineConfig
from tests.fakes import FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def engine(backend: FakeBackend, config: EngineConfig) -> CheckoutEngine:
    return CheckoutEngine(backend, config)
