"""
Pytest configuration for stormnode tests.

Provides an RSA signer standing in for the fleet's signing service,
an in-memory transport and a scripted request timer.
"""

import pytest

from cryptography.hazmat.primitives.asymmetric import rsa

from stormnode.auth import AuthorizationVerifier
from stormnode.control import ControlEventBus
from stormnode.logging import Logger, LoggingConfig
from stormnode.models import NodeOptions

from tests.unit.mocks import (
    NODE_ID,
    NOW_MS,
    MockRequestTimer,
    MockTransport,
    RSASigner,
)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture(autouse=True)
def logging_defaults():
    yield
    LoggingConfig().update(
        log_level="info",
        log_output="stdout",
    )


@pytest.fixture(scope="session")
def private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )


@pytest.fixture
def signer(private_key: rsa.RSAPrivateKey) -> RSASigner:
    return RSASigner(private_key)


@pytest.fixture
def verifier(signer: RSASigner) -> AuthorizationVerifier:
    return AuthorizationVerifier(
        public_key=signer.public_pem,
        clock=lambda: NOW_MS,
    )


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def request_timer() -> MockRequestTimer:
    return MockRequestTimer()


@pytest.fixture
def control_bus() -> ControlEventBus:
    return ControlEventBus()


@pytest.fixture
def logger() -> Logger:
    return Logger()


@pytest.fixture
def node_options() -> NodeOptions:
    return NodeOptions(
        nodeId=NODE_ID,
        username="storm",
        password="secret",
    )
