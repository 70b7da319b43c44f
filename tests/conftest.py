"""Pytest fixtures for distribution tests."""

import pytest

from disperse_collect.core.service import DistributionService
from disperse_collect.integrations.clients.mocks.chain import MockChainClient

# Digit-only addresses are their own EIP-55 checksum form.
CALLER = "0x9999999999999999999999999999999999999999"
SPENDER = "0x5555555555555555555555555555555555555555"
TOKEN = "0x7777777777777777777777777777777777777777"
RECIPIENT = "0x8888888888888888888888888888888888888888"
A = "0x1111111111111111111111111111111111111111"
B = "0x2222222222222222222222222222222222222222"
C = "0x3333333333333333333333333333333333333333"


@pytest.fixture
def chain():
    """In-memory chain client with CALLER as the only signer."""
    client = MockChainClient(signers=[CALLER])
    client.deploy_token(TOKEN)
    return client


@pytest.fixture
def service(chain):
    return DistributionService(chain)
