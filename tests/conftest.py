"""
conftest.py - Shared pytest fixtures for token ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- Principals (mint authority, freeze authority, payer, outsider)
- A quiet runtime with a mint and a bound client
- Associated accounts for the payer and the outsider
"""

import pytest
from token_ledger import Address, LedgerRuntime, TokenClient


# =============================================================================
# PRINCIPALS
# =============================================================================

@pytest.fixture
def mint_authority():
    return Address.derive("mint_authority")


@pytest.fixture
def freeze_authority():
    return Address.derive("freeze_authority")


@pytest.fixture
def payer():
    return Address.derive("payer")


@pytest.fixture
def outsider():
    return Address.derive("outsider")


# =============================================================================
# RUNTIME FIXTURES
# =============================================================================

@pytest.fixture
def runtime():
    """Fresh runtime hosting an unbound contract."""
    return LedgerRuntime("test", verbose=False)


@pytest.fixture
def mint(runtime, mint_authority, freeze_authority):
    """Mint with 3 decimals and zero supply."""
    return runtime.create_mint(mint_authority, freeze_authority, decimals=3)


@pytest.fixture
def client(runtime, mint):
    """Client whose contract is bound to the mint."""
    client = TokenClient(runtime, mint)
    client.set_mint()
    return client


@pytest.fixture
def account_a(runtime, mint, payer):
    """Payer's associated token account."""
    return runtime.get_or_create_account(mint, payer)


@pytest.fixture
def account_b(runtime, mint, outsider):
    """Outsider's associated token account."""
    return runtime.get_or_create_account(mint, outsider)


@pytest.fixture
def funded(client, account_a, account_b, mint_authority):
    """Client with 100000 tokens minted into account_a."""
    client.mint_to(account_a, mint_authority, 100000)
    return client
