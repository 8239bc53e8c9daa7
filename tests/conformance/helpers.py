"""
Shared setup and strategies for conformance tests.

Hypothesis tests build their own runtime per example instead of using
function-scoped pytest fixtures.
"""

from typing import List, NamedTuple, Optional

from hypothesis import strategies as st

from token_ledger import Address, LedgerRuntime, TokenClient, TokenError


class World(NamedTuple):
    runtime: LedgerRuntime
    client: TokenClient
    mint_authority: Address
    owners: List[Address]
    accounts: List[Address]


def make_world(num_accounts: int = 3) -> World:
    runtime = LedgerRuntime("conformance", verbose=False)
    mint_authority = Address.derive("mint_authority")
    mint = runtime.create_mint(mint_authority, decimals=3)
    client = TokenClient(runtime, mint)
    client.set_mint()
    owners = [Address.derive(f"owner_{i}") for i in range(num_accounts)]
    accounts = [runtime.get_or_create_account(mint, o) for o in owners]
    return World(runtime, client, mint_authority, owners, accounts)


def state_of(world: World):
    ledger = world.runtime.ledger
    return ledger.get_mint(world.client.mint).supply, ledger.balances(world.client.mint)


# (kind, source index, destination index, signer index, amount)
# Signer index len(owners) means the mint authority.
operation = st.tuples(
    st.sampled_from(["mint_to", "transfer", "burn"]),
    st.integers(min_value=0, max_value=2),
    st.integers(min_value=0, max_value=2),
    st.integers(min_value=0, max_value=3),
    st.integers(min_value=0, max_value=200000),
)


def apply(world: World, op) -> Optional[TokenError]:
    """Run one generated operation; return the error if it was rejected."""
    kind, src, dst, signer_idx, amount = op
    signers = world.owners + [world.mint_authority]
    signer = signers[signer_idx]
    client = world.client
    try:
        if kind == "mint_to":
            client.mint_to(world.accounts[dst], signer, amount)
        elif kind == "transfer":
            client.transfer(world.accounts[src], world.accounts[dst], signer, amount)
        else:
            client.burn(world.accounts[src], signer, amount)
    except TokenError as e:
        return e
    return None
