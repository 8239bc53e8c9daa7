"""
Authorization Conformance Tests

INVARIANT: A write whose signer set lacks the required authority fails
with AuthorityMismatch and changes nothing.

    mint_to  requires the mint authority
    transfer requires the source owner (or delegate)
    burn     requires the source owner (or delegate)
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from token_ledger import AuthorityMismatch
from tests.conformance.helpers import make_world, state_of


class TestAuthorizationProperties:

    @given(st.integers(min_value=0, max_value=2), st.integers(min_value=0, max_value=1000))
    @settings(max_examples=50)
    def test_only_mint_authority_can_mint(self, signer_idx, amount):
        world = make_world()
        before = state_of(world)
        with pytest.raises(AuthorityMismatch):
            world.client.mint_to(world.accounts[0], world.owners[signer_idx], amount)
        assert state_of(world) == before

    @given(
        st.integers(min_value=0, max_value=2),
        st.integers(min_value=0, max_value=2),
        st.integers(min_value=0, max_value=2),
        st.integers(min_value=0, max_value=1000),
    )
    @settings(max_examples=100)
    def test_only_owner_can_spend(self, src, dst, signer_idx, amount):
        world = make_world()
        for account in world.accounts:
            world.client.mint_to(account, world.mint_authority, 1000)
        before = state_of(world)
        signer = world.owners[signer_idx]
        if signer_idx == src:
            world.client.transfer(world.accounts[src], world.accounts[dst], signer, amount)
            world.client.burn(world.accounts[src], signer, 0)
        else:
            with pytest.raises(AuthorityMismatch):
                world.client.transfer(world.accounts[src], world.accounts[dst], signer, amount)
            with pytest.raises(AuthorityMismatch):
                world.client.burn(world.accounts[src], signer, amount)
            assert state_of(world) == before

    @pytest.mark.parametrize("kind", ["mint_to", "transfer", "burn"])
    def test_correct_authority_without_signature(self, kind):
        """The right principal named as authority but absent from the signers."""
        world = make_world()
        world.client.mint_to(world.accounts[0], world.mint_authority, 100)
        before = state_of(world)
        stranger = [world.owners[2]]
        with pytest.raises(AuthorityMismatch):
            if kind == "mint_to":
                world.client.mint_to(world.accounts[0], world.mint_authority, 1, signers=stranger)
            elif kind == "transfer":
                world.client.transfer(world.accounts[0], world.accounts[1], world.owners[0], 1,
                                      signers=stranger)
            else:
                world.client.burn(world.accounts[0], world.owners[0], 1, signers=stranger)
        assert state_of(world) == before

    def test_zero_mint_still_requires_authority(self):
        world = make_world()
        with pytest.raises(AuthorityMismatch):
            world.client.mint_to(world.accounts[0], world.owners[0], 0)
        world.client.mint_to(world.accounts[0], world.mint_authority, 0)
        assert world.client.total_supply() == 0
