"""
Atomicity Conformance Tests

INVARIANT: Calls are all-or-nothing.

    ∀ call C:
        C applied  ⟹ every balance and supply delta of C is visible
        C rejected ⟹ ledger state is identical to the state before C

Partial application is impossible by construction: the contract computes
replacement records first, and the ledger swaps them in together.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from token_ledger import (
    AccountTriple, AuthorityMismatch, InsufficientFunds, Overflow,
    RuntimeRejected, MAX_AMOUNT,
)
from tests.conformance.helpers import make_world, apply, state_of, operation


class TestAtomicityProperties:

    @given(st.lists(operation, min_size=1, max_size=30))
    @settings(max_examples=100)
    def test_rejected_calls_leave_state_unchanged(self, ops):
        """
        PROPERTY: Every rejected call leaves supply and all balances untouched.
        """
        world = make_world()
        for op in ops:
            before = state_of(world)
            log_length = len(world.runtime.ledger.transaction_log)
            error = apply(world, op)
            if error is not None:
                assert state_of(world) == before
                assert len(world.runtime.ledger.transaction_log) == log_length


class TestAtomicityExamples:

    def test_overflowing_mint_changes_nothing(self):
        world = make_world()
        world.client.mint_to(world.accounts[0], world.mint_authority, MAX_AMOUNT)
        before = state_of(world)
        with pytest.raises(Overflow):
            world.client.mint_to(world.accounts[1], world.mint_authority, 1)
        assert state_of(world) == before

    def test_overdrawn_transfer_changes_nothing(self):
        world = make_world()
        world.client.mint_to(world.accounts[0], world.mint_authority, 10)
        before = state_of(world)
        with pytest.raises(InsufficientFunds):
            world.client.transfer(world.accounts[0], world.accounts[1], world.owners[0], 11)
        assert state_of(world) == before

    def test_protocol_rejection_changes_nothing(self):
        world = make_world()
        client = world.client
        client.mint_to(world.accounts[0], world.mint_authority, 10)
        before = state_of(world)
        # Mint not declared writable
        accounts = AccountTriple.of(writable=[world.accounts[0]], signers=[world.owners[0]])
        with pytest.raises(RuntimeRejected):
            client.burn(world.accounts[0], world.owners[0], 5, accounts=accounts)
        assert state_of(world) == before

    def test_delegate_over_allowance_changes_nothing(self):
        world = make_world()
        delegate = world.owners[2]
        world.client.mint_to(world.accounts[0], world.mint_authority, 100)
        world.runtime.approve(world.accounts[0], world.owners[0], delegate, 10,
                              signers=[world.owners[0]])
        before = state_of(world)
        allowance = world.runtime.ledger.get_account(world.accounts[0]).delegated_amount
        with pytest.raises(AuthorityMismatch):
            world.client.transfer(world.accounts[0], world.accounts[1], delegate, 11)
        assert state_of(world) == before
        assert world.runtime.ledger.get_account(world.accounts[0]).delegated_amount == allowance
