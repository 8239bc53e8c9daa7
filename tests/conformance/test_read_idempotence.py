"""
Read Idempotence Conformance Tests

INVARIANT: total_supply and get_balance are pure reads.

    ∀ state S, read R:
        R(S) = R(S) for repeated calls without intervening writes
        state after R = S
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from token_ledger import Address
from tests.conformance.helpers import make_world, apply, state_of, operation


class TestReadIdempotence:

    @given(st.lists(operation, max_size=20), st.integers(min_value=2, max_value=5))
    @settings(max_examples=50)
    def test_repeated_reads_agree(self, ops, repeats):
        world = make_world()
        for op in ops:
            apply(world, op)
        before = state_of(world)
        log_length = len(world.runtime.ledger.transaction_log)

        supplies = {world.client.total_supply() for _ in range(repeats)}
        balances = {
            tuple(world.client.get_balance(a) for a in world.accounts)
            for _ in range(repeats)
        }
        assert len(supplies) == 1
        assert len(balances) == 1
        assert state_of(world) == before
        assert len(world.runtime.ledger.transaction_log) == log_length

    def test_unknown_account_reads_zero(self):
        world = make_world()
        assert world.client.get_balance(Address.derive("never_created")) == 0
