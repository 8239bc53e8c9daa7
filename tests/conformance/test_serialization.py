"""
Serialization Conformance Tests

INVARIANT: Calls whose writable sets intersect are applied one at a time.

Many threads hammering the same accounts must produce exactly the state a
serial execution would, with the supply invariant intact.
"""

from concurrent.futures import ThreadPoolExecutor

from tests.conformance.helpers import make_world


class TestConcurrentCalls:

    def test_concurrent_transfers_conserve_balances(self):
        world = make_world()
        client = world.client
        for account in world.accounts:
            client.mint_to(account, world.mint_authority, 10000)

        def ping_pong(i):
            src = i % 3
            dst = (i + 1) % 3
            client.transfer(world.accounts[src], world.accounts[dst], world.owners[src], 1)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(ping_pong, range(300)))

        # Each account sends 100 and receives 100
        assert [client.get_balance(a) for a in world.accounts] == [10000, 10000, 10000]
        assert client.total_supply() == 30000
        assert world.runtime.ledger.verify_supply()['valid']

    def test_concurrent_mints_are_all_counted(self):
        world = make_world()
        client = world.client

        def mint_one(i):
            client.mint_to(world.accounts[i % 3], world.mint_authority, 7)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(mint_one, range(200)))

        assert client.total_supply() == 1400
        assert len(world.runtime.ledger.transaction_log) == 200
        assert world.runtime.ledger.verify_supply()['valid']
