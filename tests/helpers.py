"""
helpers.py - Assertion helpers shared across test suites
"""

from typing import Dict, Tuple

from token_ledger import Address, TokenLedger


def snapshot(ledger: TokenLedger, mint: Address) -> Tuple[int, Dict[Address, int]]:
    """Return (supply, balances) for a mint."""
    return ledger.get_mint(mint).supply, ledger.balances(mint)


def assert_supply_conserved(ledger: TokenLedger) -> None:
    result = ledger.verify_supply()
    assert result['valid'], f"Supply invariant violated: {result['discrepancies']}"
