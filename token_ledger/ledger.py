"""
ledger.py - Stateful token ledger

TokenLedger is the state store behind the token contract. It is the only
module that mutates mint and account records.

Key responsibilities:
    - Implements LedgerView protocol for safe read-only access by the contract
    - Registers mints and token accounts (the account-creation collaborator)
    - Applies PendingUpdates atomically (all records swap in or none do)
    - Keeps an audit log of every applied transaction
    - Verifies that account balances sum to each mint's supply
"""

from __future__ import annotations
import threading
from dataclasses import replace
from typing import AbstractSet, Any, Dict, List, Optional

from .core import (
    Address, Mint, PendingUpdate, Principal, TokenAccount, Transaction,
    ExecuteResult, BalanceMap,
    AccountNotFound, AuthorityMismatch, MintMismatch,
    associated_account_address,
)
from .authority import is_signer


class TokenLedger:
    """
    Mint and account store with atomic application of contract updates.

    Implements the LedgerView protocol, so it can be handed directly to
    TokenContract compute functions.

    Thread Safety:
        Commits are guarded by an internal lock; a single record read is
        always consistent. Serializing conflicting operations is the
        runtime's job.

    Example:
        ledger = TokenLedger("main")
        mint = ledger.create_mint(authority, decimals=3)
        account = ledger.get_or_create_account(mint, owner)
        update = TokenContract(mint).compute_mint_to(
            ledger, account, authority, 1000, {authority})
        ledger.execute(update)
    """

    def __init__(self, name: str, verbose: bool = True):
        """
        Create a token ledger.

        Args:
            name: Ledger identifier
            verbose: Print registrations and applied transactions (default: True)
        """
        self.name = name
        self.verbose = verbose
        self.mints: Dict[Address, Mint] = {}
        self.accounts: Dict[Address, TokenAccount] = {}
        self.transaction_log: List[Transaction] = []
        self._next_sequence: int = 0
        self._commit_lock = threading.Lock()

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    def get_mint(self, address: Address) -> Optional[Mint]:
        return self.mints.get(address)

    def get_account(self, address: Address) -> Optional[TokenAccount]:
        return self.accounts.get(address)

    def list_accounts(self, mint: Address) -> List[TokenAccount]:
        """All accounts holding `mint`, in address order."""
        return sorted(
            (a for a in self.accounts.values() if a.mint == mint),
            key=lambda a: a.address,
        )

    def balances(self, mint: Address) -> BalanceMap:
        return {a.address: a.balance for a in self.list_accounts(mint)}

    def verify_supply(self) -> Dict[str, Any]:
        """
        Verify that every mint's supply equals the sum of its account balances.

        Returns:
            Dict with keys:
            - 'valid': bool - True if the invariant holds for all mints
            - 'supplies': Dict[Address, int] - Recorded supply per mint
            - 'discrepancies': List[Dict] - mint, supply, balance_sum, difference

        Example:
            result = ledger.verify_supply()
            assert result['valid'], result['discrepancies']
        """
        supplies = {}
        discrepancies = []
        for address in sorted(self.mints):
            supply = self.mints[address].supply
            held = sum(self.balances(address).values())
            supplies[address] = supply
            if held != supply:
                discrepancies.append({
                    'mint': address,
                    'supply': supply,
                    'balance_sum': held,
                    'difference': held - supply,
                })
        return {
            'valid': len(discrepancies) == 0,
            'supplies': supplies,
            'discrepancies': discrepancies,
        }

    # ========================================================================
    # REGISTRATION (Mutating)
    # ========================================================================

    def create_mint(
        self,
        mint_authority: Optional[Principal],
        freeze_authority: Optional[Principal] = None,
        decimals: int = 0,
        address: Optional[Address] = None,
    ) -> Address:
        """
        Register a new mint with zero supply.

        Args:
            mint_authority: Principal allowed to mint
            freeze_authority: Optional freeze authority
            decimals: Display precision
            address: Mint address (default: freshly generated)

        Returns:
            The mint address

        Raises:
            ValueError: If the address is already in use
        """
        address = address or Address.generate()
        mint = Mint(
            address=address,
            decimals=decimals,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority,
        )
        with self._commit_lock:
            if address in self.mints or address in self.accounts:
                raise ValueError(f"Address {address.hex()} already in use")
            self.mints[address] = mint
        if self.verbose:
            print(f"📝 Registered mint {address.short()} (decimals={decimals})")
        return address

    def create_account(
        self,
        mint: Address,
        owner: Principal,
        address: Optional[Address] = None,
    ) -> Address:
        """
        Register a new, empty token account.

        Raises:
            AccountNotFound: If the mint does not exist
            ValueError: If the address is already in use
        """
        if mint not in self.mints:
            raise AccountNotFound(f"mint {mint.hex()} not found")
        address = address or Address.generate()
        with self._commit_lock:
            if address in self.accounts or address in self.mints:
                raise ValueError(f"Address {address.hex()} already in use")
            self.accounts[address] = TokenAccount(address=address, mint=mint, owner=owner)
        if self.verbose:
            print(f"📝 Registered account {address.short()} owner={owner.short()}")
        return address

    def get_or_create_account(self, mint: Address, owner: Principal) -> Address:
        """
        Return the associated account for (owner, mint), creating it if needed.

        Idempotent.

        Raises:
            AccountNotFound: If the mint does not exist
            MintMismatch: If the associated address holds an incompatible account
        """
        address = associated_account_address(mint, owner)
        existing = self.accounts.get(address)
        if existing is not None:
            if existing.mint != mint or existing.owner != owner:
                raise MintMismatch(f"account {address.hex()} does not match mint/owner")
            return address
        try:
            return self.create_account(mint, owner, address=address)
        except ValueError:
            # Lost a race with a concurrent creator
            return self.get_or_create_account(mint, owner)

    def approve(
        self,
        account: Address,
        owner: Principal,
        delegate: Principal,
        amount: int,
        signers: AbstractSet[Principal] = frozenset(),
    ) -> None:
        """
        Let `delegate` spend up to `amount` from `account`.

        Replaces any previous approval. Passing amount=0 revokes.

        Raises:
            AccountNotFound: If the account does not exist
            AuthorityMismatch: If owner is not the account owner or did not sign
        """
        with self._commit_lock:
            record = self.accounts.get(account)
            if record is None:
                raise AccountNotFound(f"account {account.hex()} not found")
            if owner != record.owner or not is_signer(owner, signers):
                raise AuthorityMismatch(
                    f"account {account.hex()}: approval requires owner signature"
                )
            self.accounts[account] = replace(
                record,
                delegate=delegate if amount else None,
                delegated_amount=amount,
            )

    # ========================================================================
    # TRANSACTION EXECUTION (Mutating)
    # ========================================================================

    def _generate_exec_id(self, sequence: int) -> str:
        return f"exec:{self.name}:{sequence:012d}"

    def execute(self, pending: PendingUpdate) -> Optional[Transaction]:
        """
        Apply a PendingUpdate atomically.

        The update was fully validated by the contract; the ledger only checks
        that every record it replaces still exists, then swaps all of them in.

        Returns:
            The logged Transaction, or None for an empty update

        Raises:
            AccountNotFound: If a record being replaced does not exist
        """
        if pending.is_empty():
            return None

        with self._commit_lock:
            for mint in pending.mints:
                if mint.address not in self.mints:
                    raise AccountNotFound(f"mint {mint.address.hex()} not found")
            for account in pending.accounts:
                if account.address not in self.accounts:
                    raise AccountNotFound(f"account {account.address.hex()} not found")

            supply_deltas = tuple(
                (m.address, m.supply - self.mints[m.address].supply)
                for m in pending.mints
            )
            balance_deltas = tuple(
                (a.address, a.balance - self.accounts[a.address].balance)
                for a in pending.accounts
            )

            sequence = self._next_sequence
            self._next_sequence += 1
            tx = Transaction(
                operation=pending.operation,
                exec_id=self._generate_exec_id(sequence),
                ledger_name=self.name,
                sequence_number=sequence,
                supply_deltas=supply_deltas,
                balance_deltas=balance_deltas,
            )

            for mint in pending.mints:
                self.mints[mint.address] = mint
            for account in pending.accounts:
                self.accounts[account.address] = account

            # Log transaction (always - audit trail is mandatory)
            self.transaction_log.append(tx)

        if self.verbose:
            print(f"✓ {ExecuteResult.APPLIED.name}: {tx!r}")
        return tx
