"""
token.py - Token contract

The contract computes state transitions for one mint:
1. set_mint() - bind the contract to a mint (normally done at construction)
2. total_supply() / get_balance() - pure reads against a LedgerView
3. compute_mint_to() / compute_transfer() / compute_burn() - pure functions
   returning a PendingUpdate of replacement records

Compute functions never mutate anything. They run every check (amount range,
authority, funds, overflow) before building the update, so a failed call
produces no update at all and TokenLedger.execute() applies successful ones atomically.

Pattern:
    contract = TokenContract(mint=mint_address)
    update = contract.compute_transfer(view, source, dest, owner, 700, {owner})
    ledger.execute(update)
"""

from __future__ import annotations
from dataclasses import replace
from typing import AbstractSet, Any, Optional, Sequence

from .core import (
    Address, LedgerView, Mint, Operation, Participants, PendingUpdate,
    Principal, TokenAccount,
    MAX_AMOUNT, TOKEN_PROGRAM_ID,
    AccountNotFound, AlreadyBound, InsufficientFunds, InvalidInstruction,
    MintMismatch, MintNotBound, Overflow,
    empty_update,
)
from .authority import (
    AuthorityRole, authority_for, check_mint_authority,
    check_owner_or_delegate, check_signed_by, required_role,
)


def _check_amount(operation: Operation, amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInstruction(
            f"{operation.value}: amount must be int, got {type(amount).__name__}"
        )
    if amount < 0 or amount > MAX_AMOUNT:
        raise InvalidInstruction(f"{operation.value}: amount out of range: {amount}")


def _checked_add(a: int, b: int, what: str) -> int:
    total = a + b
    if total > MAX_AMOUNT:
        raise Overflow(f"{what}: {a} + {b} exceeds {MAX_AMOUNT}")
    return total


def _debit(account: TokenAccount, amount: int, via_delegate: bool) -> TokenAccount:
    if via_delegate:
        remaining = account.delegated_amount - amount
        return replace(
            account,
            balance=account.balance - amount,
            delegated_amount=remaining,
            delegate=account.delegate if remaining else None,
        )
    return replace(account, balance=account.balance - amount)


class TokenContract:
    """
    Token contract bound to a single mint.

    The mint binding is configuration: pass it to the constructor. set_mint()
    remains available for callers that bind after deployment; rebinding to
    the same mint is a no-op, to another mint raises AlreadyBound.

    Thread Safety:
        Compute functions are pure. set_mint() must be serialized by the caller
        (LedgerRuntime does this).
    """

    def __init__(
        self,
        mint: Optional[Address] = None,
        admin: Optional[Principal] = None,
        program_id: Address = TOKEN_PROGRAM_ID,
    ):
        """
        Create a token contract.

        Args:
            mint: Mint to bind to (default: unbound until set_mint)
            admin: Principal that must sign set_mint (default: anyone)
            program_id: Token program account declared by mutating calls
        """
        self._mint = mint
        self.admin = admin
        self.program_id = program_id

    @property
    def mint(self) -> Optional[Address]:
        return self._mint

    def require_mint(self) -> Address:
        if self._mint is None:
            raise MintNotBound("contract is not bound to a mint")
        return self._mint

    # ========================================================================
    # BINDING
    # ========================================================================

    def set_mint(
        self,
        view: LedgerView,
        mint_address: Address,
        signers: AbstractSet[Principal] = frozenset(),
    ) -> bool:
        """
        Bind the contract to a mint.

        Returns:
            True if the binding changed, False for a same-address no-op

        Raises:
            AuthorityMismatch: If an admin is configured and did not sign
            AlreadyBound: If bound to a different mint
            AccountNotFound: If the mint does not exist
        """
        if self.admin is not None:
            self._authorize(Operation.SET_MINT, self.admin, signers)
        if self._mint is not None:
            if self._mint == mint_address:
                return False
            raise AlreadyBound(
                f"already bound to {self._mint.hex()}, cannot bind {mint_address.hex()}"
            )
        if view.get_mint(mint_address) is None:
            raise AccountNotFound(f"mint {mint_address.hex()} not found")
        self._mint = mint_address
        return True

    def participants(self, operation: Operation, args: Sequence[Any]) -> Participants:
        """Map decoded positional arguments to logical participants."""
        if operation is Operation.SET_MINT:
            return Participants(mint=args[0], admin=self.admin)
        if operation is Operation.TOTAL_SUPPLY:
            return Participants(mint=self.require_mint())
        if operation is Operation.GET_BALANCE:
            return Participants(account=args[0])
        if operation is Operation.MINT_TO:
            return Participants(mint=self.require_mint(), destination=args[0], authority=args[1])
        if operation is Operation.TRANSFER:
            return Participants(source=args[0], destination=args[1], authority=args[2])
        if operation is Operation.BURN:
            return Participants(mint=self.require_mint(), source=args[0], authority=args[1])
        raise ValueError(f"Unknown operation: {operation}")

    # ========================================================================
    # AUTHORIZATION
    # ========================================================================

    def _authorize(
        self,
        operation: Operation,
        authority: Principal,
        signers: AbstractSet[Principal],
        mint: Optional[Mint] = None,
        account: Optional[TokenAccount] = None,
        amount: int = 0,
    ) -> bool:
        """
        Run the authority check for the role `operation` requires.

        Returns:
            True if the spend is authorized through the account's delegate
        """
        role = required_role(operation)
        if role is AuthorityRole.NONE:
            return False
        if role is AuthorityRole.OWNER:
            return check_owner_or_delegate(account, authority, signers, amount)
        if role is AuthorityRole.MINT_AUTHORITY:
            check_mint_authority(mint, authority, signers)
            return False
        check_signed_by(
            authority_for(role, mint=mint, account=account, admin=self.admin),
            authority, signers, operation.value,
        )
        return False

    # ========================================================================
    # READS
    # ========================================================================

    def _load_mint(self, view: LedgerView) -> Mint:
        address = self.require_mint()
        mint = view.get_mint(address)
        if mint is None:
            raise AccountNotFound(f"mint {address.hex()} not found")
        return mint

    def _load_account(self, view: LedgerView, address: Address, role: str) -> TokenAccount:
        bound = self.require_mint()
        account = view.get_account(address)
        if account is None:
            raise AccountNotFound(f"{role} account {address.hex()} not found")
        if account.mint != bound:
            raise MintMismatch(
                f"{role} account {address.hex()} holds mint {account.mint.hex()}"
            )
        return account

    def total_supply(self, view: LedgerView) -> int:
        return self._load_mint(view).supply

    def get_balance(self, view: LedgerView, account: Address) -> int:
        """
        Return the balance of `account`.

        Unknown accounts read as 0; at this layer there is no distinction
        between an empty account and one that was never created.
        """
        record = view.get_account(account)
        return record.balance if record is not None else 0

    # ========================================================================
    # WRITES
    # ========================================================================

    def compute_mint_to(
        self,
        view: LedgerView,
        destination: Address,
        mint_authority: Principal,
        amount: int,
        signers: AbstractSet[Principal],
    ) -> PendingUpdate:
        """
        Mint `amount` new tokens into `destination`.

        Authority is checked even for amount == 0, which is otherwise a no-op.

        Raises:
            InvalidInstruction: If amount is outside 0..MAX_AMOUNT
            AuthorityMismatch: If mint_authority is not the mint's authority or did not sign
            Overflow: If supply or destination balance would exceed MAX_AMOUNT
        """
        _check_amount(Operation.MINT_TO, amount)
        mint = self._load_mint(view)
        self._authorize(Operation.MINT_TO, mint_authority, signers, mint=mint)
        dest = self._load_account(view, destination, "destination")
        if amount == 0:
            return empty_update(Operation.MINT_TO)

        new_supply = _checked_add(mint.supply, amount, "supply")
        new_balance = _checked_add(dest.balance, amount, "balance")
        return PendingUpdate(
            operation=Operation.MINT_TO,
            mints=(replace(mint, supply=new_supply),),
            accounts=(replace(dest, balance=new_balance),),
        )

    def compute_transfer(
        self,
        view: LedgerView,
        source: Address,
        destination: Address,
        authority: Principal,
        amount: int,
        signers: AbstractSet[Principal],
    ) -> PendingUpdate:
        """
        Move `amount` from `source` to `destination`. Supply is unchanged.

        Raises:
            InvalidInstruction: If amount is outside 0..MAX_AMOUNT
            AuthorityMismatch: If authority did not sign or may not spend from source
            InsufficientFunds: If source.balance < amount
            Overflow: If the destination balance would exceed MAX_AMOUNT
        """
        _check_amount(Operation.TRANSFER, amount)
        src = self._load_account(view, source, "source")
        dst = self._load_account(view, destination, "destination")
        via_delegate = self._authorize(
            Operation.TRANSFER, authority, signers, account=src, amount=amount)
        if src.balance < amount:
            raise InsufficientFunds(
                f"account {source.hex()}: balance {src.balance} < {amount}"
            )
        if amount == 0:
            return empty_update(Operation.TRANSFER)

        debited = _debit(src, amount, via_delegate)
        if source == destination:
            # Self-transfer only consumes delegate allowance
            if not via_delegate:
                return empty_update(Operation.TRANSFER)
            return PendingUpdate(
                operation=Operation.TRANSFER,
                accounts=(replace(debited, balance=src.balance),),
            )

        credited = replace(dst, balance=_checked_add(dst.balance, amount, "balance"))
        return PendingUpdate(
            operation=Operation.TRANSFER,
            accounts=(debited, credited),
        )

    def compute_burn(
        self,
        view: LedgerView,
        source: Address,
        authority: Principal,
        amount: int,
        signers: AbstractSet[Principal],
    ) -> PendingUpdate:
        """
        Destroy `amount` tokens held by `source`.

        Raises:
            InvalidInstruction: If amount is outside 0..MAX_AMOUNT
            AuthorityMismatch: If authority did not sign or may not spend from source
            InsufficientFunds: If source.balance < amount
        """
        _check_amount(Operation.BURN, amount)
        mint = self._load_mint(view)
        src = self._load_account(view, source, "source")
        via_delegate = self._authorize(
            Operation.BURN, authority, signers, account=src, amount=amount)
        if src.balance < amount:
            raise InsufficientFunds(
                f"account {source.hex()}: balance {src.balance} < {amount}"
            )
        if amount == 0:
            return empty_update(Operation.BURN)

        return PendingUpdate(
            operation=Operation.BURN,
            mints=(replace(mint, supply=mint.supply - amount),),
            accounts=(_debit(src, amount, via_delegate),),
        )
