"""
Core types and pure functions for the token ledger.

This module provides the foundational data structures and protocols:
1. Protocols: LedgerView for read-only ledger access
2. Immutable data structures: Address, Mint, TokenAccount, AccountTriple,
   PendingUpdate, Transaction
3. Exceptions: TokenError and the failure kinds a call can surface
4. Enums: Operation (the exposed selector surface) and ExecuteResult

All functions in this module are pure and operate on read-only views.
No function can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import hashlib
import secrets
from typing import (
    Dict, Optional, Protocol, Tuple, FrozenSet, Iterable, Union,
    runtime_checkable,
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Width of a canonical address in bytes.
ADDRESS_LENGTH = 32

# Amounts and supplies are unsigned 64-bit integers.
MAX_AMOUNT = 2 ** 64 - 1

# Decimals are stored in a single byte.
MAX_DECIMALS = 255


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TokenError(Exception):
    """Base exception for all token ledger errors."""
    pass


class AlreadyBound(TokenError):
    """Raised when a contract already bound to one mint is asked to bind to another."""
    pass


class MintNotBound(TokenError):
    """Raised when a mint-dependent operation runs before the contract is bound to a mint."""
    pass


class AuthorityMismatch(TokenError):
    """Raised when the required authority is missing from the signer set or is not the configured one."""
    pass


class InsufficientFunds(TokenError):
    """Raised when an account balance is lower than the amount being moved or burned."""
    pass


class Overflow(TokenError):
    """Raised when a balance or supply would exceed MAX_AMOUNT."""
    pass


class RuntimeRejected(TokenError):
    """Raised when the declared readable/writable accounts do not cover what the call requires."""
    pass


class AccountNotFound(TokenError):
    """Raised when an operation names an account or mint the ledger does not hold."""
    pass


class MintMismatch(TokenError):
    """Raised when an account belongs to a different mint than the one the contract is bound to."""
    pass


class InvalidInstruction(TokenError):
    """Raised when instruction data cannot be decoded."""
    pass


# ============================================================================
# ADDRESSES
# ============================================================================

@dataclass(frozen=True, slots=True, order=True)
class Address:
    """
    Canonical fixed-width binary address.

    Addresses are exchanged at the runtime boundary as raw bytes and exposed
    in textual form as 0x-prefixed lowercase hex. Ordering is bytewise, which
    gives a deterministic order for lock acquisition and log output.
    """
    raw: bytes

    def __post_init__(self):
        if not isinstance(self.raw, bytes):
            raise ValueError(f"Address must be bytes, got {type(self.raw)}")
        if len(self.raw) != ADDRESS_LENGTH:
            raise ValueError(
                f"Address must be {ADDRESS_LENGTH} bytes, got {len(self.raw)}"
            )

    @classmethod
    def from_hex(cls, text: str) -> Address:
        """Parse the textual form; the 0x prefix is optional."""
        body = text[2:] if text.lower().startswith("0x") else text
        try:
            raw = bytes.fromhex(body)
        except ValueError:
            raise ValueError(f"Invalid address hex: {text!r}") from None
        return cls(raw)

    @classmethod
    def derive(cls, *seeds: Union[str, bytes, 'Address']) -> Address:
        """
        Derive an address deterministically from seeds.

        Each seed is length-prefixed before hashing so that ("ab", "c") and
        ("a", "bc") derive different addresses.
        """
        h = hashlib.sha256()
        for seed in seeds:
            if isinstance(seed, Address):
                data = seed.raw
            elif isinstance(seed, str):
                data = seed.encode()
            else:
                data = bytes(seed)
            h.update(len(data).to_bytes(4, "little"))
            h.update(data)
        return cls(h.digest())

    @classmethod
    def generate(cls) -> Address:
        """Return a fresh random address (stand-in for a new keypair's public key)."""
        return cls(secrets.token_bytes(ADDRESS_LENGTH))

    @classmethod
    def coerce(cls, value: Union[str, bytes, 'Address']) -> Address:
        """Accept an Address, its raw bytes, or its hex text."""
        if isinstance(value, Address):
            return value
        if isinstance(value, str):
            return cls.from_hex(value)
        return cls(bytes(value))

    def hex(self) -> str:
        return "0x" + self.raw.hex()

    def short(self) -> str:
        """Abbreviated form for log lines."""
        h = self.raw.hex()
        return f"{h[:6]}..{h[-4:]}"

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"Address({self.short()})"


# A principal is any address capable of signing.
Principal = Address

# The read-only token program account that every mutating call declares.
TOKEN_PROGRAM_ID = Address.derive("token_program")


def associated_account_address(mint: Address, owner: Address) -> Address:
    """Return the associated token account address for (owner, mint)."""
    return Address.derive("associated_token_account", owner, mint)


# ============================================================================
# ENUMS
# ============================================================================

class Operation(Enum):
    """
    The exposed operation surface. Values are the bit-exact selector names.
    """
    SET_MINT = "set_mint"
    TOTAL_SUPPLY = "total_supply"
    GET_BALANCE = "get_balance"
    MINT_TO = "mint_to"
    TRANSFER = "transfer"
    BURN = "burn"

    @property
    def is_read_only(self) -> bool:
        return self in (Operation.TOTAL_SUPPLY, Operation.GET_BALANCE)


class ExecuteResult(Enum):
    """
    Outcome of a submitted call.

    APPLIED: The call was validated and its effects (if any) applied.
    REJECTED: The call failed; ledger state is unchanged.
    """
    APPLIED = "applied"
    REJECTED = "rejected"


# ============================================================================
# LEDGER RECORDS
# ============================================================================

def _check_amount(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be int, got {type(value)}")
    if value < 0 or value > MAX_AMOUNT:
        raise ValueError(f"{name} out of range: {value}")


@dataclass(frozen=True, slots=True)
class Mint:
    """
    Identity and supply record for one fungible token type.

    Attributes:
        address: Mint account address
        decimals: Display precision (number of base units per token = 10**decimals)
        mint_authority: Principal allowed to mint; None disables minting
        freeze_authority: Principal allowed to freeze accounts, if any
        supply: Total tokens in circulation
    """
    address: Address
    decimals: int
    mint_authority: Optional[Principal]
    freeze_authority: Optional[Principal] = None
    supply: int = 0

    def __post_init__(self):
        if not 0 <= self.decimals <= MAX_DECIMALS:
            raise ValueError(f"decimals must be in 0..{MAX_DECIMALS}, got {self.decimals}")
        _check_amount("supply", self.supply)

    def __repr__(self) -> str:
        return f"Mint({self.address.short()} supply={self.supply} decimals={self.decimals})"


@dataclass(frozen=True, slots=True)
class TokenAccount:
    """
    A balance holder for exactly one mint and one owning principal.

    Attributes:
        address: Account address
        mint: Address of the mint this account holds (reference, not ownership)
        owner: Principal that may move or burn the balance
        balance: Tokens held, in base units
        frozen: Freeze flag (data only; no instruction toggles it)
        delegate: Principal approved to spend on the owner's behalf
        delegated_amount: Remaining allowance of the delegate
    """
    address: Address
    mint: Address
    owner: Principal
    balance: int = 0
    frozen: bool = False
    delegate: Optional[Principal] = None
    delegated_amount: int = 0

    def __post_init__(self):
        _check_amount("balance", self.balance)
        _check_amount("delegated_amount", self.delegated_amount)
        if self.delegate is None and self.delegated_amount:
            raise ValueError("delegated_amount requires a delegate")

    def __repr__(self) -> str:
        return f"TokenAccount({self.address.short()} owner={self.owner.short()} balance={self.balance})"


# ============================================================================
# ACCOUNT DECLARATIONS
# ============================================================================

@dataclass(frozen=True, slots=True)
class AccountTriple:
    """
    The {readable, writable, signers} declaration attached to a call.

    Writable accounts are implicitly readable.
    """
    readable: FrozenSet[Address] = frozenset()
    writable: FrozenSet[Address] = frozenset()
    signers: FrozenSet[Principal] = frozenset()

    @classmethod
    def of(
        cls,
        readable: Iterable[Address] = (),
        writable: Iterable[Address] = (),
        signers: Iterable[Principal] = (),
    ) -> AccountTriple:
        return cls(frozenset(readable), frozenset(writable), frozenset(signers))

    @property
    def accounts(self) -> FrozenSet[Address]:
        """Every account the call may touch."""
        return self.readable | self.writable

    def with_signers(self, signers: Iterable[Principal]) -> AccountTriple:
        return AccountTriple(self.readable, self.writable, frozenset(signers))


@dataclass(frozen=True, slots=True)
class Participants:
    """
    Logical participants of a call. Only the fields an operation uses are set.
    """
    mint: Optional[Address] = None
    account: Optional[Address] = None
    source: Optional[Address] = None
    destination: Optional[Address] = None
    authority: Optional[Principal] = None
    admin: Optional[Principal] = None


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to ledger state.

    Contract functions accept a LedgerView to declare their read-only intent.
    TokenLedger implements this protocol; tests use FakeView.
    """

    def get_mint(self, address: Address) -> Optional[Mint]:
        """Return the mint record, or None if unknown."""
        ...

    def get_account(self, address: Address) -> Optional[TokenAccount]:
        """Return the token account record, or None if unknown."""
        ...


# ============================================================================
# TRANSACTIONS
# ============================================================================

@dataclass(frozen=True, slots=True)
class PendingUpdate:
    """
    Replacement records computed by a contract operation - represents INTENT.

    The ledger swaps every record in at once or none of them.

    Attributes:
        operation: Operation that produced the update
        mints: New Mint records (replacing records with the same address)
        accounts: New TokenAccount records
    """
    operation: Operation
    mints: Tuple[Mint, ...] = ()
    accounts: Tuple[TokenAccount, ...] = ()

    def is_empty(self) -> bool:
        """Return True if nothing would change."""
        return not self.mints and not self.accounts

    def __repr__(self) -> str:
        return f"PendingUpdate({self.operation.value}, {len(self.mints)} mints, {len(self.accounts)} accounts)"


def empty_update(operation: Operation) -> PendingUpdate:
    """Create a PendingUpdate that changes nothing."""
    return PendingUpdate(operation=operation)


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An executed, immutable record of ledger state changes - represents FACT.

    Attributes:
        operation: Operation that was applied
        exec_id: Unique execution identifier (ledger + sequence)
        ledger_name: Name of the ledger that executed this
        sequence_number: Monotonic sequence within the ledger
        supply_deltas: Supply change per mint
        balance_deltas: Balance change per account
    """
    operation: Operation
    exec_id: str
    ledger_name: str
    sequence_number: int
    supply_deltas: Tuple[Tuple[Address, int], ...] = ()
    balance_deltas: Tuple[Tuple[Address, int], ...] = ()

    def __repr__(self) -> str:
        parts = [f"{a.short()}:{d:+d}" for a, d in self.balance_deltas]
        return f"Transaction({self.exec_id} {self.operation.value} [{', '.join(parts)}])"


# Mapping from account address to balance, used by supply verification.
BalanceMap = Dict[Address, int]
