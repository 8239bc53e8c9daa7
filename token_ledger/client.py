"""
client.py - Invocation Client

TokenClient turns method calls into runtime requests:

    client = TokenClient(runtime, mint)
    client.mint_to(account, mint_authority, 100000)
    client.total_supply()        # -> 100000

Each call encodes the selector and arguments, attaches the account triple
derived by resolve_accounts(), submits once and decodes the result. Callers
can override the signer set or the whole triple; the runtime then decides.
A rejected call re-raises the runtime's error unmodified. Nothing is cached
and nothing is retried.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence, Union

from .core import (
    Address, AccountTriple, ExecuteResult, Operation, Participants,
)
from .abi import decode_result, encode_call
from .accounts import resolve_accounts
from .runtime import LedgerRuntime, Request


AddressLike = Union[Address, str, bytes]


@dataclass(frozen=True, slots=True)
class CallResult:
    """
    Decoded outcome of a successful call.

    Attributes:
        status: Always ExecuteResult.APPLIED (failures raise)
        result: Decoded return value (int for reads, None for writes)
        exec_id: Audit id when the call changed state
    """
    status: ExecuteResult
    result: Any = None
    exec_id: Optional[str] = None


class TokenClient:
    """Client for a token contract hosted by a LedgerRuntime."""

    def __init__(self, runtime: LedgerRuntime, mint: AddressLike):
        self.runtime = runtime
        self.mint = Address.coerce(mint)

    def call(
        self,
        operation: Operation,
        args: Sequence[Any],
        accounts: AccountTriple,
    ) -> CallResult:
        """
        Submit one call with an explicit account triple.

        Raises:
            TokenError: The runtime's failure, unmodified
        """
        request = Request(data=encode_call(operation, args), accounts=accounts)
        response = self.runtime.submit(request)
        if response.status is ExecuteResult.REJECTED:
            raise response.error
        return CallResult(
            status=response.status,
            result=decode_result(operation, response.return_data),
            exec_id=response.exec_id,
        )

    def _invoke(
        self,
        operation: Operation,
        args: Sequence[Any],
        participants: Participants,
        signers: Optional[Iterable[Address]],
        accounts: Optional[AccountTriple],
    ) -> CallResult:
        if accounts is None:
            accounts = resolve_accounts(
                operation, participants, self.runtime.contract.program_id)
        if signers is not None:
            accounts = accounts.with_signers(Address.coerce(s) for s in signers)
        return self.call(operation, args, accounts)

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def set_mint(
        self,
        mint: Optional[AddressLike] = None,
        signers: Optional[Iterable[Address]] = None,
    ) -> CallResult:
        """Bind the hosted contract to `mint` (default: this client's mint)."""
        mint = Address.coerce(mint) if mint is not None else self.mint
        participants = Participants(mint=mint, admin=self.runtime.contract.admin)
        return self._invoke(Operation.SET_MINT, [mint], participants, signers, None)

    def total_supply(self, accounts: Optional[AccountTriple] = None) -> int:
        return self._invoke(
            Operation.TOTAL_SUPPLY, [], Participants(mint=self.mint), None, accounts,
        ).result

    def get_balance(
        self,
        account: AddressLike,
        accounts: Optional[AccountTriple] = None,
    ) -> int:
        account = Address.coerce(account)
        return self._invoke(
            Operation.GET_BALANCE, [account], Participants(account=account), None, accounts,
        ).result

    def mint_to(
        self,
        destination: AddressLike,
        mint_authority: AddressLike,
        amount: int,
        signers: Optional[Iterable[Address]] = None,
        accounts: Optional[AccountTriple] = None,
    ) -> CallResult:
        destination = Address.coerce(destination)
        mint_authority = Address.coerce(mint_authority)
        participants = Participants(
            mint=self.mint, destination=destination, authority=mint_authority)
        return self._invoke(
            Operation.MINT_TO, [destination, mint_authority, amount],
            participants, signers, accounts,
        )

    def transfer(
        self,
        source: AddressLike,
        destination: AddressLike,
        authority: AddressLike,
        amount: int,
        signers: Optional[Iterable[Address]] = None,
        accounts: Optional[AccountTriple] = None,
    ) -> CallResult:
        source = Address.coerce(source)
        destination = Address.coerce(destination)
        authority = Address.coerce(authority)
        participants = Participants(
            source=source, destination=destination, authority=authority)
        return self._invoke(
            Operation.TRANSFER, [source, destination, authority, amount],
            participants, signers, accounts,
        )

    def burn(
        self,
        source: AddressLike,
        authority: AddressLike,
        amount: int,
        signers: Optional[Iterable[Address]] = None,
        accounts: Optional[AccountTriple] = None,
    ) -> CallResult:
        source = Address.coerce(source)
        authority = Address.coerce(authority)
        participants = Participants(mint=self.mint, source=source, authority=authority)
        return self._invoke(
            Operation.BURN, [source, authority, amount],
            participants, signers, accounts,
        )
