"""
runtime.py - In-process ledger runtime

LedgerRuntime is the boundary every call goes through:

    submit(Request) -> Response

For each request it
1. decodes the instruction data (selector + arguments),
2. resolves the account triple the call requires from its own view of the
   participants, using the same resolver the client uses,
3. checks the caller's declaration against it,
4. locks the declared writable accounts (in address order) so calls with
   intersecting writable sets run one at a time,
5. lets the contract compute the update and the ledger apply it.

Any TokenError becomes a REJECTED response carrying the exception; ledger
state is untouched in that case.

It also stands in for the external setup collaborators the contract relies
on: mint creation, associated-account creation and delegate approval.
"""

from __future__ import annotations
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .core import (
    Address, AccountTriple, ExecuteResult, Operation, Principal, TokenError,
)
from .abi import decode_call, encode_result
from .accounts import check_declared, resolve_accounts
from .ledger import TokenLedger
from .token import TokenContract


@dataclass(frozen=True, slots=True)
class Request:
    """
    A call submitted to the runtime.

    Attributes:
        data: Encoded instruction (selector + arguments)
        accounts: Declared readable/writable accounts and signers
    """
    data: bytes
    accounts: AccountTriple


@dataclass(frozen=True, slots=True)
class Response:
    """
    Outcome of a submitted call.

    Attributes:
        status: APPLIED or REJECTED
        return_data: Encoded return value (empty for writes and rejections)
        error: The failure, when status is REJECTED
        exec_id: Audit identifier of the applied transaction, if state changed
    """
    status: ExecuteResult
    return_data: bytes = b""
    error: Optional[TokenError] = None
    exec_id: Optional[str] = None


class LedgerRuntime:
    """
    Runtime hosting a TokenLedger and one TokenContract.

    Example:
        runtime = LedgerRuntime("local")
        mint = runtime.create_mint(mint_authority, freeze_authority, decimals=3)
        runtime.contract.set_mint(runtime.ledger, mint)
        client = TokenClient(runtime, mint)
    """

    def __init__(
        self,
        name: str = "runtime",
        contract: Optional[TokenContract] = None,
        verbose: bool = True,
    ):
        """
        Create a runtime.

        Args:
            name: Name used for the underlying ledger and exec ids
            contract: Contract to host (default: an unbound TokenContract)
            verbose: Print registrations, applied and rejected calls (default: True)
        """
        self.name = name
        self.verbose = verbose
        self.ledger = TokenLedger(name, verbose=verbose)
        self.contract = contract or TokenContract()
        self._locks: Dict[Address, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._binding_lock = threading.Lock()
        self._handlers: Dict[Operation, Callable[..., Any]] = {
            Operation.SET_MINT: self._handle_set_mint,
            Operation.TOTAL_SUPPLY: self._handle_total_supply,
            Operation.GET_BALANCE: self._handle_get_balance,
            Operation.MINT_TO: self._handle_mint_to,
            Operation.TRANSFER: self._handle_transfer,
            Operation.BURN: self._handle_burn,
        }

    # ========================================================================
    # SETUP COLLABORATORS
    # ========================================================================

    def create_mint(
        self,
        mint_authority: Optional[Principal],
        freeze_authority: Optional[Principal] = None,
        decimals: int = 0,
    ) -> Address:
        return self.ledger.create_mint(mint_authority, freeze_authority, decimals)

    def get_or_create_account(self, mint: Address, owner: Principal) -> Address:
        return self.ledger.get_or_create_account(mint, owner)

    def approve(
        self,
        account: Address,
        owner: Principal,
        delegate: Principal,
        amount: int,
        signers: Iterable[Principal] = (),
    ) -> None:
        with self._serialized([account]):
            self.ledger.approve(account, owner, delegate, amount, frozenset(signers))

    # ========================================================================
    # SUBMISSION
    # ========================================================================

    def _lock_for(self, address: Address) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(address)
            if lock is None:
                lock = self._locks[address] = threading.Lock()
            return lock

    @contextmanager
    def _serialized(self, writable: Iterable[Address]) -> Iterator[None]:
        """Hold the locks of every writable account, acquired in address order."""
        with ExitStack() as stack:
            for address in sorted(set(writable)):
                stack.enter_context(self._lock_for(address))
            yield

    def submit(self, request: Request) -> Response:
        """
        Validate and apply a request.

        Never raises a TokenError; failures are reported in the Response.
        """
        operation = None
        try:
            operation, args = decode_call(request.data)
            participants = self.contract.participants(operation, args)
            required = resolve_accounts(operation, participants, self.contract.program_id)
            check_declared(request.accounts, required)
            with self._serialized(request.accounts.writable):
                value, exec_id = self._handlers[operation](args, request.accounts.signers)
            return Response(
                status=ExecuteResult.APPLIED,
                return_data=encode_result(operation, value),
                exec_id=exec_id,
            )
        except TokenError as e:
            if self.verbose:
                name = operation.value if operation is not None else "?"
                print(f"✗ {ExecuteResult.REJECTED.name}: {name}: {type(e).__name__}: {e}")
            return Response(status=ExecuteResult.REJECTED, error=e)

    # ========================================================================
    # HANDLERS
    # ========================================================================

    def _apply(self, pending) -> Optional[str]:
        tx = self.ledger.execute(pending)
        return tx.exec_id if tx is not None else None

    def _handle_set_mint(self, args: List[Any], signers):
        with self._binding_lock:
            self.contract.set_mint(self.ledger, args[0], signers)
        return None, None

    def _handle_total_supply(self, args: List[Any], signers):
        return self.contract.total_supply(self.ledger), None

    def _handle_get_balance(self, args: List[Any], signers):
        return self.contract.get_balance(self.ledger, args[0]), None

    def _handle_mint_to(self, args: List[Any], signers):
        destination, authority, amount = args
        pending = self.contract.compute_mint_to(
            self.ledger, destination, authority, amount, signers)
        return None, self._apply(pending)

    def _handle_transfer(self, args: List[Any], signers):
        source, destination, authority, amount = args
        pending = self.contract.compute_transfer(
            self.ledger, source, destination, authority, amount, signers)
        return None, self._apply(pending)

    def _handle_burn(self, args: List[Any], signers):
        source, authority, amount = args
        pending = self.contract.compute_burn(
            self.ledger, source, authority, amount, signers)
        return None, self._apply(pending)
