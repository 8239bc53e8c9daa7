"""
accounts.py - Call-Accounts Resolver

Single derivation of the account triple a call must declare. The client uses
resolve_accounts() to build requests; the runtime calls it again with its own
view of the participants and validates the declaration with check_declared().

    operation      readable          writable               signers
    set_mint       -                 -                      {admin}?
    total_supply   {mint}            -                      -
    get_balance    {account}         -                      -
    mint_to        {program}         {mint, destination}    {mint_authority}
    transfer       {program}         {source, destination}  {authority}
    burn           {program}         {source, mint}         {authority}
"""

from __future__ import annotations
from typing import Optional

from .core import (
    Address, AccountTriple, Operation, Participants,
    AuthorityMismatch, RuntimeRejected, TOKEN_PROGRAM_ID,
)


def _need(value: Optional[Address], operation: Operation, name: str) -> Address:
    if value is None:
        raise ValueError(f"{operation.value} requires participant '{name}'")
    return value


def resolve_accounts(
    operation: Operation,
    participants: Participants,
    program_id: Address = TOKEN_PROGRAM_ID,
) -> AccountTriple:
    """
    Return the account triple required by `operation`.

    Pure and side-effect free.

    Raises:
        ValueError: If a participant the operation needs is missing
    """
    p = participants
    if operation is Operation.SET_MINT:
        return AccountTriple.of(signers=[p.admin] if p.admin is not None else [])

    if operation is Operation.TOTAL_SUPPLY:
        return AccountTriple.of(readable=[_need(p.mint, operation, "mint")])

    if operation is Operation.GET_BALANCE:
        return AccountTriple.of(readable=[_need(p.account, operation, "account")])

    if operation is Operation.MINT_TO:
        writable = [_need(p.mint, operation, "mint"), _need(p.destination, operation, "destination")]
    elif operation is Operation.TRANSFER:
        writable = [_need(p.source, operation, "source"), _need(p.destination, operation, "destination")]
    elif operation is Operation.BURN:
        writable = [_need(p.source, operation, "source"), _need(p.mint, operation, "mint")]
    else:
        raise ValueError(f"Unknown operation: {operation}")

    return AccountTriple.of(
        readable=[program_id],
        writable=writable,
        signers=[_need(p.authority, operation, "authority")],
    )


def check_declared(declared: AccountTriple, required: AccountTriple) -> None:
    """
    Validate a caller's declaration against the independently resolved one.

    Extra declared accounts and signers are allowed.

    Raises:
        RuntimeRejected: If a required account is not declared with the
                         needed access
        AuthorityMismatch: If a required signer is not declared
    """
    missing_writable = required.writable - declared.writable
    if missing_writable:
        names = ", ".join(a.hex() for a in sorted(missing_writable))
        raise RuntimeRejected(f"accounts not declared writable: {names}")

    missing_readable = required.readable - declared.accounts
    if missing_readable:
        names = ", ".join(a.hex() for a in sorted(missing_readable))
        raise RuntimeRejected(f"accounts not declared: {names}")

    missing_signers = required.signers - declared.signers
    if missing_signers:
        names = ", ".join(a.hex() for a in sorted(missing_signers))
        raise AuthorityMismatch(f"missing required signers: {names}")
