"""
authority.py - Authority Model

Maps each operation to the role that must co-sign it and performs the
signer capability tests:

    mint_to          -> MINT_AUTHORITY
    transfer, burn   -> OWNER (or the owner's delegate)
    set_mint         -> ADMIN (when the contract has one)
    reads            -> NONE

A check is a boolean test: is the principal in the call's signer set, and is
it the authority configured on the resource? Any mismatch raises
AuthorityMismatch.
"""

from __future__ import annotations
from enum import Enum
from typing import AbstractSet, Dict, Optional

from .core import (
    AuthorityMismatch, Mint, Operation, Principal, TokenAccount,
)


class AuthorityRole(Enum):
    NONE = "none"
    ADMIN = "admin"
    MINT_AUTHORITY = "mint_authority"
    OWNER = "owner"
    FREEZE_AUTHORITY = "freeze_authority"


REQUIRED_ROLES: Dict[Operation, AuthorityRole] = {
    Operation.SET_MINT: AuthorityRole.ADMIN,
    Operation.TOTAL_SUPPLY: AuthorityRole.NONE,
    Operation.GET_BALANCE: AuthorityRole.NONE,
    Operation.MINT_TO: AuthorityRole.MINT_AUTHORITY,
    Operation.TRANSFER: AuthorityRole.OWNER,
    Operation.BURN: AuthorityRole.OWNER,
}


def required_role(operation: Operation) -> AuthorityRole:
    return REQUIRED_ROLES[operation]


def authority_for(
    role: AuthorityRole,
    mint: Optional[Mint] = None,
    account: Optional[TokenAccount] = None,
    admin: Optional[Principal] = None,
) -> Optional[Principal]:
    """
    Return the principal configured for a role on the given resources.

    Returns None when the role needs no signer or the resource has no
    authority configured for it.

    Raises:
        ValueError: If the resource the role refers to is not supplied
    """
    if role is AuthorityRole.NONE:
        return None
    if role is AuthorityRole.ADMIN:
        return admin
    if role is AuthorityRole.OWNER:
        if account is None:
            raise ValueError("OWNER role requires an account")
        return account.owner
    if mint is None:
        raise ValueError(f"{role.name} role requires a mint")
    if role is AuthorityRole.MINT_AUTHORITY:
        return mint.mint_authority
    return mint.freeze_authority


def is_signer(principal: Optional[Principal], signers: AbstractSet[Principal]) -> bool:
    return principal is not None and principal in signers


def check_signed_by(
    required: Optional[Principal],
    authority: Principal,
    signers: AbstractSet[Principal],
    what: str,
) -> None:
    """
    Require that `authority` is the configured principal and that it signed.

    Raises:
        AuthorityMismatch: On any mismatch, including an unset authority
    """
    if required is None:
        raise AuthorityMismatch(f"{what}: no authority configured")
    if authority != required:
        raise AuthorityMismatch(
            f"{what}: {authority.short()} is not the authority ({required.short()})"
        )
    if not is_signer(authority, signers):
        raise AuthorityMismatch(f"{what}: {authority.short()} did not sign")


def check_mint_authority(
    mint: Mint,
    authority: Principal,
    signers: AbstractSet[Principal],
) -> None:
    check_signed_by(
        authority_for(AuthorityRole.MINT_AUTHORITY, mint=mint),
        authority, signers, f"mint {mint.address.short()}",
    )


def check_owner_or_delegate(
    account: TokenAccount,
    authority: Principal,
    signers: AbstractSet[Principal],
    amount: int,
) -> bool:
    """
    Authorize spending `amount` from `account`.

    The owner may always spend. A delegate may spend up to its remaining
    allowance.

    Returns:
        True if the spend is authorized through the delegate (the caller must
        then consume the allowance), False if authorized as owner.

    Raises:
        AuthorityMismatch: If the authority did not sign, or is neither the
                           owner nor a delegate with enough allowance
    """
    what = f"account {account.address.short()}"
    if not is_signer(authority, signers):
        raise AuthorityMismatch(f"{what}: {authority.short()} did not sign")
    if authority == account.owner:
        return False
    if account.delegate is not None and authority == account.delegate:
        if amount > account.delegated_amount:
            raise AuthorityMismatch(
                f"{what}: delegate allowance {account.delegated_amount} < {amount}"
            )
        return True
    raise AuthorityMismatch(
        f"{what}: {authority.short()} is not the owner ({account.owner.short()})"
    )
