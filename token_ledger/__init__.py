"""
token_ledger - Fungible Token Ledger

A token ledger (mint, transfer, burn, supply and balance queries) driven
through an account-based calling convention: every call declares which
accounts it reads, which it writes and which principals co-sign.

Usage:
    from token_ledger import Address, LedgerRuntime, TokenClient

    runtime = LedgerRuntime("local")
    mint_authority = Address.generate()
    payer = Address.generate()

    mint = runtime.create_mint(mint_authority, decimals=3)
    client = TokenClient(runtime, mint)
    client.set_mint()

    account = runtime.get_or_create_account(mint, payer)
    client.mint_to(account, mint_authority, 100000)
    client.total_supply()          # 100000
    client.get_balance(account)    # 100000
"""

# Core types
from .core import (
    Address,
    Principal,
    Mint,
    TokenAccount,
    AccountTriple,
    Participants,
    PendingUpdate,
    Transaction,
    LedgerView,
    Operation,
    ExecuteResult,
    empty_update,
    associated_account_address,
    ADDRESS_LENGTH,
    MAX_AMOUNT,
    TOKEN_PROGRAM_ID,
    # Exceptions
    TokenError,
    AlreadyBound,
    MintNotBound,
    AuthorityMismatch,
    InsufficientFunds,
    Overflow,
    RuntimeRejected,
    AccountNotFound,
    MintMismatch,
    InvalidInstruction,
)

# Authority model
from .authority import (
    AuthorityRole,
    REQUIRED_ROLES,
    required_role,
    authority_for,
    is_signer,
    check_mint_authority,
    check_owner_or_delegate,
)

# Call-accounts resolver
from .accounts import resolve_accounts, check_declared

# Wire encoding
from .abi import (
    selector,
    encode_call,
    decode_call,
    encode_result,
    decode_result,
)

# State machine
from .token import TokenContract
from .ledger import TokenLedger

# Runtime and client
from .runtime import LedgerRuntime, Request, Response
from .client import TokenClient, CallResult


__all__ = [
    'Address', 'Principal', 'Mint', 'TokenAccount', 'AccountTriple',
    'Participants', 'PendingUpdate', 'Transaction', 'LedgerView',
    'Operation', 'ExecuteResult', 'empty_update', 'associated_account_address',
    'ADDRESS_LENGTH', 'MAX_AMOUNT', 'TOKEN_PROGRAM_ID',
    'TokenError', 'AlreadyBound', 'MintNotBound', 'AuthorityMismatch',
    'InsufficientFunds', 'Overflow', 'RuntimeRejected', 'AccountNotFound',
    'MintMismatch', 'InvalidInstruction',
    'AuthorityRole', 'REQUIRED_ROLES', 'required_role', 'authority_for',
    'is_signer', 'check_mint_authority', 'check_owner_or_delegate',
    'resolve_accounts', 'check_declared',
    'selector', 'encode_call', 'decode_call', 'encode_result', 'decode_result',
    'TokenContract', 'TokenLedger',
    'LedgerRuntime', 'Request', 'Response',
    'TokenClient', 'CallResult',
]

__version__ = '0.1.0'
