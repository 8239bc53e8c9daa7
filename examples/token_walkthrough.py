"""
Example: Minting, transferring and burning a fungible token.

Creates a mint with separate mint and freeze authorities, binds the token
contract to it, then runs the mint / transfer / burn flow through the
client. Also shows the failures a caller sees when a signer or an account
declaration is missing.
"""

from token_ledger import (
    AccountTriple, Address, LedgerRuntime, TokenClient, TOKEN_PROGRAM_ID,
    TokenError,
)


def show_balances(client, accounts):
    print(f"  total supply: {client.total_supply():,}")
    for label, account in accounts.items():
        print(f"  {label:<10} {account.short()}: {client.get_balance(account):,}")
    print()


def main():
    print("=" * 80)
    print("TOKEN LEDGER - Mint, Transfer and Burn")
    print("=" * 80)
    print()

    runtime = LedgerRuntime("demo", verbose=True)

    payer = Address.generate()
    outsider = Address.generate()
    mint_authority = Address.generate()
    freeze_authority = Address.generate()

    mint = runtime.create_mint(mint_authority, freeze_authority, decimals=3)
    client = TokenClient(runtime, mint)
    client.set_mint()

    payer_account = runtime.get_or_create_account(mint, payer)
    outsider_account = runtime.get_or_create_account(mint, outsider)
    holders = {"payer": payer_account, "outsider": outsider_account}

    print()
    print("Step 1: Mint 100,000 to the payer")
    print("-" * 80)
    client.mint_to(
        payer_account, mint_authority, 100000,
        accounts=AccountTriple.of(
            readable=[TOKEN_PROGRAM_ID],
            writable=[mint, payer_account],
            signers=[mint_authority],
        ),
    )
    show_balances(client, holders)

    print("Step 2: Payer transfers 70,000 to the outsider")
    print("-" * 80)
    client.transfer(payer_account, outsider_account, payer, 70000)
    show_balances(client, holders)

    print("Step 3: Outsider burns 20,000")
    print("-" * 80)
    client.burn(outsider_account, outsider, 20000)
    show_balances(client, holders)

    print("Step 4: Rejected calls leave state untouched")
    print("-" * 80)
    attempts = [
        ("transfer signed by a stranger",
         lambda: client.transfer(payer_account, outsider_account, Address.generate(), 1)),
        ("burn more than the balance",
         lambda: client.burn(outsider_account, outsider, 999999)),
        ("burn without declaring the mint writable",
         lambda: client.burn(
             outsider_account, outsider, 1,
             accounts=AccountTriple.of(
                 readable=[TOKEN_PROGRAM_ID, mint],
                 writable=[outsider_account],
                 signers=[outsider],
             ))),
    ]
    for label, attempt in attempts:
        try:
            attempt()
        except TokenError as e:
            print(f"  {label}: {type(e).__name__}")
    print()
    show_balances(client, holders)

    result = runtime.ledger.verify_supply()
    print(f"Supply check: {'valid' if result['valid'] else 'INVALID'}")
    print(f"Transactions applied: {len(runtime.ledger.transaction_log)}")


if __name__ == "__main__":
    main()
