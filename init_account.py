"""
Open a ledger account from the command line.

    python init_account.py cash "Cash" EUR --opening 150.00
"""
import argparse
import asyncio

from ledgerbot.core.config import get_settings
from ledgerbot.core.container import build_container
from ledgerbot.infrastructure.database import init_db
from ledgerbot.modules.accounts import AccountAlreadyExistsError, AccountCreateInput, InvalidAccountError
from ledgerbot.modules.currency import ParseOptions, parse_amount
from ledgerbot.modules.ledger import Actor


async def open_account(slug: str, name: str, currency: str, opening: str) -> None:
    container = build_container(get_settings())
    try:
        await init_db(container.engine)

        parsed = parse_amount(opening, ParseOptions(allow_negative=True, allow_zero=True))
        if not parsed.ok:
            print(f"Invalid opening balance {opening!r}: {parsed.error.value}")
            return

        try:
            account = await container.ledger.open_account(
                AccountCreateInput(name=name, slug=slug, currency=currency, opening_balance=parsed.value),
                actor=Actor(id="cli", name="Command line"),
            )
        except AccountAlreadyExistsError:
            print(f"Account '{slug}' already exists")
            return
        except InvalidAccountError as exc:
            print(f"Invalid account: {exc}")
            return

        print(f"Account opened: {account.slug} ({account.currency}), balance {account.balance}")
    finally:
        await container.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("slug")
    parser.add_argument("name")
    parser.add_argument("currency")
    parser.add_argument("--opening", default="0", help="opening balance in major units")
    args = parser.parse_args()
    asyncio.run(open_account(args.slug, args.name, args.currency, args.opening))
