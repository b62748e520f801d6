"""
Wallet Slot Maintenance
=======================

Inspect, import or clear the stored wallet credential.

COMMANDS:
    status      Show whether the wallet slot is empty, present or unreadable (default)
    show        Show the stored address and private key length
    import      Store a credential (private key from CREDSTORE_IMPORT_KEY or a prompt)
    delete      Clear the wallet slot (requires --yes)

EXAMPLES:
    credstore
    credstore show
    credstore import --address 7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU
    credstore delete --yes

Settings come from CREDSTORE_* environment variables; a .env file in the
project root is loaded first.
"""

import argparse
import asyncio
import getpass
import os
import sys

from dotenv import load_dotenv
from loguru import logger

from credstore.config import Settings, create_credential_store
from credstore.errors import ConfigError
from credstore.paths import PROJECT_ROOT
from credstore.wallet.models import WalletCredential
from credstore.wallet.storage import CredentialStore, SlotState

# =============================================================================
# CONFIGURATION
# =============================================================================

IMPORT_KEY_ENV = "CREDSTORE_IMPORT_KEY"


def configure_logging(level: str) -> None:
    """Send log output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level)


# =============================================================================
# COMMANDS
# =============================================================================


async def cmd_status(store: CredentialStore, settings: Settings) -> int:
    """Show the slot state."""
    state = await store.slot_state()
    backend = settings.backend + (" (encrypted)" if settings.encrypted else "")

    print("=" * 60)
    print("WALLET SLOT STATUS")
    print("=" * 60)
    print(f"\nBackend: {backend}")
    print(f"Slot:    {store.slot_key}")
    print(f"State:   {state.name}")

    if state == SlotState.EMPTY:
        print("\nNo wallet stored. Run: credstore import --address <address>")
    elif state == SlotState.UNREADABLE:
        print("\nThe stored record cannot be read. Run: credstore delete --yes")
        return 1
    return 0


async def cmd_show(store: CredentialStore) -> int:
    """Show the stored address. The private key itself is never printed."""
    credential = await store.load()
    if credential is None:
        print("No wallet found.")
        return 1

    print(f"Address:            {credential.address}")
    print(f"Private key length: {credential.private_key_length}")
    return 0


async def cmd_import(store: CredentialStore, address: str) -> int:
    """Store a credential for the given address."""
    private_key = os.environ.get(IMPORT_KEY_ENV) or getpass.getpass("Private key: ")
    if not private_key:
        print("ERROR: No private key given")
        return 1

    if await store.exists():
        print(f"Replacing existing wallet in slot '{store.slot_key}'")

    ok = await store.save(WalletCredential(address=address, private_key=private_key))
    if not ok:
        print("ERROR: Could not save wallet credential (see log)")
        return 1
    print(f"Saved wallet {address}")
    return 0


async def cmd_delete(store: CredentialStore, confirmed: bool) -> int:
    """Clear the wallet slot."""
    if not confirmed:
        print("Refusing to delete without --yes")
        return 1

    ok = await store.delete()
    if not ok:
        print("ERROR: Could not delete wallet credential (see log)")
        return 1
    print("Wallet slot cleared.")
    return 0


# =============================================================================
# MAIN
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credstore",
        description="Wallet credential slot maintenance",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="status",
        choices=["status", "show", "import", "delete"],
        help="Command to run",
    )
    parser.add_argument("--address", help="Wallet address (import)")
    parser.add_argument("--yes", action="store_true", help="Confirm deletion (delete)")
    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    store = create_credential_store(settings)

    if args.command == "status":
        return await cmd_status(store, settings)
    if args.command == "show":
        return await cmd_show(store)
    if args.command == "import":
        if not args.address:
            print("ERROR: import requires --address")
            return 1
        return await cmd_import(store, args.address)
    return await cmd_delete(store, args.yes)


def main(argv: list[str] | None = None) -> int:
    load_dotenv(PROJECT_ROOT / ".env")
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1

    configure_logging(settings.log_level)
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
