# Main Entry Point - Command Line
#
# Loads config, configures logging, unlocks (or bootstraps) the vault and
# dispatches one subcommand. Every VaultError ends the process with exit 1.

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__, prompts
from .core import (
    ConfigError,
    EventSeverity,
    EventType,
    configure_audit_logger,
    load_config,
)
from .export import export_csv
from .file_search import search_files
from .vault import (
    AuthenticationError,
    CredentialRecord,
    EntryInput,
    EntryStore,
    MasterVault,
    VaultError,
    check_master_password_strength,
    generate_password,
    parse_entry_id,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strongbox",
        description="Strongbox - local single-user secret vault",
    )
    parser.add_argument(
        "--config-dir",
        help="Config directory (default: $STRONGBOX_HOME or ~/.config/strongbox)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Strongbox v{__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a random password")
    gen.add_argument("-l", "--length", type=int, help="Password length (8-64)")

    def add_entry_fields(p, secret_help):
        p.add_argument("-s", "--service", help="Service name")
        p.add_argument("-u", "--username", help="Account username")
        p.add_argument("-p", "--password", help=secret_help)
        p.add_argument("--url", help="Service URL")
        p.add_argument("--notes", help="Free-form notes")
        p.add_argument(
            "-g", "--generate", type=int, metavar="LENGTH",
            help="Generate the password with this length",
        )

    add = sub.add_parser("add", help="Add a new entry")
    add_entry_fields(add, "Password to store (prompted if omitted)")

    sub.add_parser("list", help="List all entries")

    get = sub.add_parser("get", help="Show one entry with its password")
    get.add_argument("id", help="Entry id")

    upd = sub.add_parser("update", help="Update fields of an entry")
    upd.add_argument("id", help="Entry id")
    add_entry_fields(upd, "New password")

    rm = sub.add_parser("delete", help="Delete an entry")
    rm.add_argument("id", help="Entry id")

    find = sub.add_parser("search", help="Search service and username")
    find.add_argument("query", help="Substring to look for (case-sensitive)")

    exp = sub.add_parser("export", help="Export all entries to CSV (plaintext!)")
    exp.add_argument("path", help="Destination CSV file")

    fs = sub.add_parser("file-search", help="Find files by name")
    fs.add_argument("--path", help="Directory to search")
    fs.add_argument("--name", help="Substring of the file name")

    return parser


def open_store(config) -> EntryStore:
    """Bootstrap or unlock the vault and open the entry store."""
    vault = MasterVault(config.vault_path)

    if vault.exists():
        keys = vault.unlock(prompts.prompt_master_password())
    elif prompts.confirm("No vault found. Generate a master password?"):
        master_password, keys = vault.bootstrap_generated()
        print(f"Your master password: {master_password}")
        print("Store it somewhere safe. It cannot be recovered.")
    else:
        master_password = prompts.prompt_master_password(confirm_entry=True)
        is_strong, warning = check_master_password_strength(master_password)
        if not is_strong:
            print(f"Warning: {warning}")
        keys = vault.bootstrap(master_password)

    return EntryStore(
        config.storage_path,
        keys.cipher(),
        database_key=keys.database_key,
        use_sqlcipher=config.use_sqlcipher,
    )


def _entry_input(args) -> EntryInput:
    secret = args.password
    if args.generate is not None:
        secret = generate_password(args.generate)
    return EntryInput(
        service=args.service,
        username=args.username,
        secret=secret,
        url=args.url,
        notes=args.notes,
    )


def _print_record(record: CredentialRecord, show_secret: bool = False):
    print(f"[{record.id}] {record.service}")
    print(f"    Username: {record.username}")
    if show_secret:
        print(f"    Password: {record.secret}")
    if record.url:
        print(f"    URL:      {record.url}")
    if record.notes:
        print(f"    Notes:    {record.notes}")
    print(f"    Created:  {record.created_at}")
    print(f"    Updated:  {record.updated_at}")


def run_vault_command(args, store: EntryStore):
    if args.command == "add":
        store.create(prompts.resolve_entry(_entry_input(args)))
        print("Entry added.")

    elif args.command == "list":
        records = store.read_all()
        for record in records:
            _print_record(record)
        print(f"{len(records)} entries")

    elif args.command == "get":
        _print_record(store.read_by_id(parse_entry_id(args.id)), show_secret=True)

    elif args.command == "update":
        entry_id = parse_entry_id(args.id)
        current = store.read_by_id(entry_id)
        store.update(entry_id, prompts.merge_update(current, _entry_input(args)))
        print(f"Entry {entry_id} updated.")

    elif args.command == "delete":
        entry_id = parse_entry_id(args.id)
        store.delete(entry_id)
        print(f"Entry {entry_id} deleted.")

    elif args.command == "search":
        records = store.search(args.query)
        for record in records:
            _print_record(record)
        print(f"{len(records)} matches")

    elif args.command == "export":
        print("Warning: the CSV file contains your passwords in plaintext.")
        count = export_csv(store.read_all(), args.path)
        store.logger.log_event(
            event_type=EventType.VAULT_EXPORTED,
            severity=EventSeverity.INFO,
            message="Vault exported to CSV",
            details={"count": count},
        )
        print(f"Exported {count} entries to {args.path}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for Strongbox."""
    args = build_parser().parse_args(argv)
    logger.debug("Running command %s", args.command)

    try:
        config = load_config(args.config_dir)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    audit = configure_audit_logger(config.log_dir, config.log_level)
    audit.log_event(
        event_type=EventType.SYSTEM_START,
        severity=EventSeverity.INFO,
        message="Strongbox starting",
        details={"version": __version__, "command": args.command},
    )

    try:
        if args.command == "generate":
            length = args.length if args.length is not None else prompts.prompt_length()
            print(generate_password(length))

        elif args.command == "file-search":
            root = args.path or input("Enter the path to search for files in: ")
            name = args.name or input("Enter the name of the file to search for: ")
            matches = search_files(root, name)
            for path in matches:
                print(path)
            print(f"{len(matches)} files found")

        else:
            with open_store(config) as store:
                run_vault_command(args, store)

    except AuthenticationError:
        print("Invalid master password", file=sys.stderr)
        return 1
    except VaultError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
