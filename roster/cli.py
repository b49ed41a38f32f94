"""
Command-line interface for Roster.

Notes
-----
The CLI is intentionally thin. It parses arguments, builds a UserDirectory and
delegates to it. Every command first loads the collection so the mirror is
always overwritten with a complete record set. If neither the remote
collection nor the mirror can be read, the command stops with exit code 1.

Exit codes
----------
- 0: success
- 1: the remote store call failed
- 2: usage or validation error
"""

from __future__ import annotations

import argparse
from pathlib import Path

from roster_engine.data_models import UserDraft
from roster_engine.directory import OperationResult, UserDirectory
from roster_engine.errors import InvalidUserError
from roster_engine.local_mirror import JsonFileMirror
from roster_engine.logging_config import configure_logging
from roster_engine.notifications import CollectingNotifier
from roster_engine.paths import resolve_paths
from roster_engine.remote_store.http_store import HttpRemoteStore
from roster_engine.settings_store import load_settings


def open_remote_store(base_url: str) -> HttpRemoteStore:
    """Create the remote store used by CLI commands."""
    return HttpRemoteStore(base_url)


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="roster",
        description="Manage user records held by a remote REST collection",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="API root (collection at <base-url>/users). Overrides settings and ROSTER_BASE_URL.",
    )
    parser.add_argument(
        "--data-root",
        default=None,
        help="Override the Roster data root (mirror and settings). If omitted, defaults are used.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Overrides settings.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_p = sub.add_parser("list", help="List users, optionally filtered by name")
    list_p.add_argument("--search", default="", help="Case-insensitive substring of the name")

    add_p = sub.add_parser("add", help="Create a user")
    add_p.add_argument("--name", required=True)
    add_p.add_argument("--username", required=True)
    add_p.add_argument("--email", required=True)

    edit_p = sub.add_parser("edit", help="Replace a user; omitted fields keep their values")
    edit_p.add_argument("user_id", help="Id of the user to edit")
    edit_p.add_argument("--name", default=None)
    edit_p.add_argument("--username", default=None)
    edit_p.add_argument("--email", default=None)

    delete_p = sub.add_parser("delete", help="Delete a user")
    delete_p.add_argument("user_id", help="Id of the user to delete")

    sub.add_parser("gui", help="Open the desktop interface")

    return parser


def _print_users(directory: UserDirectory, term: str) -> None:
    users = directory.search(term)
    if not users:
        print("No users.")
        return

    id_w = max(2, *(len(u.id) for u in users))
    name_w = max(4, *(len(u.name) for u in users))
    user_w = max(8, *(len(u.username) for u in users))
    print(f"{'ID':<{id_w}}  {'Name':<{name_w}}  {'Username':<{user_w}}  Email")
    for u in users:
        print(f"{u.id:<{id_w}}  {u.name:<{name_w}}  {u.username:<{user_w}}  {u.email}")


def _flush(notifier: CollectingNotifier) -> None:
    for n in notifier.received:
        print(f"ERROR: {n.message}" if n.is_error else n.message)
    notifier.received.clear()


def _exit_code(result: OperationResult) -> int:
    return 0 if result.succeeded else 1


def _run_command(
    args: argparse.Namespace, directory: UserDirectory, notifier: CollectingNotifier
) -> int:
    loaded = directory.load_initial()
    _flush(notifier)
    if not loaded.succeeded and not loaded.from_cache:
        return 1

    if args.command == "list":
        _print_users(directory, args.search)
        return _exit_code(loaded)

    if args.command == "add":
        draft = UserDraft(name=args.name, username=args.username, email=args.email)
        result = directory.create(draft)
        _flush(notifier)
        if result.succeeded and result.user is not None:
            print(f"id: {result.user.id}")
        return _exit_code(result)

    if args.command == "edit":
        current = directory.find(args.user_id)
        if current is None:
            print(f"ERROR: Unknown user id: {args.user_id}")
            return 2
        changes = {
            field: value
            for field, value in (
                ("name", args.name),
                ("username", args.username),
                ("email", args.email),
            )
            if value is not None
        }
        result = directory.update(current.id, current.draft.replace(**changes))
        _flush(notifier)
        return _exit_code(result)

    if args.command == "delete":
        result = directory.delete(args.user_id)
        _flush(notifier)
        return _exit_code(result)

    print(f"ERROR: Unknown command: {args.command}")
    return 2


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv:
        Optional argument vector. If None, argparse uses sys.argv.

    Returns
    -------
    int
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    data_root = Path(args.data_root) if args.data_root else None
    settings = load_settings(data_root=data_root)
    configure_logging(args.log_level or settings.log_level)

    if args.command == "gui":
        from gui.app import main as gui_main

        return gui_main(data_root=data_root, base_url=args.base_url, log_level=args.log_level)

    base_url = (args.base_url or settings.base_url).rstrip("/")
    notifier = CollectingNotifier()
    store = open_remote_store(base_url)
    try:
        directory = UserDirectory(
            store=store,
            mirror=JsonFileMirror(resolve_paths(data_root).mirror_path),
            notifier=notifier,
        )
        return _run_command(args, directory, notifier)
    except InvalidUserError as exc:
        print(f"ERROR: {exc}")
        return 2
    finally:
        store.close()


if __name__ == "__main__":
    raise SystemExit(main())
