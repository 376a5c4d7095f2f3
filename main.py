"""Entrypoint: request completions and manage the API token from the command line."""

from __future__ import annotations

import argparse
import getpass
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from coco_completion.commands import create_orchestrator, set_api_token
from coco_completion.config import load_settings, prompt_config_from_settings
from coco_completion.credentials import EnvCredentialStore, SQLiteCredentialStore
from coco_completion.document import Position, TextDocument
from coco_completion.llm.types import CompletionError
from coco_completion.models import apply_migrations, get_call_summary, get_connection, list_recent_calls
from coco_completion.notifications import LoggingNotifier
from coco_completion.prompts import list_config_templates


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Code completion client for text-generation endpoints")
    parser.add_argument("--settings", default="config/settings.yaml", help="Path to settings.yaml")

    subparsers = parser.add_subparsers(dest="command")

    complete = subparsers.add_parser("complete", help="Complete the text at a cursor position")
    complete.add_argument("file", help="File to complete in")
    complete.add_argument("--offset", type=int, help="Cursor offset in characters")
    complete.add_argument("--line", type=int, default=0, help="Cursor line (0-based)")
    complete.add_argument("--character", type=int, default=0, help="Cursor character (0-based)")
    complete.add_argument("--suggestion", default="", help="Already accepted partial completion")
    complete.add_argument("--timeout", type=float, help="Request timeout in seconds")

    set_token = subparsers.add_parser("set-token", help="Store the API token")
    set_token.add_argument("token", nargs="?", help="Token value (prompted when omitted)")

    subparsers.add_parser("templates", help="List built-in config templates")

    history = subparsers.add_parser("history", help="Show recent completion calls")
    history.add_argument("--limit", type=int, default=20)

    subparsers.add_parser("init-db", help="Apply SQLite migrations only")
    return parser


def _cursor(document: TextDocument, args: argparse.Namespace) -> Position:
    if args.offset is not None:
        return document.position_at(args.offset)
    return Position(line=args.line, character=args.character)


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        return

    config = load_settings(args.settings)
    logging.basicConfig(
        level=config["logging"]["level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "templates":
        for name in list_config_templates():
            print(name)
        return

    db_path = config["database"]["path"]
    apply_migrations(db_path)

    if args.command == "init-db":
        print(f"Database initialized at {db_path}")
        return

    with get_connection(db_path) as conn:
        if args.command == "set-token":
            token = args.token if args.token is not None else getpass.getpass("API token: ")
            store = EnvCredentialStore(SQLiteCredentialStore(conn))
            set_api_token(store, token or None, LoggingNotifier(), key=config["auth"]["token_key"])
            return

        if args.command == "history":
            summary = get_call_summary(conn)
            print(
                f"{summary['calls']} call(s), {summary['succeeded']} ok, {summary['failed']} failed, "
                f"avg latency {int(summary['avg_latency_ms'])}ms"
            )
            for row in list_recent_calls(conn, limit=args.limit):
                print(
                    f"- {row['created_at']} {row['status']} code={row['status_code']} "
                    f"lang={row['language']} fim={bool(row['fim'])} endpoint={row['endpoint']}"
                )
            return

        try:
            prompt_config = prompt_config_from_settings(config)
        except CompletionError as exc:
            parser.error(str(exc))

        document = TextDocument.from_path(args.file)
        orchestrator = create_orchestrator(config, conn=conn)
        try:
            result = orchestrator.run_completion(
                document,
                _cursor(document, args),
                prompt_config,
                timeout=args.timeout,
                current_suggestion_text=args.suggestion,
            )
        except CompletionError as exc:
            print(f"Completion failed: {exc}", file=sys.stderr)
            sys.exit(1)

    if result is None:
        print("No completion available", file=sys.stderr)
        sys.exit(2)
    print(result.insertion_text)


if __name__ == "__main__":
    main()
