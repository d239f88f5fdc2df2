#!/usr/bin/env python3
"""
Second Brain command line.

Usage:
    second-brain serve                        # Run the HTTP API
    second-brain add "Title" "Description"    # Store a note
    second-brain ask "What did I plan?"       # RAG answer
    second-brain list --limit 5               # Sample stored notes
    second-brain delete note_1718..._abc      # Delete a note
    second-brain stats                        # Index statistics
"""

import argparse
import json
import logging
import sys
from typing import Optional

from .config import NotesConfig
from .exceptions import NoteServiceError
from .logging_config import setup_logging
from .service import NoteService

logger = logging.getLogger(__name__)


def _print_json(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="second-brain",
        description="Store notes as embeddings and ask questions about them.",
    )
    parser.add_argument("--env-file", help="Path to a .env file", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    add = sub.add_parser("add", help="Store a note")
    add.add_argument("title")
    add.add_argument("description")

    ask = sub.add_parser("ask", help="Ask a question about your notes")
    ask.add_argument("query")
    ask.add_argument("--show-matches", action="store_true", help="Print the retrieved notes")

    list_cmd = sub.add_parser("list", help="Sample stored notes (best effort)")
    list_cmd.add_argument("--limit", type=int, default=10)

    delete = sub.add_parser("delete", help="Delete a note by id")
    delete.add_argument("note_id")

    sub.add_parser("stats", help="Show vector index statistics")

    return parser


def run_command(args: argparse.Namespace, service: NoteService) -> int:
    if args.command == "add":
        note = service.create_note(args.title, args.description)
        _print_json(note.model_dump(by_alias=True))
    elif args.command == "ask":
        result = service.search_notes(args.query)
        print(result.answer)
        if args.show_matches:
            _print_json([m.model_dump() for m in result.matches])
    elif args.command == "list":
        notes = service.list_notes(args.limit)
        _print_json({"count": len(notes), "notes": [n.model_dump(by_alias=True) for n in notes]})
    elif args.command == "delete":
        _print_json({"deletedId": service.delete_note(args.note_id)})
    elif args.command == "stats":
        _print_json(service.startup().model_dump())
    return 0


def serve(config: NotesConfig) -> None:
    import uvicorn

    from .app import create_app

    uvicorn.run(create_app(config), host=config.host, port=config.port)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = NotesConfig.from_env(args.env_file)
    setup_logging(
        level="DEBUG" if args.verbose else config.log_level,
        log_file=config.log_file,
    )

    if args.command == "serve":
        if args.host:
            config.host = args.host
        if args.port:
            config.port = args.port
        serve(config)
        return 0

    service = NoteService(config=config)
    try:
        return run_command(args, service)
    except NoteServiceError as e:
        logger.error("%s", e)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
