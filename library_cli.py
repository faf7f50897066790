from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from exceptions import LibraryError
from fee_policy import FlatFeePolicy
from library_system import LibraryService, create_library, logger
from models import Book, Member
from storage import DEFAULT_STORAGE_KEY, JsonFileStore, MemoryStore

DEFAULT_DATA_FILE = "library_data.json"


# Report Formatting
def format_books(books: List[Book]) -> str:
    if not books:
        return "(no books)\n"
    lines = []
    for b in books:
        mark = "+" if b.available else "x"
        lines.append(f"[{mark}] {b.id}: {b.title} - {b.author}")
    return "\n".join(lines) + "\n"


def format_members(members: List[Member]) -> str:
    if not members:
        return "(no members)\n"
    return "\n".join(
        f"{m.id}: {m.name} <{m.email}> fees=${m.fees:.2f}" for m in members
    ) + "\n"


def format_activity(messages: List[str]) -> str:
    if not messages:
        return ""
    return "Recent activity:\n" + "".join(f"  {m}\n" for m in messages)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="library-checkout",
        description="Manage a small library: books, members and checkouts.",
    )
    parser.add_argument("--data", default=DEFAULT_DATA_FILE, help="Path to the JSON data file")
    parser.add_argument("--key", default=DEFAULT_STORAGE_KEY, help="Storage key inside the data file")
    parser.add_argument("--memory", action="store_true", help="Keep data in memory only")
    parser.add_argument("--flat-fee", type=float, default=None, help="Charge this flat fee per checkout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add-book", help="Add a book")
    p.add_argument("id")
    p.add_argument("title")
    p.add_argument("author", nargs="?", default="")

    p = sub.add_parser("register", help="Register a member")
    p.add_argument("id")
    p.add_argument("name")
    p.add_argument("email")

    p = sub.add_parser("checkout", help="Check out a book")
    p.add_argument("book_id")
    p.add_argument("member_id")
    p.add_argument("--days", type=int, default=LibraryService.DEFAULT_DAYS)
    p.add_argument("--card", default=LibraryService.DEFAULT_CARD)

    p = sub.add_parser("search", help="Search books by title or author")
    p.add_argument("term", nargs="?", default="")

    sub.add_parser("books", help="List all books")
    sub.add_parser("members", help="List all members")
    sub.add_parser("seed", help="Load demo data into an empty library")
    sub.add_parser("reset", help="Delete all library data")
    return parser


def run(args: argparse.Namespace, service: LibraryService) -> str:
    if args.command == "add-book":
        book = service.addBook(args.id, args.title, args.author)
        return f"Added {book.id}: {book.title}\n"
    if args.command == "register":
        member = service.registerMember(args.id, args.name, args.email)
        return f"Registered {member.id}: {member.name}\n"
    if args.command == "checkout":
        res = service.checkoutBook(args.book_id, args.member_id, days=args.days, card=args.card)
        return (
            f"Checked out {res.book.title} to {res.member.name}. "
            f"Fee: ${res.fee:.2f}. Total fees: ${res.member.fees:.2f}\n"
        )
    if args.command == "search":
        books = service.search(args.term)
        return format_books(books) + format_activity(service.getRecentLog(3))
    if args.command == "books":
        return format_books(service.getBooks()) + format_activity(service.getRecentLog(3))
    if args.command == "members":
        return format_members(service.getMembers())
    if args.command == "seed":
        return "Seeded.\n" if service.seedIfEmpty() else "Already has data.\n"
    if args.command == "reset":
        service.reset()
        return "Library data cleared.\n"
    raise ValueError(f"Unknown command: {args.command}")


# CLI / Main
def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.flat_fee is not None and args.flat_fee < 0:
        parser.error("--flat-fee cannot be negative")

    if args.verbose:
        logger.setLevel(logging.DEBUG)

    store = MemoryStore() if args.memory else JsonFileStore(args.data, key=args.key)
    fee_policy = FlatFeePolicy(args.flat_fee) if args.flat_fee is not None else None
    service = create_library(store, feePolicy=fee_policy)

    try:
        sys.stdout.write(run(args, service))
    except LibraryError as e:
        logger.debug("Command failed | command=%s error=%s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        logger.debug("Invalid input | command=%s error=%s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
