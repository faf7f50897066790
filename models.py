from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class Book:
    """
    Represents a book in the library.

    Attributes:
        id (str): Unique identifier for the book.
        title (str): Book title.
        author (str): Author name.
        available (bool): Whether the book can still be checked out.
    """
    id: str
    title: str
    author: str = ""
    available: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Book":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            available=bool(data.get("available", True)),
        )


@dataclass
class Member:
    """
    Represents a library member.

    Attributes:
        id (str): Unique member identifier.
        name (str): Member name.
        email (str): Address used for welcome and checkout notices.
        fees (float): Late fees charged so far. Never decreases.
    """
    id: str
    name: str
    email: str
    fees: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Member":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            fees=float(data.get("fees") or 0.0),
        )


@dataclass(frozen=True)
class ChargeResult:
    ok: bool
    txn: Optional[str] = None


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome of a successful checkout."""
    book: Book
    member: Member
    fee: float
    txn: Optional[str] = None
