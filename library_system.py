from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Deque, List, Optional

from exceptions import (
    BookNotFoundError,
    BookUnavailableError,
    DuplicateBookError,
    DuplicateMemberError,
    InvalidEmailError,
    MemberNotFoundError,
    MissingFieldsError,
    PaymentFailedError,
)
from fee_policy import FEE_PER_DAY, FREE_DAYS, FeePolicy, LateFeePolicy
from models import Book, CheckoutResult, Member
from ports import ConsoleNotifier, FakePaymentProvider, NotifierPort, PaymentPort
from repositories import (
    BookRepository,
    MemberRepository,
    StoreBookRepository,
    StoreMemberRepository,
)
from storage import LibraryStore


# Logging configuration
logger = logging.getLogger("library")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


@dataclass(frozen=True)
class LogEntry:
    when: datetime
    message: str


DEMO_BOOKS = [
    ("b1", "Clean Code", "Robert C. Martin"),
    ("b2", "Design Patterns", "Gamma, Helm, Johnson, Vlissides"),
    ("b3", "You Don't Know JS", "Kyle Simpson"),
]

DEMO_MEMBERS = [
    ("m1", "Ada Lovelace", "ada@example.com"),
    ("m2", "Grace Hopper", "grace@example.com"),
]


# Library Core
class LibraryService:
    """
    Checkout service over injected repositories and ports.

    Rules enforced:
        (1) Books need an id and a title
        (2) Member emails must contain '@'
        (3) A book can be checked out once; there is no return
        (4) The first 14 days are free, then $0.50 per day
        (5) The late fee is charged before the book is marked unavailable
    """

    FREE_DAYS = FREE_DAYS
    FEE_PER_DAY = FEE_PER_DAY
    DEFAULT_DAYS = 21
    DEFAULT_CARD = "4111-1111"
    MAX_LOG_ENTRIES = 50

    def __init__(
        self,
        bookRepo: BookRepository,
        memberRepo: MemberRepository,
        payment: PaymentPort,
        notifier: NotifierPort,
        feePolicy: Optional[FeePolicy] = None,
        store: Optional[LibraryStore] = None,
    ) -> None:
        self.bookRepo = bookRepo
        self.memberRepo = memberRepo
        self.payment = payment
        self.notifier = notifier
        self.feePolicy = feePolicy or LateFeePolicy(self.FREE_DAYS, self.FEE_PER_DAY)
        self.store = store
        self._log: Deque[LogEntry] = deque(maxlen=self.MAX_LOG_ENTRIES)

    # Public API

    def addBook(self, id: str, title: str, author: str = "") -> Book:
        """
        Adds a new, available book to the library.

        Raises:
            MissingFieldsError: If id or title is empty.
            DuplicateBookError: If a book with the same id already exists.
        """
        logger.info("addBook called | id=%s title=%s", id, title)

        if not id or not title:
            raise MissingFieldsError("Book id and title are required")
        if self.bookRepo.find(id) is not None:
            raise DuplicateBookError(f"Book already exists: id={id}")

        book = Book(id=id, title=title, author=author or "", available=True)
        self.bookRepo.add(book)
        self._record(f"Book added: {title}")
        logger.info("Book added successfully | id=%s", id)
        return replace(book)

    def registerMember(self, id: str, name: str, email: str) -> Member:
        """
        Registers a new member and sends a welcome notice.

        The welcome notice is best effort: a notifier failure is logged and
        the member stays registered.

        Raises:
            InvalidEmailError: If email is empty or has no '@'.
            DuplicateMemberError: If a member with the same id already exists.
        """
        logger.info("registerMember called | id=%s email=%s", id, email)

        if not email or "@" not in email:
            raise InvalidEmailError(f"Invalid email: {email!r}")
        if self.memberRepo.find(id) is not None:
            raise DuplicateMemberError(f"Member already exists: id={id}")

        member = Member(id=id, name=name, email=email, fees=0.0)
        self.memberRepo.add(member)
        self._record(f"Member registered: {name}")
        logger.info("Member registered successfully | id=%s", id)

        self._notify(email, "Welcome", f"Hi {name}, your member id is {id}")
        return replace(member)

    def checkoutBook(
        self,
        bookId: str,
        memberId: str,
        days: int = DEFAULT_DAYS,
        card: str = DEFAULT_CARD,
    ) -> CheckoutResult:
        """
        Checks out a book to a member, charging the late fee if there is one.

        Order of steps:
            - book and member lookup
            - availability check (nothing is charged for an unavailable book)
            - fee calculation and payment
            - book marked unavailable, both records saved
            - checkout notice (best effort)

        Raises:
            BookNotFoundError
            MemberNotFoundError
            BookUnavailableError
            PaymentFailedError
            ValueError: If days is not a non-negative integer.
        """
        logger.info("checkoutBook called | bookId=%s memberId=%s days=%s", bookId, memberId, days)

        book = self._get_book(bookId)
        member = self._get_member(memberId)

        if not book.available:
            raise BookUnavailableError(f"Book {bookId} is not available.")

        fee = self.feePolicy.calculate(days)
        txn = None

        if fee > 0:
            txn = self._charge(fee, card)
            member.fees = round(member.fees + fee, 2)

        book.available = False

        # A crash between the charge above and these writes loses the fee.
        self.memberRepo.update(member)
        self.bookRepo.update(book)

        self._record(f"Checked out {book.title} to {member.name} for {days} days (fee=${fee:.2f}).")
        logger.info("Checkout successful | bookId=%s memberId=%s fee=%.2f", bookId, memberId, fee)

        self._notify(member.email, "Checkout", f"You borrowed {book.title}. Fee: ${fee:.2f}")
        return CheckoutResult(book=replace(book), member=replace(member), fee=fee, txn=txn)

    def search(self, term: Optional[str] = "") -> List[Book]:
        """
        Returns books whose title or author contains term, ignoring case.
        An empty or blank term returns every book.
        """
        normalized = (term or "").strip().lower()
        results = [
            b for b in self.bookRepo.getAll()
            if not normalized
            or normalized in b.title.lower()
            or normalized in (b.author or "").lower()
        ]
        self._record(f"Search '{term or ''}' -> {len(results)} results.")
        logger.debug("search | term=%r results=%d", term, len(results))
        return results

    def getBooks(self) -> List[Book]:
        return self.bookRepo.getAll()

    def getMembers(self) -> List[Member]:
        return self.memberRepo.getAll()

    def getMember(self, memberId: str) -> Optional[Member]:
        return self.memberRepo.find(memberId)

    def seedIfEmpty(self) -> bool:
        """
        Loads the demo books and members into an empty library.

        Books and members are seeded independently, so a library with
        members but no books only gets the books.

        Returns:
            bool: True if anything was added.
        """
        seeded = False
        if not self.bookRepo.getAll():
            for book_id, title, author in DEMO_BOOKS:
                self.addBook(book_id, title, author)
            seeded = True
        if not self.memberRepo.getAll():
            for member_id, name, email in DEMO_MEMBERS:
                self.registerMember(member_id, name, email)
            seeded = True
        logger.info("seedIfEmpty | seeded=%s", seeded)
        return seeded

    def reset(self) -> None:
        """
        Removes every book and member from storage and clears the activity log.
        """
        logger.info("reset called")
        if self.store is not None:
            self.store.clear()
        else:
            self.bookRepo.saveAll([])
            self.memberRepo.saveAll([])
        self._log.clear()

    def getLog(self) -> List[LogEntry]:
        return list(self._log)

    def getRecentLog(self, n: int = 3) -> List[str]:
        if n <= 0:
            return []
        return [entry.message for entry in list(self._log)[-n:]]

    # Internal Helpers
    def _get_book(self, bookId: str) -> Book:
        """
        Retrieves a book by id or raises BookNotFoundError.
        """
        book = self.bookRepo.find(bookId)
        if book is None:
            raise BookNotFoundError(f"Book not found: id={bookId}")
        return book

    def _get_member(self, memberId: str) -> Member:
        """
        Retrieves a member by id or raises MemberNotFoundError.
        """
        member = self.memberRepo.find(memberId)
        if member is None:
            raise MemberNotFoundError(f"Member not found: id={memberId}")
        return member

    def _charge(self, fee: float, card: str) -> Optional[str]:
        try:
            result = self.payment.charge(fee, card)
        except Exception as e:
            logger.exception("Payment port error | fee=%.2f", fee)
            raise PaymentFailedError(f"Payment failed: {e}") from e
        if not result.ok:
            logger.error("Payment declined | fee=%.2f", fee)
            raise PaymentFailedError(f"Payment of ${fee:.2f} was declined")
        return result.txn

    def _notify(self, to: str, subject: str, body: str) -> None:
        try:
            sent = self.notifier.send(to, subject, body)
        except Exception as e:
            logger.warning("Notification failed | to=%s subject=%s error=%s", to, subject, e)
            self._record(f"Notification failed: {subject} to {to}")
            return
        if not sent:
            logger.warning("Notification not sent | to=%s subject=%s", to, subject)
            self._record(f"Notification not sent: {subject} to {to}")

    def _record(self, message: str) -> None:
        self._log.append(LogEntry(when=datetime.now(), message=message))


def create_library(
    store: LibraryStore,
    payment: Optional[PaymentPort] = None,
    notifier: Optional[NotifierPort] = None,
    feePolicy: Optional[FeePolicy] = None,
) -> LibraryService:
    """
    Wires a LibraryService over a single store with the stub ports by default.
    """
    return LibraryService(
        bookRepo=StoreBookRepository(store),
        memberRepo=StoreMemberRepository(store),
        payment=payment or FakePaymentProvider(),
        notifier=notifier or ConsoleNotifier(),
        feePolicy=feePolicy,
        store=store,
    )
