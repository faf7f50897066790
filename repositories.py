from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, TypeVar

from models import Book, Member
from storage import LibraryStore

logger = logging.getLogger("library.repositories")

T = TypeVar("T", Book, Member)


class BookRepository(Protocol):
    def getAll(self) -> List[Book]: ...

    def find(self, book_id: str) -> Optional[Book]: ...

    def add(self, book: Book) -> None: ...

    def update(self, book: Book) -> bool: ...

    def saveAll(self, books: List[Book]) -> None: ...


class MemberRepository(Protocol):
    def getAll(self) -> List[Member]: ...

    def find(self, member_id: str) -> Optional[Member]: ...

    def add(self, member: Member) -> None: ...

    def update(self, member: Member) -> bool: ...

    def saveAll(self, members: List[Member]) -> None: ...


class _StoreRepository(Generic[T]):
    """
    Repository over one collection of the library blob.

    Every read goes through the store, so two repositories sharing a store
    always agree. Every write replaces the whole collection and leaves the
    other collection untouched.
    """

    collection: str = ""

    def __init__(self, store: LibraryStore, factory: Callable[[Dict[str, Any]], T]) -> None:
        self.store = store
        self._factory = factory

    def getAll(self) -> List[T]:
        return [self._factory(item) for item in self.store.load()[self.collection]]

    def find(self, entity_id: str) -> Optional[T]:
        for item in self.getAll():
            if item.id == entity_id:
                return item
        return None

    def add(self, entity: T) -> None:
        items = self.getAll()
        items.append(entity)
        self.saveAll(items)

    def update(self, entity: T) -> bool:
        items = self.getAll()
        for idx, item in enumerate(items):
            if item.id == entity.id:
                items[idx] = entity
                self.saveAll(items)
                return True
        logger.warning("Update skipped, id not found | collection=%s id=%s", self.collection, entity.id)
        return False

    def saveAll(self, entities: List[T]) -> None:
        state = self.store.load()
        state[self.collection] = [e.to_dict() for e in entities]
        self.store.save(state)


class StoreBookRepository(_StoreRepository[Book]):
    collection = "books"

    def __init__(self, store: LibraryStore) -> None:
        super().__init__(store, Book.from_dict)


class StoreMemberRepository(_StoreRepository[Member]):
    collection = "members"

    def __init__(self, store: LibraryStore) -> None:
        super().__init__(store, Member.from_dict)
