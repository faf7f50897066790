class LibraryError(Exception):
    """Base exception for library checkout errors."""


class MissingFieldsError(LibraryError):
    """A book is missing its id or title."""


class InvalidEmailError(LibraryError):
    """Member email is empty or has no '@'."""


class BookNotFoundError(LibraryError):
    """Requested book id does not exist in the library."""


class MemberNotFoundError(LibraryError):
    """Requested member id does not exist in the library."""


class BookUnavailableError(LibraryError):
    """Book is already checked out."""


class PaymentFailedError(LibraryError):
    """Payment port declined or could not charge the late fee."""


class DuplicateBookError(LibraryError):
    """Trying to add a book that already exists."""


class DuplicateMemberError(LibraryError):
    """Trying to register a member that already exists."""


class StorageError(LibraryError):
    """Library data cannot be written to storage."""
