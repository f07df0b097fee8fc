"""Core services exports."""

from .database.book_store import BookStore, StoreUnavailableError

__all__ = [
    "BookStore",
    "StoreUnavailableError",
]
