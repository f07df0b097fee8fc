from dataclasses import dataclass

from src.book_service.core.services import BookStore


@dataclass
class ApplicationDependencies:
    book_store: BookStore
