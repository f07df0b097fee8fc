from sqlalchemy import delete, update
from sqlmodel import Session, select

from src.book_service.entities.book.entity import Book, BookPayload
from src.book_service.entities.book.table import BookTable


class BookRepository:
    """Data-access layer for books.

    Each method issues exactly one SQL statement. Committing is left to the
    caller.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, payload: BookPayload) -> int:
        """Insert a row and return the storage-generated ``book_id``."""
        row = BookTable(name=payload.name, page=payload.page, author=payload.author)
        self._session.add(row)
        self._session.flush()
        if row.book_id is None:
            raise RuntimeError("storage did not return a generated book_id")
        return row.book_id

    def update(self, book_id: int, payload: BookPayload) -> int:
        """Overwrite all three mutable fields; returns the affected row count."""
        statement = (
            update(BookTable)
            .where(BookTable.book_id == book_id)
            .values(name=payload.name, page=payload.page, author=payload.author)
        )
        return self._session.exec(statement).rowcount

    def get(self, book_id: int) -> Book | None:
        statement = select(BookTable.name, BookTable.author, BookTable.page).where(
            BookTable.book_id == book_id
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Book(book_id=book_id, name=row.name, page=row.page, author=row.author)

    def list_all(self) -> list[Book]:
        # book_id is deliberately not selected
        statement = select(BookTable.name, BookTable.author, BookTable.page)
        return [
            Book(name=row.name, page=row.page, author=row.author)
            for row in self._session.exec(statement)
        ]

    def delete(self, book_id: int) -> int:
        """Delete the row; returns the affected row count."""
        statement = delete(BookTable).where(BookTable.book_id == book_id)
        return self._session.exec(statement).rowcount
