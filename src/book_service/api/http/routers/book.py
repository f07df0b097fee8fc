"""Book API router with CRUD operations.

Every response, successful or not, is a ``{msg, data}`` envelope. Storage
errors are reported with the driver's message as ``msg``.
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlmodel import Session
from starlette.responses import Response

from src.book_service.api.http.deps import (
    get_book_id,
    get_book_payload,
    get_book_repository,
    get_session,
)
from src.book_service.api.http.envelope import json_result
from src.book_service.entities.book import BookPayload, BookRepository

router = APIRouter(prefix="/book/v1/books", tags=["books"])


def _storage_error(session: Session, operation: str, exc: SQLAlchemyError) -> HTTPException:
    session.rollback()
    logger.error("{} failed: {}: {}", operation, type(exc).__name__, exc)
    # The driver error is more useful to clients than SQLAlchemy's wrapper text
    message = str(exc.orig) if isinstance(exc, DBAPIError) and exc.orig else str(exc)
    return HTTPException(status_code=500, detail=message)


@router.post("")
def create_book(
    repository: BookRepository = Depends(get_book_repository),
    payload: BookPayload = Depends(get_book_payload),
    session: Session = Depends(get_session),
) -> Response:
    """Create a new book and return its generated id."""
    try:
        book_id = repository.create(payload)
        session.commit()
    except SQLAlchemyError as e:
        raise _storage_error(session, "create book", e) from e
    logger.info("Created book {}", book_id)
    return json_result(200, "", book_id)


@router.put("/{book_id}")
def update_book(
    repository: BookRepository = Depends(get_book_repository),
    book_id: int = Depends(get_book_id),
    payload: BookPayload = Depends(get_book_payload),
    session: Session = Depends(get_session),
) -> Response:
    """Overwrite name, page and author of a book."""
    try:
        affected = repository.update(book_id, payload)
        session.commit()
    except SQLAlchemyError as e:
        raise _storage_error(session, "update book", e) from e
    logger.debug("Updated book {} ({} rows)", book_id, affected)
    return json_result(200)


@router.get("/{book_id}")
def get_book(
    repository: BookRepository = Depends(get_book_repository),
    book_id: int = Depends(get_book_id),
    session: Session = Depends(get_session),
) -> Response:
    """Get a book by id."""
    try:
        book = repository.get(book_id)
    except SQLAlchemyError as e:
        raise _storage_error(session, "get book", e) from e
    if book is None:
        logger.info("Book {} not found", book_id)
        raise HTTPException(status_code=404, detail="book not found")
    return json_result(200, "", book)


@router.get("")
def list_books(
    repository: BookRepository = Depends(get_book_repository),
    session: Session = Depends(get_session),
) -> Response:
    """List all books. Listed books carry no ``book_id``."""
    try:
        books = repository.list_all()
    except SQLAlchemyError as e:
        raise _storage_error(session, "list books", e) from e
    logger.debug("Listed {} books", len(books))
    return json_result(200, "", books)


@router.delete("/{book_id}")
def delete_book(
    repository: BookRepository = Depends(get_book_repository),
    book_id: int = Depends(get_book_id),
    session: Session = Depends(get_session),
) -> Response:
    """Delete a book."""
    try:
        affected = repository.delete(book_id)
        session.commit()
    except SQLAlchemyError as e:
        raise _storage_error(session, "delete book", e) from e
    logger.info("Deleted book {} ({} rows)", book_id, affected)
    return json_result(200)
