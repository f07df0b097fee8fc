"""FastAPI dependency implementations."""

from __future__ import annotations

import re
from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from src.book_service.api.http.app_data import ApplicationDependencies
from src.book_service.api.http.envelope import RequestBodyError, parse_request_json_into
from src.book_service.core.services import BookStore
from src.book_service.entities.book import BookPayload, BookRepository

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_DECIMAL = re.compile(r"[+-]?[0-9]+")


def get_book_store(request: Request) -> BookStore:
    """Get the record store handle, failing the request if it is not set up."""
    app_deps: ApplicationDependencies | None = getattr(
        request.app.state, "app_dependencies", None
    )
    if app_deps is None or app_deps.book_store is None:
        raise HTTPException(status_code=500, detail="db not inited")
    return app_deps.book_store


def get_session(store: BookStore = Depends(get_book_store)) -> Iterator[Session]:
    """Yield a session for the duration of one request."""
    session = store.get_session()
    try:
        yield session
    finally:
        session.close()


def get_book_repository(session: Session = Depends(get_session)) -> BookRepository:
    return BookRepository(session)


def parse_book_id(value: str) -> int:
    """Parse a base-10 signed 64-bit identifier.

    Raises:
        ValueError: If ``value`` is not such an integer.
    """
    if not _DECIMAL.fullmatch(value):
        raise ValueError(f"not a base-10 integer: {value!r}")
    book_id = int(value)
    if not _INT64_MIN <= book_id <= _INT64_MAX:
        raise ValueError(f"out of 64-bit range: {value!r}")
    return book_id


def get_book_id(book_id: str) -> int:
    """Path identifier dependency; malformed identifiers are a 400."""
    try:
        return parse_book_id(book_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="invalid book id") from e


async def get_book_payload(request: Request) -> BookPayload:
    """Decoded JSON body; decode failures are a 400."""
    try:
        return await parse_request_json_into(request, BookPayload)
    except RequestBodyError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
