"""Entity: Book."""

from pydantic import BaseModel, ConfigDict, Field

# Range of the signed 32-bit INT column that stores page counts
PAGE_MIN = -(2**31)
PAGE_MAX = 2**31 - 1


class Book(BaseModel):
    """Book entity representing a stored book record.

    ``book_id`` is left unset on records returned by the list query, which
    does not select it.
    """

    book_id: int | None = Field(default=None, description="Storage-assigned identifier")
    name: str | None = Field(default=None, description="Title")
    page: int | None = Field(default=None, description="Page count")
    author: str | None = Field(default=None, description="Author")


class BookPayload(BaseModel):
    """Client-supplied fields of a book, as sent to create and update.

    Unknown keys, including any client-supplied ``book_id``, are ignored:
    identifiers are assigned by storage only. Values are not coerced: a
    quoted number, a boolean or a float for ``page`` is rejected, as is a
    page count outside the column range.
    """

    model_config = ConfigDict(extra="ignore", strict=True)

    name: str | None = None
    page: int | None = Field(default=None, ge=PAGE_MIN, le=PAGE_MAX)
    author: str | None = None
