"""Book database table model."""

from sqlalchemy import BigInteger, Column, Integer, String
from sqlmodel import Field, SQLModel

# SQLite only auto-increments an INTEGER PRIMARY KEY (the rowid alias)
BookIdType = BigInteger().with_variant(Integer(), "sqlite")


class BookTable(SQLModel, table=True):
    """Database persistence model for books.

    This represents how the Book entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "book"
    __table_args__ = {"mysql_charset": "utf8mb4"}

    book_id: int | None = Field(
        default=None,
        sa_column=Column(BookIdType, primary_key=True, autoincrement=True),
    )
    name: str | None = Field(default=None, sa_column=Column(String(100), nullable=True))
    page: int | None = Field(default=None, sa_column=Column(Integer, nullable=True))
    author: str | None = Field(default=None, sa_column=Column(String(100), nullable=True))
