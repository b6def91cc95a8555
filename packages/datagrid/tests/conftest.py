"""Shared fixtures for datagrid tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import ForeignKey, Integer, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from admin_datagrid import ProxyQuery, SelectQueryBuilder

if TYPE_CHECKING:
    from collections.abc import Iterator

# ---------------------------------------------------------------------------
# Test models
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


class Author(Base):
    __tablename__ = "authors"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String)
    books: Mapped[list[Book]] = relationship(back_populates="author")


class Book(Base):
    __tablename__ = "books"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String)
    year: Mapped[int] = mapped_column(Integer)
    author_id: Mapped[int | None] = mapped_column(ForeignKey("authors.id"))
    author: Mapped[Author | None] = relationship(back_populates="books")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def query_builder() -> SelectQueryBuilder:
    return SelectQueryBuilder(Book)


@pytest.fixture
def proxy_query(query_builder: SelectQueryBuilder) -> ProxyQuery:
    return ProxyQuery(query_builder)


@pytest.fixture
def session() -> Iterator[Session]:
    """In-memory SQLite session seeded with two authors and four books."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as s:
        herbert = Author(id=1, name="Frank Herbert")
        le_guin = Author(id=2, name="Ursula K. Le Guin")
        s.add_all(
            [
                herbert,
                le_guin,
                Book(id=1, title="Dune", year=1965, author=herbert),
                Book(id=2, title="Children of Dune", year=1976, author=herbert),
                Book(id=3, title="The Dispossessed", year=1974, author=le_guin),
                Book(id=4, title="Anonymous Tales", year=1990),
            ]
        )
        s.commit()
        yield s
    engine.dispose()


@pytest.fixture
def book_model() -> type[Book]:
    return Book


@pytest.fixture
def author_model() -> type[Author]:
    return Author
