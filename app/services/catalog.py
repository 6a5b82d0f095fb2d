import logging
from functools import lru_cache
from typing import List, Optional, Tuple, Union
from pydantic import ValidationError
from pyuca import Collator
from fastapi import Depends
from sqlalchemy.orm import Session
from app.database import get_db, commit_or_rollback, storage_guard
from app.models.book import Book
from app.schemas.book import BookCreate, BookUpdate, BookFilter
from app.services.errors import InvalidRequest, NotFound
from app.utils.timezone import Clock, now, get_clock

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Loading the collation table is slow, so do it once
    return Collator()


def collation_key(value: Optional[str]) -> Tuple[int, ...]:
    """Unicode Collation Algorithm key: й after и, ё alongside е, accented Latin next to its base letter."""
    return _collator().sort_key(value or "")


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.casefold()


def _validate(schema, fields):
    if isinstance(fields, schema):
        return fields
    try:
        return schema.model_validate(fields or {})
    except ValidationError as e:
        raise InvalidRequest(f"Invalid book fields: {e.errors()[0]['msg']}") from e


class Catalog:
    """Book records: filtered listing and admin mutations."""

    def __init__(self, db: Session, clock: Clock = now):
        self.db = db
        self.clock = clock

    def list_books(self, book_filter: Optional[BookFilter] = None) -> List[Book]:
        book_filter = book_filter or BookFilter()
        query = self.db.query(Book)
        
        if book_filter.year is not None:
            query = query.filter(Book.year == book_filter.year)
        if book_filter.status is not None:
            query = query.filter(Book.status == book_filter.status)
        
        with storage_guard(self.db, "list books"):
            books = query.all()
        
        # SQLite's LOWER() only folds ASCII, so substring matching happens here
        category = (book_filter.category or "").strip().casefold()
        if category:
            books = [b for b in books if _contains(b.category, category)]
        author = (book_filter.author or "").strip().casefold()
        if author:
            books = [b for b in books if _contains(b.author, author)]
        
        if book_filter.sort == "author":
            books.sort(key=lambda b: collation_key(b.author))
        elif book_filter.sort == "category":
            books.sort(key=lambda b: collation_key(b.category))
        elif book_filter.sort == "year":
            books.sort(key=lambda b: b.year, reverse=True)
        else:
            books.sort(key=lambda b: (b.created_at, b.id), reverse=True)
        
        return books

    def get_book(self, book_id: int) -> Book:
        with storage_guard(self.db, f"load book {book_id}"):
            book = self.db.query(Book).filter(Book.id == book_id).first()
        if not book:
            raise NotFound("Book not found")
        return book

    def create_book(self, fields: Union[BookCreate, dict]) -> int:
        data = _validate(BookCreate, fields)
        book = Book(
            title=data.title,
            author=data.author,
            year=data.year,
            category=data.category,
            price=data.price,
            status=data.status,
            created_at=self.clock()
        )
        self.db.add(book)
        commit_or_rollback(self.db, "create book")
        self.db.refresh(book)
        
        logger.info(f"Book {book.id} added: \"{book.title}\" by {book.author}")
        return book.id

    def update_book(self, book_id: int, fields: Union[BookUpdate, dict]) -> Book:
        data = _validate(BookUpdate, fields)
        book = self.get_book(book_id)
        
        book.title = data.title if data.title is not None else book.title
        book.author = data.author if data.author is not None else book.author
        book.year = data.year if data.year is not None else book.year
        book.category = data.category if data.category is not None else book.category
        book.price = data.price if data.price is not None else book.price
        book.status = data.status if data.status is not None else book.status
        
        commit_or_rollback(self.db, f"update book {book_id}")
        self.db.refresh(book)
        
        logger.info(f"Book {book_id} updated (status: {book.status.value})")
        return book

    def delete_book(self, book_id: int):
        """Delete a book together with all of its rentals in one commit."""
        book = self.get_book(book_id)
        with storage_guard(self.db, f"load rentals of book {book_id}"):
            rental_count = len(book.rentals)
        
        self.db.delete(book)
        commit_or_rollback(self.db, f"delete book {book_id}")
        
        logger.info(f"Book {book_id} deleted along with {rental_count} rentals")


def get_catalog(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> Catalog:
    return Catalog(db, clock=clock)
