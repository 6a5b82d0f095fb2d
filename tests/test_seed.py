from app.models.book import Book
from app.services.seed import EXAMPLE_BOOKS, seed_books


def test_seed_fills_empty_catalog(db, clock):
    assert seed_books(db, clock=clock) == len(EXAMPLE_BOOKS)
    assert db.query(Book).count() == len(EXAMPLE_BOOKS)


def test_seed_skips_when_books_exist(db, clock, make_book):
    make_book()
    assert seed_books(db, clock=clock) == 0
    assert db.query(Book).count() == 1
