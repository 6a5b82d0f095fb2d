import pytest

from app.database import Base
from app.models.book import BookStatus
from app.models.rental import Rental
from app.schemas.book import BookCreate, BookFilter, BookUpdate
from app.services.catalog import Catalog
from app.services.errors import InternalError, InvalidRequest, NotFound
from app.services.ledger import Ledger


@pytest.fixture
def catalog(db, clock):
    return Catalog(db, clock=clock)


def test_create_book_defaults_to_available(catalog):
    book_id = catalog.create_book(
        BookCreate(title="Солярис", author="Станислав Лем", year=1961, category="Фантастика", price=400)
    )
    book = catalog.get_book(book_id)
    assert book.status == BookStatus.AVAILABLE
    assert book.title == "Солярис"


def test_create_book_keeps_explicit_status(catalog):
    book_id = catalog.create_book(
        BookCreate(title="Dune", author="Frank Herbert", year=1965, category="Sci-Fi", price=10,
                   status=BookStatus.UNAVAILABLE)
    )
    assert catalog.get_book(book_id).status == BookStatus.UNAVAILABLE


def test_create_book_coerces_numeric_fields(catalog):
    book_id = catalog.create_book(
        {"title": "Dune", "author": "Frank Herbert", "year": "1965", "category": "Sci-Fi", "price": "12.5"}
    )
    book = catalog.get_book(book_id)
    assert book.year == 1965
    assert book.price == 12.5


def test_create_book_requires_all_fields(catalog):
    with pytest.raises(InvalidRequest):
        catalog.create_book({"title": "Dune", "author": "Frank Herbert", "year": 1965})


def test_create_book_rejects_negative_price(catalog):
    with pytest.raises(InvalidRequest):
        catalog.create_book(
            {"title": "Dune", "author": "Frank Herbert", "year": 1965, "category": "Sci-Fi", "price": -1}
        )


def test_get_missing_book(catalog):
    with pytest.raises(NotFound):
        catalog.get_book(999)


def test_update_book_falls_back_to_stored_values(catalog, make_book):
    book = make_book(title="Солярис", price=400)
    updated = catalog.update_book(book.id, BookUpdate(price=420))
    assert updated.price == 420
    assert updated.title == "Солярис"
    assert updated.author == "Станислав Лем"
    assert updated.year == 1961
    assert updated.status == BookStatus.AVAILABLE


def test_update_book_treats_null_as_omitted(catalog, make_book):
    book = make_book(title="Солярис")
    updated = catalog.update_book(book.id, {"title": None, "year": "1962"})
    assert updated.title == "Солярис"
    assert updated.year == 1962


def test_update_missing_book(catalog):
    with pytest.raises(NotFound):
        catalog.update_book(42, BookUpdate(title="Anything"))


def test_delete_book_removes_its_rentals(catalog, db, clock, make_book):
    book = make_book()
    other = make_book(title="Три товарища", author="Эрих Мария Ремарк")
    ledger = Ledger(db, clock=clock)
    for user in ("anna", "boris", "vera"):
        ledger.request_transaction(book.id, user, "rent", "2w")
    kept = ledger.request_transaction(other.id, "gleb", "rent", "1m")

    catalog.delete_book(book.id)

    with pytest.raises(NotFound):
        catalog.get_book(book.id)
    remaining = ledger.list_all_rentals()
    assert [r.id for r in remaining] == [kept.id]
    assert db.query(Rental).filter(Rental.book_id == book.id).count() == 0


def test_delete_missing_book(catalog):
    with pytest.raises(NotFound):
        catalog.delete_book(7)


def test_filter_by_category_any_case_sorted_by_author(catalog, make_book):
    make_book(title="Три товарища", author="Эрих Мария Ремарк", category="Роман")
    make_book(title="Солярис", author="Станислав Лем", category="Фантастика")
    make_book(title="Мастер и Маргарита", author="Михаил Булгаков", category="Роман")

    for query in ("роман", "РОМАН", "Ром"):
        books = catalog.list_books(BookFilter(category=query, sort="author"))
        assert [b.author for b in books] == ["Михаил Булгаков", "Эрих Мария Ремарк"]


def test_filters_are_combined(catalog, make_book):
    make_book(title="A", author="Станислав Лем", year=1961)
    make_book(title="B", author="Станислав Лем", year=1964, status=BookStatus.SOLD)
    make_book(title="C", author="Михаил Булгаков", year=1961)

    books = catalog.list_books(BookFilter(author="лем", year=1961))
    assert [b.title for b in books] == ["A"]

    books = catalog.list_books(BookFilter(author="лем", status=BookStatus.SOLD))
    assert [b.title for b in books] == ["B"]


def test_sort_by_year_descending(catalog, make_book):
    make_book(title="Old", year=1936)
    make_book(title="New", year=1997)
    make_book(title="Mid", year=1961)

    books = catalog.list_books(BookFilter(sort="year"))
    assert [b.year for b in books] == [1997, 1961, 1936]


def test_default_sort_is_newest_first(catalog, make_book):
    make_book(title="First")
    make_book(title="Second")
    make_book(title="Third")

    assert [b.title for b in catalog.list_books()] == ["Third", "Second", "First"]


def test_sort_by_category(catalog, make_book):
    make_book(title="A", category="Фэнтези")
    make_book(title="B", category="классика")
    make_book(title="C", category="Роман")

    books = catalog.list_books(BookFilter(sort="category"))
    assert [b.category for b in books] == ["классика", "Роман", "Фэнтези"]


def test_empty_result_is_not_an_error(catalog, make_book):
    make_book()
    assert catalog.list_books(BookFilter(category="poetry")) == []


def test_sort_by_author_follows_collation(catalog, make_book):
    make_book(title="A", author="Йоханнес Кеплер")
    make_book(title="B", author="Ия Саввина")
    make_book(title="C", author="Иван Бунин")

    books = catalog.list_books(BookFilter(sort="author"))
    assert [b.author for b in books] == ["Иван Бунин", "Ия Саввина", "Йоханнес Кеплер"]


def test_sort_keeps_accented_latin_with_base_letter(catalog, make_book):
    make_book(title="A", author="Ez")
    make_book(title="B", author="Éa")

    books = catalog.list_books(BookFilter(sort="author"))
    assert [b.author for b in books] == ["Éa", "Ez"]


def test_unknown_sort_falls_back_to_newest_first(catalog, make_book):
    make_book(title="First")
    make_book(title="Second")

    books = catalog.list_books(BookFilter(sort="title"))
    assert [b.title for b in books] == ["Second", "First"]


def test_storage_failures_surface_as_internal_error(catalog, engine):
    Base.metadata.drop_all(bind=engine)

    with pytest.raises(InternalError):
        catalog.list_books()
    with pytest.raises(InternalError):
        catalog.get_book(1)
