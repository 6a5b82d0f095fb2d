import logging
from sqlalchemy.orm import Session
from app.models.book import Book
from app.schemas.book import BookCreate
from app.services.catalog import Catalog
from app.utils.timezone import Clock, now

logger = logging.getLogger(__name__)

EXAMPLE_BOOKS = [
    BookCreate(title="Мастер и Маргарита", author="Михаил Булгаков", year=1966, category="Роман", price=500),
    BookCreate(title="Три товарища", author="Эрих Мария Ремарк", year=1936, category="Роман", price=450),
    BookCreate(title="Солярис", author="Станислав Лем", year=1961, category="Фантастика", price=400),
    BookCreate(title="Над пропастью во ржи", author="Джером Д. Сэлинджер", year=1951, category="Классика", price=350),
    BookCreate(title="Гарри Поттер и Философский камень", author="Дж. К. Роулинг", year=1997, category="Фэнтези", price=300),
]

def seed_books(db: Session, clock: Clock = now) -> int:
    """Insert the example books, but only into an empty catalog. Returns how many were added."""
    if db.query(Book).count() > 0:
        return 0
    
    catalog = Catalog(db, clock=clock)
    for book in EXAMPLE_BOOKS:
        catalog.create_book(book)
    
    logger.info(f"Seeded {len(EXAMPLE_BOOKS)} example books")
    return len(EXAMPLE_BOOKS)
