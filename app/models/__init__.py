from .book import Book, BookStatus
from .rental import Rental, RentalMode, RentalStatus

__all__ = [
    "Book",
    "BookStatus",
    "Rental",
    "RentalMode",
    "RentalStatus",
]
