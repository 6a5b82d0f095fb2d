from .book import (
    BookBase, BookCreate, BookUpdate, BookFilter, BookResponse,
    BookCreated, MessageResponse
)
from .rental import TransactionRequest, TransactionResponse, RentalResponse

__all__ = [
    "BookBase", "BookCreate", "BookUpdate", "BookFilter", "BookResponse",
    "BookCreated", "MessageResponse",
    "TransactionRequest", "TransactionResponse", "RentalResponse",
]
