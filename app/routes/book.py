from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from app.models.book import BookStatus
from app.schemas.book import BookFilter, BookResponse
from app.services.catalog import Catalog, get_catalog

router = APIRouter(prefix="/api/books", tags=["Books"])

@router.get("", response_model=List[BookResponse])
async def get_books(
    category: Optional[str] = Query(None, description="Case-insensitive substring of the category"),
    author: Optional[str] = Query(None, description="Case-insensitive substring of the author"),
    year: Optional[int] = Query(None, description="Exact publication year"),
    status: Optional[BookStatus] = Query(None, description="Exact book status"),
    sort: Optional[str] = Query(None, description="author, category or year; newest first otherwise"),
    catalog: Catalog = Depends(get_catalog)
):
    """Get list of books with optional filters and sorting."""
    book_filter = BookFilter(category=category, author=author, year=year, status=status, sort=sort)
    books = catalog.list_books(book_filter)
    return [BookResponse.model_validate(book) for book in books]

@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: int, catalog: Catalog = Depends(get_catalog)):
    """Get book details by ID."""
    return BookResponse.model_validate(catalog.get_book(book_id))
