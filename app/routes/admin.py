from fastapi import APIRouter, Depends
from typing import List
from app.config import settings
from app.schemas.book import BookCreate, BookUpdate, BookCreated, BookResponse, MessageResponse
from app.schemas.rental import RentalResponse
from app.services.auth import require_admin
from app.services.catalog import Catalog, get_catalog
from app.services.ledger import Ledger, get_ledger

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])

# Book management
@router.post("/books", response_model=BookCreated)
async def create_book(book_data: BookCreate, catalog: Catalog = Depends(get_catalog)):
    """Add a book to the catalog."""
    book_id = catalog.create_book(book_data)
    return BookCreated(message="Book added", id=book_id)

@router.put("/books/{book_id}", response_model=BookResponse)
async def update_book(book_id: int, book_data: BookUpdate, catalog: Catalog = Depends(get_catalog)):
    """Update a book; omitted fields keep their current value."""
    return BookResponse.model_validate(catalog.update_book(book_id, book_data))

@router.delete("/books/{book_id}", response_model=MessageResponse)
async def delete_book(book_id: int, catalog: Catalog = Depends(get_catalog)):
    """Delete a book and every rental that references it."""
    catalog.delete_book(book_id)
    return MessageResponse(message="Book deleted")

# Rental overview
@router.get("/rentals", response_model=List[RentalResponse])
async def get_rentals(ledger: Ledger = Depends(get_ledger)):
    """Get all rentals and purchases, newest first."""
    return [RentalResponse.from_rental(rental) for rental in ledger.list_all_rentals()]

@router.get("/reminders", response_model=List[RentalResponse])
async def get_reminders(ledger: Ledger = Depends(get_ledger)):
    """Get active rentals expiring within the reminder window, soonest first."""
    rentals = ledger.list_upcoming_expirations(settings.reminder_window_days)
    return [RentalResponse.from_rental(rental) for rental in rentals]
