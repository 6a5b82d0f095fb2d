from fastapi import APIRouter, Depends
from app.models.rental import RentalMode
from app.schemas.rental import TransactionRequest, TransactionResponse
from app.services.ledger import Ledger, get_ledger

router = APIRouter(prefix="/api", tags=["Rentals"])

@router.post("/rent", response_model=TransactionResponse)
async def request_transaction(request: TransactionRequest, ledger: Ledger = Depends(get_ledger)):
    """Rent or purchase a book.
    Purchases mark the book as sold; rentals return their expiry time."""
    rental = ledger.request_transaction(
        book_id=request.book_id,
        user_name=request.user_name,
        mode=request.mode,
        duration=request.duration
    )
    
    if rental.mode == RentalMode.PURCHASE:
        return TransactionResponse(message="Purchase completed", rentalId=rental.id)
    return TransactionResponse(message="Rental created", rentalId=rental.id, expiresAt=rental.expires_at)
