from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.models.rental import RentalMode, RentalStatus

class TransactionRequest(BaseModel):
    """Request body for renting or purchasing a book"""
    book_id: int = Field(..., alias="bookId", gt=0)
    user_name: str = Field(..., alias="userName", min_length=1, max_length=255)
    mode: RentalMode
    duration: Optional[str] = Field(None, description="Rental duration code: 2w, 1m or 3m")
    
    class Config:
        populate_by_name = True

class TransactionResponse(BaseModel):
    message: str
    rentalId: int
    expiresAt: Optional[datetime] = None

class RentalResponse(BaseModel):
    id: int
    book_id: int
    user_name: str
    mode: RentalMode
    duration_days: Optional[int] = None
    start_at: datetime
    expires_at: Optional[datetime] = None
    status: RentalStatus
    reminded: bool
    title: Optional[str] = None
    author: Optional[str] = None
    
    class Config:
        from_attributes = True
    
    @classmethod
    def from_rental(cls, rental) -> "RentalResponse":
        response = cls.model_validate(rental)
        if rental.book is not None:
            response.title = rental.book.title
            response.author = rental.book.author
        return response
