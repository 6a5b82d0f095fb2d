from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.models.book import BookStatus

class BookBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    year: int
    category: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)

class BookCreate(BookBase):
    status: BookStatus = BookStatus.AVAILABLE

class BookUpdate(BaseModel):
    """Fields left out (or sent as null) keep their stored value."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    year: Optional[int] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    status: Optional[BookStatus] = None

class BookFilter(BaseModel):
    category: Optional[str] = None
    author: Optional[str] = None
    year: Optional[int] = None
    status: Optional[BookStatus] = None
    sort: Optional[str] = None  # author, category or year; anything else means newest first

class BookResponse(BookBase):
    id: int
    status: BookStatus
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

class BookCreated(BaseModel):
    message: str
    id: int

class MessageResponse(BaseModel):
    message: str
