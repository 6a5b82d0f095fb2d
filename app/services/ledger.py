import logging
from datetime import datetime, timedelta
from typing import List, Optional, Iterable
from fastapi import Depends
from sqlalchemy.orm import Session, joinedload
from app.database import get_db, commit_or_rollback, storage_guard
from app.models.book import Book, BookStatus
from app.models.rental import Rental, RentalMode, RentalStatus
from app.services.errors import Conflict, InvalidRequest, NotFound
from app.utils.timezone import Clock, now, get_clock, to_utc

logger = logging.getLogger(__name__)

# Rental duration codes accepted from clients, in days
DURATION_DAYS = {
    "2w": 14,
    "1m": 30,
    "3m": 90,
}


def resolve_duration(code: Optional[str]) -> int:
    days = DURATION_DAYS.get(code) if code is not None else None
    if days is None:
        raise InvalidRequest("Invalid duration")
    return days


class Ledger:
    """Rental records: transactions, expiry and reminder queries."""

    def __init__(self, db: Session, clock: Clock = now):
        self.db = db
        self.clock = clock

    def request_transaction(
        self,
        book_id: Optional[int],
        user_name: Optional[str],
        mode,
        duration: Optional[str] = None
    ) -> Rental:
        """Rent or purchase a book.
        A purchase records a completed rental and marks the book sold in the same commit.
        A rent records an active rental expiring after the requested duration and leaves
        the book status alone, so one book may be rented by several users at once."""
        if not book_id or not user_name or not mode:
            raise InvalidRequest("bookId, userName and mode are required")
        try:
            mode = RentalMode(mode)
        except ValueError:
            raise InvalidRequest("mode must be purchase or rent")
        
        book = self._find_book(book_id)
        book.ensure_transactable()
        
        start_at = self.clock()
        
        if mode == RentalMode.PURCHASE:
            rental = Rental.purchase(book.id, user_name, start_at)
            self.db.add(rental)
            book.mark_sold()
            commit_or_rollback(self.db, f"purchase book {book.id}", conflict_detail="Book already sold")
            self.db.refresh(rental)
            logger.info(f"Book {book.id} purchased by {user_name} (rental {rental.id})")
            return rental
        
        days = resolve_duration(duration)
        rental = Rental.rent(
            book.id,
            user_name,
            duration_days=days,
            start_at=start_at,
            expires_at=start_at + timedelta(days=days)
        )
        self.db.add(rental)
        self._claim_for_rent(book.id)
        commit_or_rollback(self.db, f"rent book {book.id}")
        self.db.refresh(rental)
        logger.info(f"Book {book.id} rented by {user_name} for {days} days (rental {rental.id}, expires {rental.expires_at.isoformat()})")
        return rental

    def _find_book(self, book_id: int) -> Book:
        with storage_guard(self.db, f"load book {book_id}"):
            book = self.db.query(Book).filter(Book.id == book_id).first()
        if not book:
            raise NotFound("Book not found")
        return book

    def _claim_for_rent(self, book_id: int):
        """Write-lock the book row in the rent transaction, re-checking it is still unsold.
        A purchase committed after our sold check leaves no row to claim."""
        with storage_guard(self.db, f"claim book {book_id} for rent"):
            claimed = self.db.query(Book).filter(
                Book.id == book_id,
                Book.status != BookStatus.SOLD
            ).update({Book.status: Book.status}, synchronize_session=False)
        if claimed != 1:
            self.db.rollback()
            logger.warning(f"Rent of book {book_id} lost the race against a purchase")
            raise Conflict("Book already sold")

    def list_all_rentals(self) -> List[Rental]:
        with storage_guard(self.db, "list rentals"):
            return self.db.query(Rental).options(
                joinedload(Rental.book)
            ).order_by(Rental.start_at.desc(), Rental.id.desc()).all()

    def list_upcoming_expirations(self, window_days: float, only_unreminded: bool = False) -> List[Rental]:
        """Active rents expiring between now and now + window_days, soonest first."""
        current = to_utc(self.clock())
        until = current + timedelta(days=window_days)
        
        query = self.db.query(Rental).options(joinedload(Rental.book)).filter(
            Rental.mode == RentalMode.RENT,
            Rental.status == RentalStatus.ACTIVE,
            Rental.expires_at.isnot(None),
            Rental.expires_at >= current,
            Rental.expires_at <= until
        )
        if only_unreminded:
            query = query.filter(Rental.reminded.is_(False))
        
        with storage_guard(self.db, "list upcoming expirations"):
            return query.order_by(Rental.expires_at.asc(), Rental.id.asc()).all()

    def sweep_expirations(self, current: Optional[datetime] = None) -> int:
        """Expire every active rent whose expiry has passed. Returns how many were expired."""
        current = to_utc(current or self.clock())
        with storage_guard(self.db, "find overdue rentals"):
            overdue = self.db.query(Rental).filter(
                Rental.mode == RentalMode.RENT,
                Rental.status == RentalStatus.ACTIVE,
                Rental.expires_at.isnot(None),
                Rental.expires_at < current
            ).all()
        
        if not overdue:
            return 0
        
        for rental in overdue:
            rental.expire(current)
        commit_or_rollback(self.db, "expire overdue rentals")
        
        logger.info(f"Expired {len(overdue)} overdue rentals")
        return len(overdue)

    def mark_reminded(self, rental_ids: Iterable[int]) -> int:
        ids = list(rental_ids)
        if not ids:
            return 0
        
        with storage_guard(self.db, "mark rentals reminded"):
            updated = self.db.query(Rental).filter(
                Rental.id.in_(ids)
            ).update({Rental.reminded: True}, synchronize_session=False)
        commit_or_rollback(self.db, "mark rentals reminded")
        return updated


def get_ledger(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> Ledger:
    return Ledger(db, clock=clock)
