import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base, UTCDateTime
from app.services.errors import Conflict

class RentalMode(str, enum.Enum):
    PURCHASE = "purchase"
    RENT = "rent"

class RentalStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"

# Completed and expired are terminal
ALLOWED_TRANSITIONS = {
    RentalStatus.ACTIVE: {RentalStatus.COMPLETED, RentalStatus.EXPIRED},
    RentalStatus.COMPLETED: set(),
    RentalStatus.EXPIRED: set(),
}

def _enum_values(enum_cls):
    return [m.value for m in enum_cls]

class Rental(Base):
    __tablename__ = "rentals"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    user_name = Column(String(255), nullable=False)
    mode = Column(
        Enum(RentalMode, name="rental_mode", native_enum=False, create_constraint=True,
             values_callable=_enum_values),
        nullable=False
    )
    duration_days = Column(Integer, nullable=True)
    start_at = Column(UTCDateTime, nullable=False)
    expires_at = Column(UTCDateTime, nullable=True, index=True)
    status = Column(
        Enum(RentalStatus, name="rental_status", native_enum=False, create_constraint=True,
             values_callable=_enum_values),
        default=RentalStatus.ACTIVE,
        nullable=False,
        index=True
    )
    reminded = Column(Boolean, default=False, nullable=False)
    
    # Relationships
    book = relationship("Book", back_populates="rentals")
    
    __table_args__ = (
        CheckConstraint(
            "(mode = 'purchase' AND expires_at IS NULL AND duration_days IS NULL) "
            "OR (mode = 'rent' AND expires_at IS NOT NULL AND duration_days IS NOT NULL)",
            name="chk_rental_mode_expiry"
        ),
    )
    
    @classmethod
    def purchase(cls, book_id: int, user_name: str, start_at: datetime) -> "Rental":
        """A purchase is terminal from the moment it is recorded."""
        return cls(
            book_id=book_id,
            user_name=user_name,
            mode=RentalMode.PURCHASE,
            duration_days=None,
            start_at=start_at,
            expires_at=None,
            status=RentalStatus.COMPLETED,
            reminded=False
        )
    
    @classmethod
    def rent(cls, book_id: int, user_name: str, duration_days: int,
             start_at: datetime, expires_at: datetime) -> "Rental":
        return cls(
            book_id=book_id,
            user_name=user_name,
            mode=RentalMode.RENT,
            duration_days=duration_days,
            start_at=start_at,
            expires_at=expires_at,
            status=RentalStatus.ACTIVE,
            reminded=False
        )
    
    def transition_to(self, new_status: RentalStatus):
        if new_status not in ALLOWED_TRANSITIONS[RentalStatus(self.status)]:
            raise Conflict(f"Rental cannot move from {RentalStatus(self.status).value} to {new_status.value}")
        self.status = new_status
    
    def is_overdue(self, now: datetime) -> bool:
        return (
            self.mode == RentalMode.RENT
            and self.status == RentalStatus.ACTIVE
            and self.expires_at is not None
            and self.expires_at < now
        )
    
    def expire(self, now: datetime):
        """Move an active rent to expired once its expiry has passed."""
        if not self.is_overdue(now):
            raise Conflict(f"Rental {self.id} is not overdue")
        self.transition_to(RentalStatus.EXPIRED)
