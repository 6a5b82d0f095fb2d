import enum
from sqlalchemy import Column, String, Integer, Float, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base, UTCDateTime
from app.services.errors import Conflict

class BookStatus(str, enum.Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    SOLD = "sold"

class Book(Base):
    __tablename__ = "books"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    year = Column(Integer, nullable=False, index=True)
    category = Column(String(100), nullable=False)
    price = Column(Float, nullable=False)
    status = Column(
        Enum(BookStatus, name="book_status", native_enum=False, create_constraint=True,
             values_callable=lambda e: [m.value for m in e]),
        default=BookStatus.AVAILABLE,
        nullable=False,
        index=True
    )
    created_at = Column(UTCDateTime, nullable=False)
    version_id = Column(Integer, nullable=False)

    # Relationships
    rentals = relationship("Rental", back_populates="book", cascade="all, delete-orphan")
    
    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_book_price"),
    )

    # Two sessions writing the same book row (e.g. racing purchases) cannot both commit
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_sold(self) -> bool:
        return self.status == BookStatus.SOLD
    
    def ensure_transactable(self):
        """A sold book can be neither rented nor purchased again."""
        if self.is_sold:
            raise Conflict("Book already sold")
    
    def mark_sold(self):
        self.ensure_transactable()
        self.status = BookStatus.SOLD
