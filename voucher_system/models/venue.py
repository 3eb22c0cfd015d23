from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from voucher_system.db.base_class import Base


class VenueType(str, enum.Enum):
    RESTAURANT = "restaurant"
    CAFE = "cafe"
    TOURIST_SPOT = "tourist_spot"


class Venue(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    address = Column(String(200), nullable=False)
    venue_type = Column(Enum(VenueType), default=VenueType.RESTAURANT, nullable=False)
    owner_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    owner = relationship("Account", back_populates="venues")
    vouchers = relationship("Voucher", back_populates="venue", cascade="all, delete-orphan")
