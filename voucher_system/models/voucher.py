from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
import uuid
from voucher_system.db.base_class import Base


class VoucherPhase(str, enum.Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    EXPIRED = "expired"


class Voucher(Base):
    __tablename__ = "vouchers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code = Column(String(20), unique=True, nullable=False, index=True)
    discount_percent = Column(Integer, nullable=False)  # 1-100

    quantity_total = Column(Integer, nullable=False)
    quantity_claimed = Column(Integer, default=0, nullable=False)  # Only the claim protocol writes this

    valid_from = Column(DateTime, nullable=False)
    valid_until = Column(DateTime, nullable=False)

    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    conditions = Column(String(300), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    venue = relationship("Venue", back_populates="vouchers")
    claims = relationship("ClaimRecord", back_populates="voucher")

    __table_args__ = (
        CheckConstraint("discount_percent BETWEEN 1 AND 100", name="ck_voucher_discount_range"),
        CheckConstraint("quantity_total >= 1", name="ck_voucher_quantity_total"),
        CheckConstraint(
            "quantity_claimed >= 0 AND quantity_claimed <= quantity_total",
            name="ck_voucher_quantity_claimed",
        ),
        CheckConstraint("valid_from < valid_until", name="ck_voucher_validity_window"),
        Index("ix_vouchers_validity", "valid_from", "valid_until"),
    )

    @property
    def venue_name(self):
        return self.venue.name if self.venue else None

    @property
    def remaining(self) -> int:
        return max(0, self.quantity_total - self.quantity_claimed)

    def phase_at(self, now: datetime) -> VoucherPhase:
        if now < self.valid_from:
            return VoucherPhase.UPCOMING
        if now > self.valid_until:
            return VoucherPhase.EXPIRED
        if self.quantity_claimed >= self.quantity_total:
            return VoucherPhase.EXHAUSTED
        return VoucherPhase.ACTIVE
