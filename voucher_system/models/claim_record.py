from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from voucher_system.db.base_class import Base


class ClaimRecord(Base):
    __tablename__ = "claim_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    voucher_id = Column(String(36), ForeignKey("vouchers.id", ondelete="SET NULL"), nullable=True, index=True)

    claimed_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)

    # Snapshot of the voucher at claim time
    snapshot_code = Column(String(20), nullable=False)
    snapshot_discount_percent = Column(Integer, nullable=False)
    snapshot_venue_name = Column(String(100), nullable=True)

    # Relationships
    account = relationship("Account", back_populates="claims")
    voucher = relationship("Voucher", back_populates="claims")

    # One claim per account per voucher
    __table_args__ = (
        UniqueConstraint("account_id", "voucher_id", name="unique_account_voucher_claim"),
    )

    def is_live(self, now: datetime) -> bool:
        return self.expires_at >= now
