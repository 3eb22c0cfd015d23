from sqlalchemy import Boolean, Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from voucher_system.db.base_class import Base


class AccountRole(str, enum.Enum):
    USER = "user"
    OWNER = "owner"
    ADMIN = "admin"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(100), nullable=False)
    role = Column(Enum(AccountRole), default=AccountRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    venues = relationship("Venue", back_populates="owner")
    claims = relationship("ClaimRecord", back_populates="account", cascade="all, delete-orphan")
