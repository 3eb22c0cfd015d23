from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime, timezone
from voucher_system.models.voucher import VoucherPhase


def _normalize_code(value: str) -> str:
    return value.strip().upper()


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored timestamps are naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class VoucherCreate(BaseModel):
    code: str = Field(..., min_length=3, max_length=20)
    discount_percent: int = Field(..., ge=1, le=100)
    quantity_total: int = Field(..., ge=1)
    valid_from: datetime
    valid_until: datetime
    venue_id: int
    conditions: Optional[str] = Field(None, max_length=300)

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return _normalize_code(value) if isinstance(value, str) else value

    @field_validator("valid_from", "valid_until")
    @classmethod
    def normalize_timestamps(cls, value):
        return _to_naive_utc(value)

    @model_validator(mode="after")
    def validate_window(self):
        if self.valid_from >= self.valid_until:
            raise ValueError("valid_from must be earlier than valid_until")
        return self


class VoucherUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=3, max_length=20)
    discount_percent: Optional[int] = Field(None, ge=1, le=100)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    conditions: Optional[str] = Field(None, max_length=300)

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return _normalize_code(value) if isinstance(value, str) else value

    @field_validator("valid_from", "valid_until")
    @classmethod
    def normalize_timestamps(cls, value):
        return _to_naive_utc(value)


class VoucherResponse(BaseModel):
    id: str
    code: str
    discount_percent: int
    quantity_total: int
    quantity_claimed: int
    remaining: int
    valid_from: datetime
    valid_until: datetime
    venue_id: int
    venue_name: Optional[str] = None
    conditions: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VoucherStatus(BaseModel):
    voucher_id: str
    phase: VoucherPhase
    remaining: int
    quantity_total: int
    quantity_claimed: int
    already_claimed: bool
    code: str
    discount_percent: int
    expires_at: datetime
    venue_name: Optional[str]


class OwnerDashboardResponse(BaseModel):
    total_vouchers: int
    active_vouchers: int
    total_claims: int


class VoucherListResponse(BaseModel):
    vouchers: List[VoucherResponse]
    total: int
