from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class ClaimRecordResponse(BaseModel):
    id: str
    account_id: int
    voucher_id: Optional[str]
    claimed_at: datetime
    expires_at: datetime
    snapshot_code: str
    snapshot_discount_percent: int
    snapshot_venue_name: Optional[str]

    class Config:
        from_attributes = True


class ClaimListResponse(BaseModel):
    claims: List[ClaimRecordResponse]
    total: int
