from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from voucher_system.api.deps import get_current_account, require_user
from voucher_system.core.config import settings
from voucher_system.core.exceptions import LedgerError
from voucher_system.core.rate_limiter import limiter
from voucher_system.db.session import get_db
from voucher_system.models.account import Account, AccountRole
from voucher_system.services.voucher_ledger import VoucherLedger
from voucher_system.services.voucher_service import VoucherService
from voucher_system.utils.response import success, ledger_error

router = APIRouter()


@router.get("", response_model=dict)
def list_vouchers(db: Session = Depends(get_db)):
    """Browse vouchers that can be claimed right now."""
    vouchers = VoucherService.list_claimable_vouchers(db)
    return success(data=vouchers.model_dump(), message="Vouchers retrieved successfully")


@router.get("/{voucher_id}/status", response_model=dict)
def get_voucher_status(
    voucher_id: str,
    current_account: Account = Depends(get_current_account),
    db: Session = Depends(get_db)
):
    """Phase, remaining quantity and the caller's claim state for one voucher."""
    try:
        voucher_status = VoucherLedger.get_status(db, voucher_id, current_account.id)
    except LedgerError as e:
        return ledger_error(e)

    data = voucher_status.model_dump()
    data["eligible"] = current_account.role == AccountRole.USER
    return success(data=data, message="Voucher status retrieved")


@router.post("/{voucher_id}/claim", response_model=dict)
@limiter.limit(settings.CLAIM_RATE_LIMIT)
def claim_voucher(
    request: Request,
    voucher_id: str,
    current_account: Account = Depends(require_user),
    db: Session = Depends(get_db)
):
    """Claim one unit of a voucher for the calling user."""
    try:
        claim = VoucherLedger.claim(db, voucher_id, current_account.id)
    except LedgerError as e:
        return ledger_error(e)

    return success(
        data=claim.model_dump(),
        message=f"Voucher {claim.snapshot_code} claimed: {claim.snapshot_discount_percent}% off",
    )
