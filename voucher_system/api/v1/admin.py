from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from voucher_system.api.deps import require_admin
from voucher_system.core.exceptions import LedgerError
from voucher_system.db.session import get_db
from voucher_system.models.account import Account
from voucher_system.services.voucher_service import VoucherService
from voucher_system.utils.response import success, ledger_error

router = APIRouter()


@router.get("/vouchers", response_model=dict)
def list_all_vouchers(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    current_account: Account = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List every voucher (admin only)."""
    vouchers = VoucherService.list_all_vouchers(db, skip, limit)
    return success(data=vouchers.model_dump(), message="Vouchers retrieved successfully")


@router.delete("/vouchers/{voucher_id}", response_model=dict)
def delete_voucher(
    voucher_id: str,
    current_account: Account = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete any voucher (admin only)."""
    try:
        VoucherService.delete_voucher(db, current_account.id, voucher_id)
    except LedgerError as e:
        return ledger_error(e)
    return success(message="Voucher deleted successfully")
