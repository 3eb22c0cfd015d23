from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from voucher_system.api.deps import require_owner
from voucher_system.core.exceptions import LedgerError
from voucher_system.db.session import get_db
from voucher_system.models.account import Account
from voucher_system.schemas.voucher import VoucherCreate, VoucherUpdate
from voucher_system.services.voucher_service import VoucherService
from voucher_system.utils.response import success, ledger_error

router = APIRouter()


@router.get("/vouchers", response_model=dict)
def list_owner_vouchers(
    current_account: Account = Depends(require_owner),
    db: Session = Depends(get_db)
):
    """List vouchers on the caller's venues."""
    vouchers = VoucherService.list_owner_vouchers(db, current_account.id)
    return success(data=vouchers.model_dump(), message="Vouchers retrieved successfully")


@router.post("/vouchers", response_model=dict)
def create_voucher(
    voucher_data: VoucherCreate,
    current_account: Account = Depends(require_owner),
    db: Session = Depends(get_db)
):
    """Create a voucher on one of the caller's venues."""
    try:
        voucher = VoucherService.create_voucher(db, current_account.id, voucher_data)
    except LedgerError as e:
        return ledger_error(e)
    return success(data=voucher.model_dump(), message="Voucher created successfully")


@router.put("/vouchers/{voucher_id}", response_model=dict)
def update_voucher(
    voucher_id: str,
    voucher_data: VoucherUpdate,
    current_account: Account = Depends(require_owner),
    db: Session = Depends(get_db)
):
    try:
        voucher = VoucherService.update_voucher(db, current_account.id, voucher_id, voucher_data)
    except LedgerError as e:
        return ledger_error(e)
    return success(data=voucher.model_dump(), message="Voucher updated successfully")


@router.delete("/vouchers/{voucher_id}", response_model=dict)
def delete_voucher(
    voucher_id: str,
    current_account: Account = Depends(require_owner),
    db: Session = Depends(get_db)
):
    try:
        VoucherService.delete_voucher(db, current_account.id, voucher_id)
    except LedgerError as e:
        return ledger_error(e)
    return success(message="Voucher deleted successfully")


@router.get("/dashboard", response_model=dict)
def owner_dashboard(
    current_account: Account = Depends(require_owner),
    db: Session = Depends(get_db)
):
    """Voucher counts and total claims across the caller's venues."""
    stats = VoucherService.owner_dashboard(db, current_account.id)
    return success(data=stats.model_dump(), message="Dashboard retrieved successfully")
