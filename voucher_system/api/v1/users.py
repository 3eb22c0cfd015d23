from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from voucher_system.api.deps import get_current_account
from voucher_system.core.exceptions import LedgerError
from voucher_system.db.session import get_db
from voucher_system.models.account import Account
from voucher_system.schemas.claim import ClaimListResponse
from voucher_system.services.voucher_ledger import VoucherLedger
from voucher_system.utils.response import success, ledger_error

router = APIRouter()


@router.get("/me", response_model=dict)
def get_profile(current_account: Account = Depends(get_current_account)):
    return success(
        data={
            "id": current_account.id,
            "email": current_account.email,
            "display_name": current_account.display_name,
            "role": current_account.role,
            "created_at": current_account.created_at,
        },
        message="Profile retrieved successfully",
    )


@router.get("/me/claims", response_model=dict)
def list_my_claims(
    current_account: Account = Depends(get_current_account),
    db: Session = Depends(get_db)
):
    """Live claims of the caller; expired ones are swept on read."""
    try:
        claims = VoucherLedger.list_active_claims(db, current_account.id)
    except LedgerError as e:
        return ledger_error(e)

    response = ClaimListResponse(claims=claims, total=len(claims))
    return success(data=response.model_dump(), message="Claims retrieved successfully")
