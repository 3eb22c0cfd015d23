import structlog
from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from voucher_system.db.session import get_db
from voucher_system.models.account import Account, AccountRole

logger = structlog.get_logger()


def get_current_account(
    x_account_id: str | None = Header(default=None, alias="X-Account-ID"),
    db: Session = Depends(get_db),
) -> Account:
    """Resolve the calling account from the X-Account-ID header."""
    if not x_account_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        account_id = int(x_account_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid account identifier",
        )

    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found",
        )

    if not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return account


def require_user(current_account: Account = Depends(get_current_account)) -> Account:
    if current_account.role != AccountRole.USER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only users can claim vouchers",
        )
    return current_account


def require_owner(current_account: Account = Depends(get_current_account)) -> Account:
    if current_account.role not in (AccountRole.OWNER, AccountRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Owner access required",
        )
    return current_account


def require_admin(
    request: Request,
    current_account: Account = Depends(get_current_account),
) -> Account:
    if current_account.role != AccountRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    logger.info(
        "admin_action",
        action=f"{request.method} {request.url.path}",
        admin_account_id=current_account.id,
    )
    return current_account
