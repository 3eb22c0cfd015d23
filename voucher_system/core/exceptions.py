from fastapi import status
from typing import Any, Optional


class LedgerError(Exception):
    """Base class for voucher ledger and voucher management failures."""

    code = "ledger_error"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Voucher operation failed"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.message
        self.context = context
        super().__init__(self.message)

    def to_errors(self) -> dict:
        return {"code": self.code, **self.context}


class NotFound(LedgerError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class VoucherNotFound(NotFound):
    message = "Voucher not found"

    def __init__(self, voucher_id: str):
        super().__init__(voucher_id=voucher_id)


class AccountNotFound(NotFound):
    message = "Account not found"

    def __init__(self, account_id: int):
        super().__init__(account_id=account_id)


class VenueNotFound(NotFound):
    message = "Venue not found"

    def __init__(self, venue_id: int):
        super().__init__(venue_id=venue_id)


class NotClaimable(LedgerError):
    code = "not_claimable"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, reason: str):
        self.reason = reason
        message = "Voucher is not yet available" if reason == "upcoming" else "Voucher has expired"
        super().__init__(message, reason=reason)


class AlreadyClaimed(LedgerError):
    code = "already_claimed"
    status_code = status.HTTP_409_CONFLICT
    message = "You have already claimed this voucher"


class Exhausted(LedgerError):
    code = "exhausted"
    status_code = status.HTTP_409_CONFLICT
    message = "Voucher is out of stock"


class ConcurrencyConflict(LedgerError):
    """Storage-level conflict that outlived the ledger's internal retries."""

    code = "concurrency_conflict"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Voucher is busy, please try again"


class PermissionDenied(LedgerError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    message = "You do not have permission to manage this voucher"


class DuplicateVoucherCode(LedgerError):
    code = "duplicate_code"
    status_code = status.HTTP_409_CONFLICT
    message = "Voucher code already exists"


class InvalidVoucher(LedgerError):
    code = "invalid_voucher"
    status_code = status.HTTP_400_BAD_REQUEST
