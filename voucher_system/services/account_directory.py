from sqlalchemy.orm import Session

from voucher_system.core.exceptions import AccountNotFound
from voucher_system.models.account import Account


class AccountDirectory:

    @staticmethod
    def get_account(db: Session, account_id: int) -> Account:
        account = db.query(Account).filter(Account.id == account_id).first()
        if not account:
            raise AccountNotFound(account_id)
        return account

    @staticmethod
    def get_active_account(db: Session, account_id: int) -> Account:
        """Resolve an account that may act; inactive accounts resolve like unknown ones."""
        account = AccountDirectory.get_account(db, account_id)
        if not account.is_active:
            raise AccountNotFound(account_id)
        return account
