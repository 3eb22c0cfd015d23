from celery import shared_task

from voucher_system.db.session import SessionLocal
from voucher_system.services.voucher_ledger import VoucherLedger


@shared_task(bind=True, max_retries=3)
def purge_expired_claims(self):
    """Delete expired claim records across all accounts to keep the table bounded."""
    db = SessionLocal()
    try:
        deleted = VoucherLedger.purge_expired_claims(db)
        return {"deleted": deleted}
    except Exception as exc:
        raise self.retry(exc=exc, countdown=60)
    finally:
        db.close()
