from datetime import datetime, timedelta

from sqlalchemy.orm import Session, sessionmaker

from voucher_system.core.celery_app import celery_app
from voucher_system.models.account import AccountRole
from voucher_system.models.claim_record import ClaimRecord
from voucher_system.services.voucher_ledger import VoucherLedger
from voucher_system.tasks import claim_tasks

from factories import create_account, create_venue, create_voucher


def test_purge_task_deletes_expired_claims(db_session: Session, session_factory: sessionmaker, monkeypatch):
    now = datetime.utcnow()
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    user = create_account(db_session, "user@example.com")
    venue = create_venue(db_session, owner)
    stale = create_voucher(
        db_session,
        venue,
        code="STALE01",
        valid_from=now - timedelta(days=10),
        valid_until=now - timedelta(days=1),
    )
    live = create_voucher(db_session, venue, code="LIVE01")
    VoucherLedger.claim(db_session, stale.id, user.id, now=now - timedelta(days=5))
    VoucherLedger.claim(db_session, live.id, user.id)

    monkeypatch.setattr(claim_tasks, "SessionLocal", session_factory)

    result = claim_tasks.purge_expired_claims()

    assert result == {"deleted": 1}
    db_session.expire_all()
    assert [claim.snapshot_code for claim in db_session.query(ClaimRecord).all()] == ["LIVE01"]


def test_purge_task_is_scheduled_daily():
    schedule = celery_app.conf.beat_schedule["purge-expired-claims-daily"]

    assert schedule["task"] == "voucher_system.tasks.claim_tasks.purge_expired_claims"
