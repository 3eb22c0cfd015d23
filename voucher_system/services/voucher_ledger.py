from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, OperationalError
from datetime import datetime
from typing import List, Optional
import time
import structlog

from voucher_system.core.config import settings
from voucher_system.core.exceptions import (
    AlreadyClaimed,
    ConcurrencyConflict,
    Exhausted,
    LedgerError,
    NotClaimable,
    VoucherNotFound,
)
from voucher_system.models.claim_record import ClaimRecord
from voucher_system.models.voucher import Voucher, VoucherPhase
from voucher_system.schemas.claim import ClaimRecordResponse
from voucher_system.schemas.voucher import VoucherStatus
from voucher_system.services.account_directory import AccountDirectory
from voucher_system.services.venue_registry import VenueRegistry

logger = structlog.get_logger()

CLOSED_PHASES = (VoucherPhase.UPCOMING, VoucherPhase.EXPIRED)


class VoucherLedger:
    """
    Claimable inventory of vouchers and the claim records held by accounts.

    quantity_claimed is only ever changed by claim(), through a conditional
    UPDATE that re-checks the cap and validity window in the same statement,
    and always in the same transaction as the ClaimRecord insert. The unique
    (account_id, voucher_id) constraint turns a duplicate claim into an
    IntegrityError, which rolls the increment back with it.
    """

    @staticmethod
    def _get_voucher(db: Session, voucher_id: str) -> Voucher:
        voucher = db.query(Voucher).filter(Voucher.id == voucher_id).first()
        if not voucher:
            raise VoucherNotFound(voucher_id)
        return voucher

    @staticmethod
    def _find_claim(db: Session, account_id: int, voucher_id: str) -> Optional[ClaimRecord]:
        return (
            db.query(ClaimRecord)
            .filter(ClaimRecord.account_id == account_id, ClaimRecord.voucher_id == voucher_id)
            .first()
        )

    @staticmethod
    def get_status(
        db: Session,
        voucher_id: str,
        account_id: int,
        now: Optional[datetime] = None,
    ) -> VoucherStatus:
        """Read-only view of a voucher's phase and the caller's claim on it."""
        now = now or datetime.utcnow()
        AccountDirectory.get_account(db, account_id)
        voucher = VoucherLedger._get_voucher(db, voucher_id)
        claim = VoucherLedger._find_claim(db, account_id, voucher_id)

        return VoucherStatus(
            voucher_id=voucher.id,
            phase=voucher.phase_at(now),
            remaining=voucher.remaining,
            quantity_total=voucher.quantity_total,
            quantity_claimed=voucher.quantity_claimed,
            already_claimed=claim is not None and claim.is_live(now),
            code=voucher.code,
            discount_percent=voucher.discount_percent,
            expires_at=voucher.valid_until,
            venue_name=voucher.venue_name,
        )

    @staticmethod
    def claim(
        db: Session,
        voucher_id: str,
        account_id: int,
        now: Optional[datetime] = None,
    ) -> ClaimRecordResponse:
        """
        Claim one unit of a voucher for an account.

        Raises AccountNotFound, VoucherNotFound, NotClaimable, AlreadyClaimed
        or Exhausted. Storage conflicts are retried up to CLAIM_MAX_ATTEMPTS
        times before ConcurrencyConflict is raised.
        """
        max_attempts = settings.CLAIM_MAX_ATTEMPTS
        for attempt in range(1, max_attempts + 1):
            try:
                return VoucherLedger._claim_once(db, voucher_id, account_id, now or datetime.utcnow())
            except (OperationalError, ConcurrencyConflict) as exc:
                db.rollback()
                logger.warning(
                    "claim_conflict_retry",
                    voucher_id=voucher_id,
                    account_id=account_id,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error_type=type(exc).__name__,
                )
                if attempt < max_attempts:
                    time.sleep(settings.CLAIM_RETRY_BACKOFF_SECONDS * attempt)

        raise ConcurrencyConflict(voucher_id=voucher_id)

    @staticmethod
    def _claim_once(db: Session, voucher_id: str, account_id: int, now: datetime) -> ClaimRecordResponse:
        try:
            AccountDirectory.get_active_account(db, account_id)
            voucher = VoucherLedger._get_voucher(db, voucher_id)

            phase = voucher.phase_at(now)
            if phase in CLOSED_PHASES:
                raise NotClaimable(reason=phase.value)

            existing = VoucherLedger._find_claim(db, account_id, voucher_id)
            if existing is not None and existing.is_live(now):
                raise AlreadyClaimed()

            if phase == VoucherPhase.EXHAUSTED:
                raise Exhausted()

            updated = (
                db.query(Voucher)
                .filter(
                    Voucher.id == voucher_id,
                    Voucher.quantity_claimed < Voucher.quantity_total,
                    Voucher.valid_from <= now,
                    Voucher.valid_until >= now,
                )
                .update(
                    {Voucher.quantity_claimed: Voucher.quantity_claimed + 1},
                    synchronize_session=False,
                )
            )
            if updated != 1:
                db.rollback()
                VoucherLedger._raise_for_lost_race(db, voucher_id, account_id, now)

            # A claim left over from an earlier validity window frees the pair
            if existing is not None:
                db.delete(existing)
                db.flush()

            db.refresh(voucher)
            claim = ClaimRecord(
                account_id=account_id,
                voucher_id=voucher.id,
                claimed_at=now,
                expires_at=voucher.valid_until,
                snapshot_code=voucher.code,
                snapshot_discount_percent=voucher.discount_percent,
                snapshot_venue_name=VenueRegistry.venue_name(db, voucher.venue_id),
            )
            db.add(claim)
            db.commit()
            db.refresh(claim)
        except IntegrityError:
            db.rollback()
            logger.info(
                "voucher_claim_rejected",
                voucher_id=voucher_id,
                account_id=account_id,
                reason=AlreadyClaimed.code,
            )
            raise AlreadyClaimed()
        except ConcurrencyConflict:
            raise
        except LedgerError as exc:
            db.rollback()
            logger.info(
                "voucher_claim_rejected",
                voucher_id=voucher_id,
                account_id=account_id,
                reason=exc.code,
            )
            raise

        logger.info(
            "voucher_claimed",
            voucher_id=voucher_id,
            account_id=account_id,
            claim_id=claim.id,
            remaining=voucher.remaining,
        )
        return ClaimRecordResponse.model_validate(claim)

    @staticmethod
    def _raise_for_lost_race(db: Session, voucher_id: str, account_id: int, now: datetime):
        """The conditional increment matched nothing; report what changed underneath it."""
        voucher = VoucherLedger._get_voucher(db, voucher_id)
        phase = voucher.phase_at(now)
        if phase in CLOSED_PHASES:
            raise NotClaimable(reason=phase.value)
        claim = VoucherLedger._find_claim(db, account_id, voucher_id)
        if claim is not None and claim.is_live(now):
            raise AlreadyClaimed()
        if phase == VoucherPhase.EXHAUSTED:
            raise Exhausted()
        raise ConcurrencyConflict(voucher_id=voucher_id)

    @staticmethod
    def expire_stale_claims(
        db: Session,
        account_id: int,
        now: Optional[datetime] = None,
    ) -> List[ClaimRecordResponse]:
        """Drop the account's expired claims and return the ones still live. Inventory is not given back."""
        now = now or datetime.utcnow()
        try:
            expired = (
                db.query(ClaimRecord)
                .filter(ClaimRecord.account_id == account_id, ClaimRecord.expires_at < now)
                .delete(synchronize_session=False)
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        if expired:
            logger.info("stale_claims_expired", account_id=account_id, expired=expired)

        claims = (
            db.query(ClaimRecord)
            .filter(ClaimRecord.account_id == account_id)
            .order_by(ClaimRecord.claimed_at.desc())
            .all()
        )
        return [ClaimRecordResponse.model_validate(claim) for claim in claims]

    @staticmethod
    def list_active_claims(
        db: Session,
        account_id: int,
        now: Optional[datetime] = None,
    ) -> List[ClaimRecordResponse]:
        AccountDirectory.get_account(db, account_id)
        return VoucherLedger.expire_stale_claims(db, account_id, now=now)

    @staticmethod
    def purge_expired_claims(db: Session, now: Optional[datetime] = None) -> int:
        """Global housekeeping sweep used by the periodic task."""
        now = now or datetime.utcnow()
        try:
            deleted = (
                db.query(ClaimRecord)
                .filter(ClaimRecord.expires_at < now)
                .delete(synchronize_session=False)
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("expired_claims_purged", deleted=deleted)
        return deleted
