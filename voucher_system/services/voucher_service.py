from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from datetime import datetime
from typing import Optional
import structlog

from voucher_system.core.exceptions import (
    DuplicateVoucherCode,
    InvalidVoucher,
    PermissionDenied,
    VoucherNotFound,
)
from voucher_system.models.account import Account, AccountRole
from voucher_system.models.voucher import Voucher
from voucher_system.schemas.voucher import (
    OwnerDashboardResponse,
    VoucherCreate,
    VoucherListResponse,
    VoucherResponse,
    VoucherUpdate,
)
from voucher_system.services.account_directory import AccountDirectory
from voucher_system.services.venue_registry import VenueRegistry

logger = structlog.get_logger()


def _to_list(vouchers) -> VoucherListResponse:
    items = [VoucherResponse.model_validate(voucher) for voucher in vouchers]
    return VoucherListResponse(vouchers=items, total=len(items))


class VoucherService:

    @staticmethod
    def _ensure_can_manage(db: Session, actor: Account, venue_id: int):
        if actor.role == AccountRole.ADMIN:
            return
        if actor.role != AccountRole.OWNER or not VenueRegistry.is_owner(db, actor.id, venue_id):
            raise PermissionDenied()

    @staticmethod
    def _ensure_code_available(db: Session, code: str, voucher_id: Optional[str] = None):
        query = db.query(Voucher.id).filter(Voucher.code == code)
        if voucher_id is not None:
            query = query.filter(Voucher.id != voucher_id)
        if query.first() is not None:
            raise DuplicateVoucherCode(voucher_code=code)

    @staticmethod
    def _get_managed_voucher(db: Session, actor_id: int, voucher_id: str):
        actor = AccountDirectory.get_active_account(db, actor_id)
        voucher = db.query(Voucher).filter(Voucher.id == voucher_id).first()
        if not voucher:
            raise VoucherNotFound(voucher_id)
        VoucherService._ensure_can_manage(db, actor, voucher.venue_id)
        return voucher

    @staticmethod
    def create_voucher(db: Session, owner_id: int, voucher_data: VoucherCreate) -> VoucherResponse:
        """Create a voucher on a venue the caller owns (admins may use any venue)."""
        actor = AccountDirectory.get_active_account(db, owner_id)
        VenueRegistry.get_venue(db, voucher_data.venue_id)
        VoucherService._ensure_can_manage(db, actor, voucher_data.venue_id)
        VoucherService._ensure_code_available(db, voucher_data.code)

        voucher = Voucher(
            code=voucher_data.code,
            discount_percent=voucher_data.discount_percent,
            quantity_total=voucher_data.quantity_total,
            quantity_claimed=0,
            valid_from=voucher_data.valid_from,
            valid_until=voucher_data.valid_until,
            venue_id=voucher_data.venue_id,
            conditions=voucher_data.conditions,
        )

        db.add(voucher)
        db.commit()
        db.refresh(voucher)

        logger.info("voucher_created", voucher_id=voucher.id, code=voucher.code, actor_id=owner_id)
        return VoucherResponse.model_validate(voucher)

    @staticmethod
    def update_voucher(db: Session, actor_id: int, voucher_id: str, voucher_data: VoucherUpdate) -> VoucherResponse:
        """Edit a voucher. Claimed counts and totals are not editable; existing claims keep their snapshot."""
        voucher = VoucherService._get_managed_voucher(db, actor_id, voucher_id)

        update_data = voucher_data.model_dump(exclude_unset=True)
        if update_data.get("code") is not None and update_data["code"] != voucher.code:
            VoucherService._ensure_code_available(db, update_data["code"], voucher_id=voucher.id)

        valid_from = update_data.get("valid_from") or voucher.valid_from
        valid_until = update_data.get("valid_until") or voucher.valid_until
        if valid_from >= valid_until:
            raise InvalidVoucher("valid_from must be earlier than valid_until")

        for key, value in update_data.items():
            if value is None and key != "conditions":
                continue
            setattr(voucher, key, value)

        db.commit()
        db.refresh(voucher)

        logger.info("voucher_updated", voucher_id=voucher.id, fields=sorted(update_data), actor_id=actor_id)
        return VoucherResponse.model_validate(voucher)

    @staticmethod
    def delete_voucher(db: Session, actor_id: int, voucher_id: str):
        """Delete a voucher. Claim records keep their snapshot and lose the voucher reference."""
        voucher = VoucherService._get_managed_voucher(db, actor_id, voucher_id)

        db.delete(voucher)
        db.commit()

        logger.info("voucher_deleted", voucher_id=voucher_id, actor_id=actor_id)

    @staticmethod
    def get_voucher(db: Session, voucher_id: str) -> VoucherResponse:
        voucher = db.query(Voucher).filter(Voucher.id == voucher_id).first()
        if not voucher:
            raise VoucherNotFound(voucher_id)
        return VoucherResponse.model_validate(voucher)

    @staticmethod
    def list_claimable_vouchers(db: Session, now: Optional[datetime] = None) -> VoucherListResponse:
        """Vouchers inside their validity window with quantity left, newest first."""
        now = now or datetime.utcnow()
        vouchers = (
            db.query(Voucher)
            .options(joinedload(Voucher.venue))
            .filter(
                Voucher.valid_from <= now,
                Voucher.valid_until >= now,
                Voucher.quantity_claimed < Voucher.quantity_total,
            )
            .order_by(Voucher.created_at.desc())
            .all()
        )
        return _to_list(vouchers)

    @staticmethod
    def list_owner_vouchers(db: Session, owner_id: int) -> VoucherListResponse:
        venue_ids = VenueRegistry.owned_venue_ids(db, owner_id)
        if not venue_ids:
            return VoucherListResponse(vouchers=[], total=0)

        vouchers = (
            db.query(Voucher)
            .options(joinedload(Voucher.venue))
            .filter(Voucher.venue_id.in_(venue_ids))
            .order_by(Voucher.created_at.desc())
            .all()
        )
        return _to_list(vouchers)

    @staticmethod
    def list_all_vouchers(db: Session, skip: int = 0, limit: int = 100) -> VoucherListResponse:
        vouchers = (
            db.query(Voucher)
            .options(joinedload(Voucher.venue))
            .order_by(Voucher.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return _to_list(vouchers)

    @staticmethod
    def owner_dashboard(db: Session, owner_id: int, now: Optional[datetime] = None) -> OwnerDashboardResponse:
        now = now or datetime.utcnow()
        venue_ids = VenueRegistry.owned_venue_ids(db, owner_id)
        if not venue_ids:
            return OwnerDashboardResponse(total_vouchers=0, active_vouchers=0, total_claims=0)

        owned = db.query(Voucher).filter(Voucher.venue_id.in_(venue_ids))
        total_vouchers = owned.count()
        active_vouchers = owned.filter(
            Voucher.valid_from <= now,
            Voucher.valid_until >= now,
            Voucher.quantity_claimed < Voucher.quantity_total,
        ).count()
        total_claims = (
            db.query(func.coalesce(func.sum(Voucher.quantity_claimed), 0))
            .filter(Voucher.venue_id.in_(venue_ids))
            .scalar()
        )

        return OwnerDashboardResponse(
            total_vouchers=total_vouchers,
            active_vouchers=active_vouchers,
            total_claims=int(total_claims or 0),
        )
