from sqlalchemy.orm import Session
from datetime import datetime, timedelta
import logging
from voucher_system.core.config import settings
from voucher_system.models.account import Account, AccountRole
from voucher_system.models.venue import Venue, VenueType
from voucher_system.models.voucher import Voucher

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS = [
    {"email": "admin@vouchers.local", "display_name": "Admin", "role": AccountRole.ADMIN},
    {"email": "owner@vouchers.local", "display_name": "Demo Owner", "role": AccountRole.OWNER},
    {"email": "user@vouchers.local", "display_name": "Demo User", "role": AccountRole.USER},
]

DEMO_VENUES = [
    {"name": "Riverside Cafe", "address": "12 River Road", "venue_type": VenueType.CAFE},
    {"name": "Old Town Bistro", "address": "4 Market Square", "venue_type": VenueType.RESTAURANT},
]

DEMO_VOUCHERS = [
    {"code": "WELCOME10", "discount_percent": 10, "quantity_total": 100, "venue": "Riverside Cafe"},
    {"code": "BISTRO25", "discount_percent": 25, "quantity_total": 20, "venue": "Old Town Bistro"},
]


def _get_or_create_account(db: Session, data: dict) -> Account:
    account = db.query(Account).filter(Account.email == data["email"]).first()
    if not account:
        account = Account(**data)
        db.add(account)
        db.flush()
        logger.info("account_created email=%s role=%s", account.email, account.role.value)
    return account


def init_db(db: Session) -> None:
    """Initialize database with demo accounts, venues and vouchers"""
    if settings.ENVIRONMENT == "production":
        raise RuntimeError("Refusing to seed demo data in production")

    accounts = {data["role"]: _get_or_create_account(db, data) for data in DEMO_ACCOUNTS}
    owner = accounts[AccountRole.OWNER]

    venues = {}
    for venue_data in DEMO_VENUES:
        venue = db.query(Venue).filter(Venue.name == venue_data["name"]).first()
        if not venue:
            venue = Venue(owner_id=owner.id, **venue_data)
            db.add(venue)
            db.flush()
            logger.info("venue_created name=%s", venue.name)
        venues[venue.name] = venue

    now = datetime.utcnow()
    for voucher_data in DEMO_VOUCHERS:
        existing = db.query(Voucher).filter(Voucher.code == voucher_data["code"]).first()
        if existing:
            continue
        voucher = Voucher(
            code=voucher_data["code"],
            discount_percent=voucher_data["discount_percent"],
            quantity_total=voucher_data["quantity_total"],
            quantity_claimed=0,
            valid_from=now - timedelta(days=1),
            valid_until=now + timedelta(days=30),
            venue_id=venues[voucher_data["venue"]].id,
        )
        db.add(voucher)
        logger.info("voucher_created code=%s", voucher.code)

    db.commit()
    logger.info("database_initialized")


if __name__ == "__main__":
    from voucher_system.db.session import SessionLocal
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
