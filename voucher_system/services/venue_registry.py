from typing import List, Optional

from sqlalchemy.orm import Session

from voucher_system.core.exceptions import VenueNotFound
from voucher_system.models.venue import Venue


class VenueRegistry:

    @staticmethod
    def get_venue(db: Session, venue_id: int) -> Venue:
        venue = db.query(Venue).filter(Venue.id == venue_id).first()
        if not venue:
            raise VenueNotFound(venue_id)
        return venue

    @staticmethod
    def venue_name(db: Session, venue_id: int) -> Optional[str]:
        venue = db.query(Venue.name).filter(Venue.id == venue_id).first()
        return venue.name if venue else None

    @staticmethod
    def is_owner(db: Session, account_id: int, venue_id: int) -> bool:
        return (
            db.query(Venue.id)
            .filter(Venue.id == venue_id, Venue.owner_id == account_id)
            .first()
            is not None
        )

    @staticmethod
    def owned_venue_ids(db: Session, account_id: int) -> List[int]:
        return [row.id for row in db.query(Venue.id).filter(Venue.owner_id == account_id).all()]
