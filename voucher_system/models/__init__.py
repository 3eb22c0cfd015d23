from voucher_system.models.account import Account, AccountRole
from voucher_system.models.venue import Venue, VenueType
from voucher_system.models.voucher import Voucher, VoucherPhase
from voucher_system.models.claim_record import ClaimRecord
