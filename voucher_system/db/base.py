from voucher_system.db.base_class import Base


# IMPORT ALL MODELS HERE (THIS REGISTERS THEM WITH Base.metadata)
from voucher_system.models.account import Account
from voucher_system.models.venue import Venue
from voucher_system.models.voucher import Voucher
from voucher_system.models.claim_record import ClaimRecord
