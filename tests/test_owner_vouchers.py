from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from voucher_system.models.account import Account, AccountRole
from voucher_system.models.claim_record import ClaimRecord
from voucher_system.models.voucher import VoucherPhase
from voucher_system.services.voucher_ledger import VoucherLedger

from factories import create_account, create_venue, create_voucher


def _headers(account: Account) -> dict:
    return {"X-Account-ID": str(account.id)}


def _voucher_payload(venue_id: int, **overrides) -> dict:
    now = datetime.utcnow()
    payload = {
        "code": "  spring15 ",
        "discount_percent": 15,
        "quantity_total": 25,
        "valid_from": (now - timedelta(hours=1)).isoformat(),
        "valid_until": (now + timedelta(days=7)).isoformat(),
        "venue_id": venue_id,
        "conditions": "Weekdays only",
    }
    payload.update(overrides)
    return payload


def test_owner_creates_voucher_with_normalized_code(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, owner)

    response = client.post("/api/v1/owner/vouchers", json=_voucher_payload(venue.id), headers=_headers(owner))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["code"] == "SPRING15"
    assert data["quantity_claimed"] == 0
    assert data["remaining"] == 25
    assert data["venue_name"] == "Riverside Cafe"


def test_owner_cannot_create_on_another_owners_venue(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    rival = create_account(db_session, "rival@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, rival, name="Rival Diner")

    response = client.post("/api/v1/owner/vouchers", json=_voucher_payload(venue.id), headers=_headers(owner))

    assert response.status_code == 403
    assert response.json()["errors"]["code"] == "forbidden"


def test_duplicate_code_is_rejected(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, owner)
    create_voucher(db_session, venue, code="SPRING15")

    response = client.post("/api/v1/owner/vouchers", json=_voucher_payload(venue.id), headers=_headers(owner))

    assert response.status_code == 409
    assert response.json()["errors"]["code"] == "duplicate_code"


def test_create_rejects_inverted_window_and_bad_discount(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, owner)
    now = datetime.utcnow()

    inverted = _voucher_payload(
        venue.id,
        valid_from=(now + timedelta(days=2)).isoformat(),
        valid_until=(now + timedelta(days=1)).isoformat(),
    )
    response = client.post("/api/v1/owner/vouchers", json=inverted, headers=_headers(owner))
    assert response.status_code == 422
    assert response.json()["success"] is False

    response = client.post(
        "/api/v1/owner/vouchers",
        json=_voucher_payload(venue.id, discount_percent=0),
        headers=_headers(owner),
    )
    assert response.status_code == 422


def test_regular_user_cannot_manage_vouchers(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    user = create_account(db_session, "user@example.com")
    venue = create_venue(db_session, owner)

    response = client.post("/api/v1/owner/vouchers", json=_voucher_payload(venue.id), headers=_headers(user))

    assert response.status_code == 403


def test_update_keeps_totals_and_existing_snapshots(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    user = create_account(db_session, "user@example.com")
    venue = create_venue(db_session, owner)
    voucher = create_voucher(db_session, venue, quantity_total=10)
    VoucherLedger.claim(db_session, voucher.id, user.id)

    response = client.put(
        f"/api/v1/owner/vouchers/{voucher.id}",
        json={"code": "autumn40", "discount_percent": 40, "quantity_total": 500},
        headers=_headers(owner),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["code"] == "AUTUMN40"
    assert data["discount_percent"] == 40
    assert data["quantity_total"] == 10
    assert data["quantity_claimed"] == 1

    claim = db_session.query(ClaimRecord).filter(ClaimRecord.account_id == user.id).one()
    db_session.refresh(claim)
    assert claim.snapshot_code == "SUMMER20"
    assert claim.snapshot_discount_percent == 20


def test_update_rejects_window_inverted_against_stored_value(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, owner)
    voucher = create_voucher(db_session, venue)

    response = client.put(
        f"/api/v1/owner/vouchers/{voucher.id}",
        json={"valid_until": (voucher.valid_from - timedelta(hours=1)).isoformat()},
        headers=_headers(owner),
    )

    assert response.status_code == 400
    assert response.json()["errors"]["code"] == "invalid_voucher"


def test_update_unknown_voucher(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)

    response = client.put(
        "/api/v1/owner/vouchers/missing-voucher",
        json={"discount_percent": 30},
        headers=_headers(owner),
    )

    assert response.status_code == 404
    assert response.json()["errors"]["code"] == "not_found"


def test_delete_keeps_claim_snapshot(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    user = create_account(db_session, "user@example.com")
    venue = create_venue(db_session, owner)
    voucher = create_voucher(db_session, venue)
    voucher_id = voucher.id
    VoucherLedger.claim(db_session, voucher_id, user.id)

    response = client.delete(f"/api/v1/owner/vouchers/{voucher_id}", headers=_headers(owner))
    assert response.status_code == 200

    db_session.expire_all()
    claim = db_session.query(ClaimRecord).filter(ClaimRecord.account_id == user.id).one()
    assert claim.voucher_id is None
    assert claim.snapshot_code == "SUMMER20"

    claims = client.get("/api/v1/users/me/claims", headers=_headers(user)).json()["data"]
    assert claims["total"] == 1
    assert claims["claims"][0]["voucher_id"] is None


def test_owner_dashboard_counts(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, owner)
    now = datetime.utcnow()
    create_voucher(db_session, venue, code="ACTIVE1", quantity_total=10, quantity_claimed=3)
    create_voucher(db_session, venue, code="SOLDOUT", quantity_total=2, quantity_claimed=2)
    create_voucher(
        db_session,
        venue,
        code="PASTDEAL",
        quantity_total=5,
        quantity_claimed=1,
        valid_from=now - timedelta(days=5),
        valid_until=now - timedelta(days=1),
    )

    response = client.get("/api/v1/owner/dashboard", headers=_headers(owner))

    assert response.status_code == 200
    assert response.json()["data"] == {"total_vouchers": 3, "active_vouchers": 1, "total_claims": 6}

    listing = client.get("/api/v1/owner/vouchers", headers=_headers(owner)).json()["data"]
    assert listing["total"] == 3


def test_admin_lists_and_deletes_any_voucher(client: TestClient, db_session: Session):
    admin = create_account(db_session, "admin@example.com", role=AccountRole.ADMIN)
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, owner)
    voucher = create_voucher(db_session, venue)
    create_voucher(db_session, venue, code="SECOND")

    listing = client.get("/api/v1/admin/vouchers", headers=_headers(admin))
    assert listing.status_code == 200
    assert listing.json()["data"]["total"] == 2

    paged = client.get("/api/v1/admin/vouchers?skip=1&limit=1", headers=_headers(admin))
    assert paged.json()["data"]["total"] == 1

    response = client.delete(f"/api/v1/admin/vouchers/{voucher.id}", headers=_headers(admin))
    assert response.status_code == 200
    assert client.get("/api/v1/admin/vouchers", headers=_headers(admin)).json()["data"]["total"] == 1


def test_admin_routes_reject_owners(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)

    response = client.get("/api/v1/admin/vouchers", headers=_headers(owner))

    assert response.status_code == 403


def test_create_with_offset_timestamps_stores_utc_window(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    user = create_account(db_session, "user@example.com")
    venue = create_venue(db_session, owner)
    brisbane = timezone(timedelta(hours=10))
    local_now = datetime.now(brisbane)

    payload = _voucher_payload(
        venue.id,
        valid_from=(local_now - timedelta(minutes=5)).isoformat(),
        valid_until=(local_now + timedelta(days=1)).isoformat(),
    )
    response = client.post("/api/v1/owner/vouchers", json=payload, headers=_headers(owner))
    assert response.status_code == 200
    voucher_id = response.json()["data"]["id"]

    status = VoucherLedger.get_status(db_session, voucher_id, user.id)
    assert status.phase == VoucherPhase.ACTIVE

    claim = client.post(f"/api/v1/vouchers/{voucher_id}/claim", headers=_headers(user))
    assert claim.status_code == 200

    stored = VoucherLedger._get_voucher(db_session, voucher_id)
    expected_from = (local_now - timedelta(minutes=5)).astimezone(timezone.utc).replace(tzinfo=None)
    assert stored.valid_from.tzinfo is None
    assert abs(stored.valid_from - expected_from) < timedelta(seconds=1)


def test_update_accepts_offset_timestamp_on_one_bound(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, owner)
    voucher = create_voucher(db_session, venue)
    new_until = datetime.now(timezone.utc) + timedelta(days=3)

    response = client.put(
        f"/api/v1/owner/vouchers/{voucher.id}",
        json={"valid_until": new_until.isoformat()},
        headers=_headers(owner),
    )

    assert response.status_code == 200
    db_session.refresh(voucher)
    assert voucher.valid_until.tzinfo is None
    assert abs(voucher.valid_until - new_until.replace(tzinfo=None)) < timedelta(seconds=1)


def test_update_with_offset_timestamp_still_checks_window(client: TestClient, db_session: Session):
    owner = create_account(db_session, "owner@example.com", role=AccountRole.OWNER)
    venue = create_venue(db_session, owner)
    voucher = create_voucher(db_session, venue)
    # Two hours before the stored start once converted to UTC
    before_start = (voucher.valid_from - timedelta(hours=2)).replace(tzinfo=timezone.utc)
    payload = {"valid_until": before_start.astimezone(timezone(timedelta(hours=-7))).isoformat()}

    response = client.put(f"/api/v1/owner/vouchers/{voucher.id}", json=payload, headers=_headers(owner))

    assert response.status_code == 400
    assert response.json()["errors"]["code"] == "invalid_voucher"
