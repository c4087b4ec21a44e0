from datetime import datetime, timedelta

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from app.enums import RedemptionStrategy
from app.exceptions import ConflictException, CouponInvalidException, CouponLimitReachedException
from app.models import Coupon
from app.schemas.coupon import CouponCreate, CouponUpdate
from app.services.coupon_service import CouponLedger


@pytest.fixture
def ledger():
    return CouponLedger(strategy=RedemptionStrategy.ATOMIC)


async def uses_of(db, coupon_id):
    return (await db.get(Coupon, coupon_id, populate_existing=True)).current_uses


async def test_validate_is_case_insensitive(db, ledger, make_coupon):
    await make_coupon(code="SAVE20")

    lower = await ledger.validate("save20", db)
    upper = await ledger.validate("SAVE20", db)
    padded = await ledger.validate("  Save20 ", db)

    assert lower == upper == padded
    assert lower.code == "SAVE20"
    assert lower.discount_percent == 20


async def test_validate_returns_current_usage(db, ledger, make_coupon):
    await make_coupon(max_uses=5, current_uses=3)

    coupon = await ledger.validate("SAVE20", db)

    assert coupon.current_uses == 3
    assert coupon.max_uses == 5


@pytest.mark.parametrize("overrides", [
    {"code": "OTHER"},
    {"is_active": False},
    {"valid_until": datetime.now() - timedelta(minutes=1)},
    {"valid_from": datetime.now() + timedelta(days=1)},
], ids=["unknown", "inactive", "expired", "not-yet-valid"])
async def test_unusable_codes_are_indistinguishable(db, ledger, make_coupon, overrides):
    await make_coupon(**overrides)

    with pytest.raises(CouponInvalidException) as exc_info:
        await ledger.validate("SAVE20", db)

    assert exc_info.value.detail is None


async def test_coupon_without_valid_from_is_usable(db, ledger, make_coupon):
    created = await make_coupon()
    await db.execute(update(Coupon).where(Coupon.id == created.id).values(valid_from=None))
    await db.commit()

    coupon = await ledger.validate("SAVE20", db)

    assert coupon.code == "SAVE20"


async def test_limit_reached_after_max_uses_redemptions(db, ledger, make_coupon):
    await make_coupon(max_uses=3)

    for _ in range(3):
        coupon = await ledger.validate("SAVE20", db)
        await ledger.redeem(coupon.id, coupon.current_uses, db)

    with pytest.raises(CouponLimitReachedException):
        await ledger.validate("SAVE20", db)


async def test_unlimited_coupon_keeps_validating(db, ledger, make_coupon):
    created = await make_coupon(max_uses=None)

    for _ in range(10):
        coupon = await ledger.validate("SAVE20", db)
        await ledger.redeem(coupon.id, coupon.current_uses, db)

    assert await uses_of(db, created.id) == 10


async def test_atomic_redeem_lets_only_one_of_two_racing_redemptions_through(db, ledger, make_coupon):
    created = await make_coupon(max_uses=5, current_uses=4)
    coupon_id = created.id

    # both customers validated before either one redeemed
    first = await ledger.validate("SAVE20", db)
    second = await ledger.validate("SAVE20", db)

    await ledger.redeem(first.id, first.current_uses, db)
    with pytest.raises(CouponLimitReachedException):
        await ledger.redeem(second.id, second.current_uses, db)

    assert await uses_of(db, coupon_id) == 5


async def test_read_then_write_redeem_lets_both_racing_redemptions_through(db, make_coupon):
    legacy = CouponLedger(strategy=RedemptionStrategy.READ_THEN_WRITE)
    created = await make_coupon(max_uses=5, current_uses=4)

    first = await legacy.validate("SAVE20", db)
    second = await legacy.validate("SAVE20", db)

    await legacy.redeem(first.id, first.current_uses, db)
    await legacy.redeem(second.id, second.current_uses, db)

    # two bookings used the last slot and the second write overwrote the first
    assert await uses_of(db, created.id) == 5


async def test_redeem_unknown_coupon(db, ledger):
    with pytest.raises(CouponInvalidException):
        await ledger.redeem(999, 0, db)


async def test_create_coupon_uppercases_and_defaults_valid_from(db, ledger):
    before = datetime.now()
    coupon = await ledger.create_coupon(
        CouponCreate(code="summer10", discount_percent=10, valid_until=before + timedelta(days=7)),
        db,
    )

    assert coupon.code == "SUMMER10"
    assert coupon.current_uses == 0
    assert coupon.valid_from >= before


async def test_create_duplicate_code_conflicts(db, ledger, make_coupon):
    await make_coupon(code="SAVE20")

    with pytest.raises(ConflictException):
        await ledger.create_coupon(
            CouponCreate(code="save20", discount_percent=5, valid_until=datetime.now() + timedelta(days=1)),
            db,
        )


async def test_update_and_toggle(db, ledger, make_coupon):
    created = await make_coupon()

    updated = await ledger.update_coupon(created.id, CouponUpdate(discount_percent=35, max_uses=2), db)
    assert updated.discount_percent == 35
    assert updated.max_uses == 2

    toggled = await ledger.toggle_active(created.id, db)
    assert toggled.is_active is False

    with pytest.raises(CouponInvalidException):
        await ledger.validate("SAVE20", db)


async def test_list_coupons_newest_first(db, ledger, make_coupon):
    now = datetime.now()
    await make_coupon(code="OLD", created_at=now - timedelta(days=2))
    await make_coupon(code="NEW", created_at=now)

    codes = [c.code for c in await ledger.list_coupons(db)]

    assert codes == ["NEW", "OLD"]


def test_generate_code(ledger):
    code = ledger.generate_code()

    assert len(code) == 8
    assert code == code.upper()
    assert code.isalnum()


async def test_failed_rejection_lookup_still_reports_invalid_coupon(db, ledger, monkeypatch):
    real_execute = db.execute
    calls = []

    async def execute_failing_after_first(*args, **kwargs):
        calls.append(args)
        if len(calls) > 1:
            raise OperationalError("SELECT coupons", {}, Exception("database is locked"))
        return await real_execute(*args, **kwargs)

    monkeypatch.setattr(db, "execute", execute_failing_after_first)

    with pytest.raises(CouponInvalidException):
        await ledger.validate("NOPE", db)

    assert len(calls) == 2
