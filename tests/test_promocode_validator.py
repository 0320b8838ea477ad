"""
Tests for the promotional code validation engine.

Covers the ordered checks (first failure wins), the discount formulas and
the store scenarios used by the checkout team.
"""

from datetime import timedelta

import pytest

from app.enums.discount_type import DiscountType
from app.enums.promocode_reason import InvalidReason
from app.models.company.promocode_redemption import PromoCodeRedemption
from app.schemas.company.promocode import CartItemSnapshot
from app.services.promocode.validator import PromoCodeInvalid, PromoCodeValid, validate_code


def test_scenario_a_percentage_discount(session, customer, cart_items, make_promocode):
    make_promocode("SAVE10", discount_value=10, max_uses=100, current_uses=5)

    result = validate_code(session, "SAVE10", customer.id, cart_items, 200.00)

    assert isinstance(result, PromoCodeValid)
    assert result.code == "SAVE10"
    assert result.discount_amount == pytest.approx(20.00)


def test_scenario_b_minimum_not_met(session, customer, cart_items, make_promocode):
    make_promocode("SAVE10", min_order_value=250.00)

    result = validate_code(session, "SAVE10", customer.id, cart_items, 200.00)

    assert isinstance(result, PromoCodeInvalid)
    assert result.reason == InvalidReason.BELOW_MINIMUM
    assert result.reason.value == "minimum not met"


def test_scenario_c_expired(session, customer, cart_items, make_promocode, now):
    make_promocode("EXPIRED5", discount_value=5, valid_from=now - timedelta(days=30), valid_until=now - timedelta(days=1))

    result = validate_code(session, "EXPIRED5", customer.id, cart_items, 200.00)

    assert result.reason.value == "expired"


def test_scenario_d_redemption_limit_reached(session, customer, cart_items, make_promocode):
    make_promocode("LIMIT1", max_uses=1, current_uses=1)

    result = validate_code(session, "LIMIT1", customer.id, cart_items, 200.00)

    assert result.reason.value == "redemption limit reached"


def test_scenario_e_fixed_amount_clamped_to_subtotal(session, customer, make_promocode):
    make_promocode("FIXED20", discount_type=DiscountType.FIXED_AMOUNT, discount_value=20.00)
    items = [CartItemSnapshot(product_id="cable", category_id="accessories", price=15.00, quantity=1)]

    result = validate_code(session, "FIXED20", customer.id, items, 15.00)

    assert result.is_valid
    assert result.discount_amount == pytest.approx(15.00)


def test_unknown_code(session, customer, cart_items):
    result = validate_code(session, "NOPE", customer.id, cart_items, 200)
    assert result.reason == InvalidReason.NOT_FOUND


def test_lookup_is_case_insensitive(session, customer, cart_items, make_promocode):
    make_promocode("SAVE10")

    result = validate_code(session, "  save10 ", customer.id, cart_items, 200)

    assert result.is_valid
    assert result.code == "SAVE10"


def test_soft_deleted_code_is_not_found(session, customer, cart_items, make_promocode, now):
    make_promocode("GONE", is_active=False, deleted_at=now)

    result = validate_code(session, "GONE", customer.id, cart_items, 200)

    assert result.reason == InvalidReason.NOT_FOUND


def test_inactive_code(session, customer, cart_items, make_promocode):
    make_promocode("PAUSED", is_active=False)

    result = validate_code(session, "PAUSED", customer.id, cart_items, 200)

    assert result.reason.value == "code inactive"


def test_not_yet_valid(session, customer, cart_items, make_promocode, now):
    make_promocode("SOON", valid_from=now + timedelta(days=2))

    result = validate_code(session, "SOON", customer.id, cart_items, 200)

    assert result.reason.value == "not yet valid"


def test_unbounded_window(session, customer, cart_items, make_promocode):
    make_promocode("ALWAYS", valid_from=None, valid_until=None)

    assert validate_code(session, "ALWAYS", customer.id, cart_items, 200).is_valid


def test_pinned_clock_inside_window(session, customer, cart_items, make_promocode, now):
    make_promocode("WEEK", valid_from=now, valid_until=now + timedelta(days=7))

    inside = validate_code(session, "WEEK", customer.id, cart_items, 200, now=now + timedelta(days=3))
    after = validate_code(session, "WEEK", customer.id, cart_items, 200, now=now + timedelta(days=8))

    assert inside.is_valid
    assert after.reason == InvalidReason.EXPIRED


def test_checks_short_circuit_in_order(session, customer, cart_items, make_promocode, now):
    # Inactive, expired, below minimum and exhausted all at once: inactive wins
    make_promocode(
        "BROKEN",
        is_active=False,
        valid_until=now - timedelta(days=1),
        min_order_value=1000,
        max_uses=1,
        current_uses=1,
    )

    result = validate_code(session, "BROKEN", customer.id, cart_items, 200)

    assert result.reason == InvalidReason.INACTIVE


def test_minimum_checked_before_limits(session, customer, cart_items, make_promocode):
    make_promocode("MINFIRST", min_order_value=500, max_uses=1, current_uses=1)

    result = validate_code(session, "MINFIRST", customer.id, cart_items, 200)

    assert result.reason == InvalidReason.BELOW_MINIMUM


def test_subtotal_equal_to_minimum_is_accepted(session, customer, cart_items, make_promocode):
    make_promocode("EXACT", min_order_value=200)

    assert validate_code(session, "EXACT", customer.id, cart_items, 200).is_valid


def test_category_restriction_matches(session, customer, cart_items, make_promocode):
    make_promocode("CAT2", applicable_categories=["cat2"])

    assert validate_code(session, "CAT2", customer.id, cart_items, 100).is_valid


def test_category_restriction_without_match(session, customer, cart_items, make_promocode):
    make_promocode("TUNING", applicable_categories=["tuning"])

    result = validate_code(session, "TUNING", customer.id, cart_items, 200)

    assert result.reason.value == "not applicable to cart contents"


def test_product_restriction(session, customer, cart_items, make_promocode):
    make_promocode("PROD1", applicable_products=["prod1"])
    make_promocode("PROD9", applicable_products=["prod9"])

    assert validate_code(session, "PROD1", customer.id, cart_items, 100).is_valid
    assert validate_code(session, "PROD9", customer.id, cart_items, 100).reason == InvalidReason.NOT_APPLICABLE


def test_excluded_products_do_not_count(session, customer, make_promocode):
    make_promocode("NOSCANNER", excluded_products=["scanner"])
    items = [CartItemSnapshot(product_id="scanner", category_id="diagnostics", price=300, quantity=1)]

    result = validate_code(session, "NOSCANNER", customer.id, items, 300)

    assert result.reason == InvalidReason.NOT_APPLICABLE


def test_per_user_limit(session, customer, other_customer, cart_items, make_promocode, make_order):
    promo = make_promocode("ONCE", per_user_limit=1)
    order = make_order(customer)
    session.add(PromoCodeRedemption(promo_code_id=promo.id, user_id=customer.id, order_id=order.id, discount_amount=20))
    session.commit()

    result = validate_code(session, "ONCE", customer.id, cart_items, 200)

    assert result.reason.value == "already used by this user"
    assert validate_code(session, "ONCE", other_customer.id, cart_items, 200).is_valid


def test_percentage_is_exact_without_clamping(session, customer, cart_items, make_promocode):
    make_promocode("P15", discount_value=15)

    result = validate_code(session, "P15", customer.id, cart_items, 180)

    assert result.discount_amount == pytest.approx(180 * 15 / 100)


def test_full_percentage_never_exceeds_subtotal(session, customer, cart_items, make_promocode):
    make_promocode("FREE", discount_value=100)

    result = validate_code(session, "FREE", customer.id, cart_items, 200)

    assert 0 <= result.discount_amount <= 200
    assert result.discount_amount == pytest.approx(200)


def test_max_discount_caps_percentage(session, customer, cart_items, make_promocode):
    make_promocode("CAPPED", discount_value=50, max_discount=30)

    result = validate_code(session, "CAPPED", customer.id, cart_items, 200)

    assert result.discount_amount == pytest.approx(30)


@pytest.mark.parametrize("value, subtotal, expected", [(20, 15, 15), (20, 200, 20), (0.5, 10, 0.5)])
def test_fixed_amount_is_min_of_value_and_subtotal(session, customer, cart_items, make_promocode, value, subtotal, expected):
    make_promocode("FIXED", discount_type=DiscountType.FIXED_AMOUNT, discount_value=value)

    result = validate_code(session, "FIXED", customer.id, cart_items, subtotal)

    assert result.discount_amount == pytest.approx(expected)


def test_validation_is_idempotent(session, customer, cart_items, make_promocode):
    promo = make_promocode("SAVE10", max_uses=10, current_uses=3)

    first = validate_code(session, "SAVE10", customer.id, cart_items, 200)
    second = validate_code(session, "SAVE10", customer.id, cart_items, 200)

    assert first == second
    session.refresh(promo)
    assert promo.current_uses == 3
