# app/services/promocode/validator.py
import logging
from datetime import datetime, timezone
from typing import Literal, Optional, Sequence, Union
from pydantic import BaseModel
from sqlmodel import Session

from app.enums.discount_type import DiscountType
from app.enums.promocode_reason import InvalidReason
from app.models.company.promocode import PromoCode
from app.schemas.company.promocode import CartItemSnapshot
from app.services.promocode.repository import count_user_redemptions, get_promocode_by_code


class PromoCodeValid(BaseModel):
    is_valid: Literal[True] = True
    code: str
    discount_amount: float


class PromoCodeInvalid(BaseModel):
    is_valid: Literal[False] = False
    reason: InvalidReason


ValidationResult = Union[PromoCodeValid, PromoCodeInvalid]


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    # sqlite hands datetimes back without tzinfo; everything is stored in UTC
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_item_applicable(promo: PromoCode, item: CartItemSnapshot) -> bool:
    product_id = str(item.product_id)

    if product_id in (promo.excluded_products or []):
        return False

    if promo.applicable_products:
        return product_id in promo.applicable_products

    if promo.applicable_categories:
        return str(item.category_id) in promo.applicable_categories

    return True


def calculate_discount(promo: PromoCode, subtotal: float) -> float:
    if promo.discount_type == DiscountType.PERCENTAGE:
        discount = subtotal * promo.discount_value / 100
    else:
        discount = min(promo.discount_value, subtotal)

    if promo.max_discount is not None:
        discount = min(discount, promo.max_discount)

    return max(0.0, min(discount, subtotal))


def validate_code(
    session: Session,
    code: str,
    user_id: int,
    cart_items: Sequence[CartItemSnapshot],
    subtotal: float,
    now: Optional[datetime] = None,
) -> ValidationResult:
    """
    Checks whether a promotional code can be used on the given cart and
    computes the discount it grants.

    Read-only: nothing is locked or written. Every rejection comes back as a
    PromoCodeInvalid carrying the first failed check; storage errors propagate.
    The caller owns the consistency between subtotal and cart_items.
    """
    now = ensure_utc(now) if now else datetime.now(timezone.utc)

    promo = get_promocode_by_code(session, code)
    if not promo:
        return PromoCodeInvalid(reason=InvalidReason.NOT_FOUND)

    if not promo.is_active:
        return PromoCodeInvalid(reason=InvalidReason.INACTIVE)

    valid_until = ensure_utc(promo.valid_until)
    if valid_until and now > valid_until:
        return PromoCodeInvalid(reason=InvalidReason.EXPIRED)

    valid_from = ensure_utc(promo.valid_from)
    if valid_from and now < valid_from:
        return PromoCodeInvalid(reason=InvalidReason.NOT_YET_VALID)

    if promo.min_order_value is not None and subtotal < promo.min_order_value:
        return PromoCodeInvalid(reason=InvalidReason.BELOW_MINIMUM)

    if not any(is_item_applicable(promo, item) for item in cart_items):
        return PromoCodeInvalid(reason=InvalidReason.NOT_APPLICABLE)

    if promo.max_uses is not None and promo.current_uses >= promo.max_uses:
        return PromoCodeInvalid(reason=InvalidReason.GLOBAL_LIMIT_REACHED)

    if promo.per_user_limit is not None:
        if count_user_redemptions(session, promo.id, user_id) >= promo.per_user_limit:
            return PromoCodeInvalid(reason=InvalidReason.USER_LIMIT_REACHED)

    discount_amount = calculate_discount(promo, subtotal)
    logging.info(f"PROMOCODE >>> {promo.code} valid for user {user_id}: discount {discount_amount:.2f} on {subtotal:.2f}")
    return PromoCodeValid(code=promo.code, discount_amount=discount_amount)
