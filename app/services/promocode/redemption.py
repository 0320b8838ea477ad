# app/services/promocode/redemption.py
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.exceptions.promocode_error import (
    PromoCodeAlreadyRedeemedError,
    PromoCodeLimitExceededError,
    PromoCodeNotFoundError,
)
from app.models.company.promocode_redemption import PromoCodeRedemption
from app.services.promocode.repository import (
    count_user_redemptions,
    get_promocode_by_code,
    increment_usage_if_available,
)


def apply_code_to_order(
    session: Session,
    code: str,
    user_id: int,
    order_id: int,
    discount_amount: float,
    now: Optional[datetime] = None,
) -> PromoCodeRedemption:
    """
    Records one redemption of a code for an already committed order.

    The counter increment, the per-user re-check and the redemption row share
    one transaction. Limits are checked again here because validation ran
    earlier without locks; losing that race raises PromoCodeLimitExceededError
    and leaves nothing written.
    """
    now = now or datetime.now(timezone.utc)

    promo = get_promocode_by_code(session, code)
    if not promo:
        raise PromoCodeNotFoundError(f"Promotional code {code!r} not found")

    promo_id = promo.id
    promo_code = promo.code

    try:
        if not increment_usage_if_available(session, promo_id, now):
            raise PromoCodeLimitExceededError("redemption limit exceeded")

        if promo.per_user_limit is not None:
            if count_user_redemptions(session, promo_id, user_id) >= promo.per_user_limit:
                raise PromoCodeLimitExceededError("redemption limit exceeded")

        redemption = PromoCodeRedemption(
            promo_code_id=promo_id,
            user_id=user_id,
            order_id=order_id,
            discount_amount=max(discount_amount, 0.0),
            redeemed_at=now,
        )
        session.add(redemption)
        session.flush()
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise PromoCodeAlreadyRedeemedError(f"Code {promo_code} was already redeemed for order {order_id}") from e
    except Exception:
        session.rollback()
        logging.warning(f"PROMOCODE >>> Redemption of {promo_code} for order {order_id} aborted")
        raise

    session.refresh(redemption)

    logging.info(f"PROMOCODE >>> {promo_code} redeemed by user {user_id} on order {order_id} (-{redemption.discount_amount:.2f})")
    return redemption
