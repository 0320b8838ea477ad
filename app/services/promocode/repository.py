# app/services/promocode/repository.py
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from sqlalchemy import or_, update
from sqlmodel import Session, func, select

from app.models.company.promocode import PromoCode
from app.models.company.promocode_redemption import PromoCodeRedemption

RECENT_USAGE_DAYS = 30


def normalize_code(code: str) -> str:
    return code.strip().upper()


def get_promocode_by_code(session: Session, code: str) -> Optional[PromoCode]:
    """Case-insensitive lookup; soft-deleted codes are treated as absent."""
    statement = select(PromoCode).where(
        PromoCode.code == normalize_code(code),
        PromoCode.deleted_at == None,  # noqa: E711
    )
    return session.exec(statement).first()


def count_user_redemptions(session: Session, promo_code_id: int, user_id: int) -> int:
    statement = select(func.count(PromoCodeRedemption.id)).where(
        PromoCodeRedemption.promo_code_id == promo_code_id,
        PromoCodeRedemption.user_id == user_id,
    )
    return session.exec(statement).one()


def increment_usage_if_available(session: Session, promo_code_id: int, now: Optional[datetime] = None) -> bool:
    """
    Increments the redemption counter only while it is below max_uses.

    Runs as a single conditional UPDATE so concurrent checkouts cannot both
    take the last slot. Returns False when no row was updated.
    """
    now = now or datetime.now(timezone.utc)
    statement = (
        update(PromoCode)
        .where(
            PromoCode.id == promo_code_id,
            or_(PromoCode.max_uses == None, PromoCode.current_uses < PromoCode.max_uses),  # noqa: E711
        )
        .values(current_uses=PromoCode.current_uses + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    result = session.exec(statement)
    return result.rowcount == 1


def list_promocodes(session: Session) -> List[PromoCode]:
    statement = select(PromoCode).where(PromoCode.deleted_at == None).order_by(PromoCode.created_at.desc())  # noqa: E711
    return session.exec(statement).all()


def get_usage_statistics(session: Session, promo_code_id: int, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    recent_since = now - timedelta(days=RECENT_USAGE_DAYS)

    total_usage, total_discount, unique_users = session.exec(
        select(
            func.count(PromoCodeRedemption.id),
            func.coalesce(func.sum(PromoCodeRedemption.discount_amount), 0.0),
            func.count(func.distinct(PromoCodeRedemption.user_id)),
        ).where(PromoCodeRedemption.promo_code_id == promo_code_id)
    ).one()

    recent_usage = session.exec(
        select(func.count(PromoCodeRedemption.id)).where(
            PromoCodeRedemption.promo_code_id == promo_code_id,
            PromoCodeRedemption.redeemed_at >= recent_since,
        )
    ).one()

    return {
        "total_usage": total_usage,
        "recent_usage": recent_usage,
        "total_discount": float(total_discount or 0.0),
        "unique_users": unique_users,
    }
