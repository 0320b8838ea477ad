from datetime import datetime, timezone
import logging
from typing import Optional
from sqlmodel import Session, select

from app.database.connection import engine
from app.models.company.promocode import PromoCode


def deactivate_expired_promocodes(session: Optional[Session] = None, now: Optional[datetime] = None) -> int:
    """Turns off active codes whose validity window has ended. Returns how many were changed."""
    if session is None:
        with Session(engine) as own_session:
            return deactivate_expired_promocodes(own_session, now)

    now = now or datetime.now(timezone.utc)

    expired = session.exec(
        select(PromoCode).where(
            PromoCode.is_active == True,  # noqa: E712
            PromoCode.valid_until.is_not(None),
            PromoCode.valid_until < now,
        )
    ).all()

    for promo in expired:
        promo.is_active = False
        promo.updated_at = now
        session.add(promo)

    session.commit()
    logging.info(f"PROMOCODE >>> Expired code cleanup finished. {len(expired)} codes deactivated.")
    return len(expired)
