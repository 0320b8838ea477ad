from datetime import datetime, timezone
import logging
from typing import List
from zoneinfo import ZoneInfo
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlmodel import Session, select

from app.auth.auth import AuthRouter
from app.configuration.settings import Configuration
from app.core.exceptions.app_exception import AppHttpException
from app.core.middlewares.users import is_admin
from app.database.connection import get_session
from app.models.company.promocode import PromoCode
from app.models.user.user import User
from app.schemas.company.promocode import (
    PromoCodeCreate,
    PromoCodeResponse,
    PromoCodeStats,
    PromoCodeUpdate,
    PromoCodeValidateRequest,
    check_discount_and_window,
)
from app.services.promocode.repository import get_usage_statistics, list_promocodes, normalize_code
from app.services.promocode.validator import ensure_utc, validate_code

configuration = Configuration()
db_session = get_session
get_current_user = AuthRouter().get_current_user

LOCAL_TZ = ZoneInfo(configuration.local_timezone)

# Allowed gap between the client subtotal and the sum of its own cart lines
SUBTOTAL_TOLERANCE = 0.01

class PromoCodeRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(tags=["PromoCode"], *args, **kwargs)

        self.add_api_route("/api/promotional-codes/validate", self.validate_promocode, methods=["POST"])

        self.add_api_route("/promocode/", self.get_all_promocodes, methods=["GET"], response_model=List[PromoCodeResponse])
        self.add_api_route("/promocode/", self.create_promocode, methods=["POST"], response_model=PromoCodeResponse, status_code=201)

        self.add_api_route("/promocode/{promo_id}", self.get_promocode_by_id, methods=["GET"], response_model=PromoCodeResponse)
        self.add_api_route("/promocode/{promo_id}", self.update_promocode_by_id, methods=["PUT"], response_model=PromoCodeResponse)
        self.add_api_route("/promocode/{promo_id}", self.delete_promocode_by_id, methods=["DELETE"], response_model=dict)
        self.add_api_route("/promocode/{promo_id}/stats", self.get_promocode_stats, methods=["GET"], response_model=PromoCodeStats)

    def convert_local_to_utc(self, dt: datetime) -> datetime:
        """Naive datetimes are local to the store; aware ones are just converted."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=LOCAL_TZ).astimezone(timezone.utc)
        return dt.astimezone(timezone.utc)

    def _get_existing_promocode(self, session: Session, promo_id: int) -> PromoCode:
        promo = session.get(PromoCode, promo_id)
        if not promo or promo.deleted_at is not None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PromoCode not found")
        return promo

    async def validate_promocode(
        self,
        request_data: PromoCodeValidateRequest,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session)
    ):
        """Checks a code against the shopper's cart without redeeming it"""
        items_total = sum(item.price * item.quantity for item in request_data.cart_items)
        if request_data.subtotal > items_total + SUBTOTAL_TOLERANCE:
            # TODO: recompute the subtotal from catalog prices once the catalog service exposes them
            logging.warning(
                f"PROMOCODE >>> User {current_user.id} sent subtotal {request_data.subtotal:.2f} "
                f"above its cart lines ({items_total:.2f})"
            )

        try:
            result = validate_code(
                session,
                request_data.code,
                current_user.id,
                request_data.cart_items,
                request_data.subtotal,
            )
        except Exception:
            logging.exception(f"PROMOCODE >>> Error validating code {request_data.code}")
            raise AppHttpException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to validate promotional code",
            )

        if not result.is_valid:
            logging.info(f"PROMOCODE >>> {request_data.code} rejected for user {current_user.id}: {result.reason.value}")
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"success": False, "error": result.reason.value},
            )

        return {
            "success": True,
            "data": {
                "code": result.code,
                "discountAmount": result.discount_amount,
            },
        }

    async def get_all_promocodes(self, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        is_admin(current_user)
        return list_promocodes(session)

    async def get_promocode_by_id(self, promo_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        is_admin(current_user)
        return self._get_existing_promocode(session, promo_id)

    async def create_promocode(
        self,
        promocode: PromoCodeCreate,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session)
    ):
        is_admin(current_user)
        logging.info(f"PROMOCODE >>> Create request from admin {current_user.id}: {promocode.code}")

        promo_dict = promocode.model_dump()
        promo_dict["code"] = normalize_code(promo_dict["code"])

        # Soft-deleted codes still hold their unique code
        existing = session.exec(select(PromoCode).where(PromoCode.code == promo_dict["code"])).first()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Promotional code already exists")

        for key in ["valid_from", "valid_until"]:
            dt = promo_dict.get(key)
            if dt:
                promo_dict[key] = self.convert_local_to_utc(dt)

        db_promo = PromoCode(**promo_dict)

        session.add(db_promo)
        session.commit()
        session.refresh(db_promo)
        return db_promo

    async def update_promocode_by_id(
        self,
        promo_id: int,
        promocode_data: PromoCodeUpdate,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session)
    ):
        is_admin(current_user)

        db_promo = self._get_existing_promocode(session, promo_id)
        update_data = promocode_data.model_dump(exclude_unset=True)

        for key in ["valid_from", "valid_until"]:
            dt = update_data.get(key)
            if dt:
                update_data[key] = self.convert_local_to_utc(dt)

        # The update is checked against the code as it will be once saved
        merged = {
            key: update_data.get(key, getattr(db_promo, key))
            for key in ["discount_type", "discount_value", "valid_from", "valid_until", "max_uses"]
        }
        try:
            check_discount_and_window(
                merged["discount_type"],
                merged["discount_value"],
                ensure_utc(merged["valid_from"]),
                ensure_utc(merged["valid_until"]),
            )
        except ValueError as e:
            raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        if merged["max_uses"] is not None and merged["max_uses"] < db_promo.current_uses:
            raise AppHttpException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"max_uses cannot be lower than the {db_promo.current_uses} redemptions already made",
            )

        for key, value in update_data.items():
            setattr(db_promo, key, value)

        db_promo.updated_at = datetime.now(timezone.utc)
        session.add(db_promo)
        session.commit()
        session.refresh(db_promo)
        logging.info(f"PROMOCODE >>> {db_promo.code} updated: {sorted(update_data)}")
        return db_promo

    async def delete_promocode_by_id(self, promo_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        is_admin(current_user)
        db_promo = self._get_existing_promocode(session, promo_id)

        # Orders keep referencing the code, so it is only deactivated
        now = datetime.now(timezone.utc)
        db_promo.is_active = False
        db_promo.deleted_at = now
        db_promo.updated_at = now
        session.add(db_promo)
        session.commit()
        logging.info(f"PROMOCODE >>> {db_promo.code} soft-deleted by admin {current_user.id}")
        return {"detail": "PromoCode deleted successfully"}

    async def get_promocode_stats(self, promo_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        is_admin(current_user)
        promo = self._get_existing_promocode(session, promo_id)
        stats = get_usage_statistics(session, promo.id)
        return PromoCodeStats(promo_code_id=promo.id, code=promo.code, **stats)
