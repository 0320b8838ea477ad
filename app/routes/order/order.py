from datetime import datetime, timezone
import logging
from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from app.auth.auth import AuthRouter
from app.database.connection import get_session
from app.exceptions.promocode_error import PromoCodeError, PromoCodeLimitExceededError
from app.models.order.order import Order
from app.models.user.user import User
from app.schemas.company.promocode import CartItemSnapshot
from app.schemas.order.order import OrderCreate, OrderRead
from app.services.promocode.redemption import apply_code_to_order
from app.services.promocode.validator import validate_code

db_session = get_session
get_current_user = AuthRouter().get_current_user

PROMO_CODE_FAILURE = "Failed to apply promotional code"


class OrderRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(tags=["Order"], *args, **kwargs)
        self.add_api_route("/orders/", self.get_my_orders, methods=["GET"], response_model=List[OrderRead])
        self.add_api_route("/orders/", self.create_order, methods=["POST"], response_model=OrderRead, status_code=201)
        self.add_api_route("/orders/{code}", self.get_order_by_code, methods=["GET"], response_model=OrderRead)

    def _redeem_promocode(
        self,
        session: Session,
        order: Order,
        user: User,
        promo_code: str,
        items: List[CartItemSnapshot],
    ) -> Tuple[float, Optional[str]]:
        """
        Validates the code again against the order itself and redeems it.

        Returns (discount, error). A code that no longer applies never blocks
        the order: the order is kept at full price and the reason is reported.
        The order itself is already committed, so storage failures here are
        reported the same way instead of failing the request.
        """
        order_code = order.code
        try:
            result = validate_code(session, promo_code, user.id, items, order.total_amount)
        except Exception:
            session.rollback()
            logging.exception(f"ORDER >>> Failed to validate {promo_code} for order {order_code}")
            return 0.0, PROMO_CODE_FAILURE

        if not result.is_valid:
            logging.info(f"ORDER >>> Order {order_code} placed without {promo_code}: {result.reason.value}")
            return 0.0, result.reason.value

        try:
            apply_code_to_order(session, result.code, user.id, order.id, result.discount_amount)
        except PromoCodeLimitExceededError as e:
            logging.warning(f"ORDER >>> Order {order_code} lost the race for {result.code}: {e}")
            return 0.0, str(e)
        except PromoCodeError as e:
            logging.warning(f"ORDER >>> Could not redeem {result.code} on order {order_code}: {e}")
            return 0.0, str(e)
        except Exception:
            session.rollback()
            logging.exception(f"ORDER >>> Failed to redeem {result.code} on order {order_code}")
            return 0.0, PROMO_CODE_FAILURE

        try:
            order.discount_code = result.code
            order.discount_value = result.discount_amount
            order.total_amount_with_discount = max(order.total_amount - result.discount_amount, 0)
            order.updated_at = datetime.now(timezone.utc)
            session.add(order)
            session.commit()
        except Exception:
            session.rollback()
            # The code use is already counted; the redemption row keeps the discount owed to this order
            logging.exception(
                f"ORDER >>> {result.code} redeemed but order {order_code} kept at full price, "
                f"discount {result.discount_amount:.2f} needs reconciliation"
            )
            return 0.0, PROMO_CODE_FAILURE

        session.refresh(order)
        return result.discount_amount, None

    async def create_order(
        self,
        order_request: OrderCreate,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session)
    ):
        # 1. Persist the order at full price
        total = sum(item.price * item.quantity for item in order_request.items)
        order = Order(
            user_id=current_user.id,
            items=[item.model_dump(by_alias=True) for item in order_request.items],
            total_amount=total,
            total_amount_with_discount=total,
        )
        try:
            session.add(order)
            session.commit()
            session.refresh(order)
        except Exception:
            session.rollback()
            logging.exception(f"ORDER >>> Failed to create order for user {current_user.id}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create order")

        logging.info(f"ORDER >>> Order {order.code} created for user {current_user.id}: {total:.2f}")

        # 2. Redeem the promotional code, if any
        promo_error = None
        if order_request.promo_code:
            _, promo_error = self._redeem_promocode(
                session, order, current_user, order_request.promo_code, order_request.items
            )

        response = OrderRead.model_validate(order)
        response.promo_code_error = promo_error
        return response

    async def get_my_orders(self, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        statement = select(Order).where(Order.user_id == current_user.id).order_by(Order.id.desc())
        return session.exec(statement).all()

    async def get_order_by_code(self, code: str, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        order = session.exec(select(Order).where(Order.code == code)).first()
        if not order or (order.user_id != current_user.id and not current_user.is_admin):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        return order
