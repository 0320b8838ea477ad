# app/models/__init__.py

from .user.user import User
from .order.order import Order
from .company.promocode import PromoCode
from .company.promocode_redemption import PromoCodeRedemption
