import logging
import os
from datetime import datetime, timedelta, timezone
from sqlmodel import Session, select

from app.configuration.settings import Configuration
from app.core.security.password import hash_password
from app.enums.discount_type import DiscountType
from app.models.company.promocode import PromoCode
from app.models.user.user import User

# Load global configuration
configuration = Configuration()

def populate_database(session: Session):
    """Creates the initial data the store needs to run."""
    populate_admin_user(session)
    if configuration.environment == "development":
        populate_demo_promocodes(session)

def populate_admin_user(session: Session):
    """Creates the default admin user, if it does not exist yet."""
    admin_username = os.getenv("ADMIN_USERNAME", "admin")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        logging.info("DATABASE >>> ADMIN_PASSWORD not set, skipping admin user")
        return

    user = session.exec(select(User).where(User.username == admin_username)).first()
    if user:
        return

    user = User(
        name="CompuCar Admin",
        username=admin_username,
        email=os.getenv("ADMIN_EMAIL", "admin@compucar.dz"),
        password_hash=hash_password(admin_password),
        role="admin",
        is_admin=True,
    )
    session.add(user)
    session.commit()
    logging.info(f"DATABASE >>> Admin user {admin_username} created")

def populate_demo_promocodes(session: Session):
    """Seeds a few promotional codes for local development."""
    now = datetime.now(timezone.utc)
    demo_codes = [
        {
            "code": "SAVE10",
            "name": "10% off",
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": 10,
            "max_uses": 100,
        },
        {
            "code": "FIXED20",
            "name": "20 off any order",
            "discount_type": DiscountType.FIXED_AMOUNT,
            "discount_value": 20,
            "per_user_limit": 1,
        },
        {
            "code": "WELCOME15",
            "name": "Welcome offer",
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": 15,
            "min_order_value": 5000,
            "max_discount": 3000,
            "valid_until": now + timedelta(days=90),
        },
    ]

    for data in demo_codes:
        if session.exec(select(PromoCode).where(PromoCode.code == data["code"])).first():
            continue
        session.add(PromoCode(valid_from=now, **data))

    session.commit()
