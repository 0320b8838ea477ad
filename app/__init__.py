import logging
from fastapi import FastAPI
from app.configuration.settings import Configuration
from fastapi.middleware.cors import CORSMiddleware
from app.core.exceptions.app_exception import register_exception_handlers
from app.database import init_db
from app.functions.scheduler.scheduler import start_scheduler

from app.auth.auth import AuthRouter
from app.routes.company.promocode import PromoCodeRouter
from app.routes.order.order import OrderRouter

configuration = Configuration()

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logging.info(f"SYSTEM >>> Environment loaded: {configuration.environment}")

def create_app():
    """
    Creates and configures the FastAPI application, including middlewares and routes.
    """
    app = FastAPI(title="CompuCar Promotions")

    logging.info("SYSTEM >>> Initializing database...")
    init_db()
    if configuration.scheduler_enabled:
        start_scheduler()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=configuration.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(AuthRouter())
    app.include_router(PromoCodeRouter())
    app.include_router(OrderRouter())

    return app
