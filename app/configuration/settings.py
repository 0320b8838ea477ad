import logging
import os
from dotenv import load_dotenv

# Logging configuration
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

# Load environment variables
load_dotenv(dotenv_path=".env", encoding="utf-8")

# Silence SQLAlchemy logs
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

class Configuration:
    def __init__(self):

        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development").lower()

        # Explicit database url (takes precedence over the postgres credentials below)
        self.database_url = os.getenv("DATABASE_URL")

        # Auth
        self.secret_key = os.getenv("SECRET_KEY", "compucar-development-secret-key-change-me")
        self.jwt_expiration_hours = int(os.getenv("JWT_EXPIRATION_HOURS", 24))

        # Naive datetimes sent by the admin panel are interpreted in this timezone
        self.local_timezone = os.getenv("LOCAL_TIMEZONE", "Africa/Algiers")

        self.scheduler_enabled = os.getenv("SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")
        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",")
            if origin.strip()
        ]

        # POSTGRES PRODUCTION
        self.db_user = os.getenv("DB_USER")
        self.db_password = os.getenv("DB_PASSWORD")
        self.db_host = os.getenv("DB_HOST")
        self.db_port = os.getenv("DB_PORT", "5432")
        self.db_name = os.getenv("DB_NAME")

        # POSTGRES DEVELOPMENT
        self.db_dev_user = os.getenv("DB_DEV_USER")
        self.db_dev_password = os.getenv("DB_DEV_PASSWORD")
        self.db_dev_host = os.getenv("DB_DEV_HOST")
        self.db_dev_port = os.getenv("DB_DEV_PORT", "5432")
        self.db_dev_name = os.getenv("DB_DEV_NAME")

    def connect_to_postgresql(self):
        db_url = f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"
        logging.info(f"DATABASE >>> PRODUCTION SELECTED -> {self.db_host}:{self.db_port}/{self.db_name}")
        return db_url

    def connect_to_postgresql_dev(self):
        db_url = f"postgresql://{self.db_dev_user}:{self.db_dev_password}@{self.db_dev_host}:{self.db_dev_port}/{self.db_dev_name}"
        logging.info(f"DATABASE >>> DEVELOPMENT SELECTED -> {self.db_dev_host}:{self.db_dev_port}/{self.db_dev_name}")
        return db_url

    def get_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        if self.environment == "production":
            return self.connect_to_postgresql()
        if self.db_dev_host:
            return self.connect_to_postgresql_dev()
        logging.info("DATABASE >>> No postgres credentials found, using local sqlite")
        return "sqlite:///./compucar.db"
