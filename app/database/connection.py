import logging
from typing import Generator
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.configuration.settings import Configuration

configuration = Configuration()


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        # In-memory sqlite must share one connection across threads
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(database_url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


engine = build_engine(configuration.get_database_url())


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def create_tables():
    # Registers every table on SQLModel.metadata
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logging.info("DATABASE >>> Tables created")
