import logging
from sqlmodel import Session

from app.database.connection import create_tables, engine
from app.database.populate import populate_database


def init_db():
    create_tables()
    with Session(engine) as session:
        populate_database(session)
    logging.info("DATABASE >>> Initial data loaded")
