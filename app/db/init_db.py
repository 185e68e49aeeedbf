# app/db/init_db.py
from app.db.session import engine
from app.db.base import Base
import logging


def init_db(bind=None):
    # Create all tables if not exist
    from app import models  # noqa: F401 - registers the mapped classes
    Base.metadata.create_all(bind=bind or engine)
    logging.info("Database tables ready (%s)", (bind or engine).url.get_backend_name())
