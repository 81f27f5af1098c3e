"""
Database configuration - SQLAlchemy persistence layer
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from hotelapp.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=_connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency: yield a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables"""
    from hotelapp.models import ontology  # noqa
    from hotelapp.system import models as system_models  # noqa - config and support inbox tables
    Base.metadata.create_all(bind=engine)
