from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from atelier.settings import settings


class Base(DeclarativeBase):
    pass


def get_engine(url: str | None = None):
    url = url or settings.DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
