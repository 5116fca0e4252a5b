from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from fastfeast.config import DATABASE_URL


def make_engine(url: str):
    if url.startswith("sqlite"):
        # Sync endpoints run in a threadpool, so the connection is shared across threads
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One connection for every session, so concurrent requests share a
            # transaction and a rollback in one can discard another's flushed
            # writes. Fine for demos and tests; use a file or server URL under load.
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
