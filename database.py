from typing import Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from fastapi import Request

# base class
Base = declarative_base()


def init_db(database_url: str) -> Tuple[Engine, sessionmaker]:
    """
    Create the engine and session factory for `database_url` and make sure
    every table registered on Base exists.
    """
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            # one shared connection, otherwise each checkout sees an empty db
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    # import models so that Base knows about them
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    session_local = sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )
    return engine, session_local


# dependency (one session per request)
def get_db(request: Request):
    db = request.app.state.session_local()
    try:
        yield db
    finally:
        db.close()
