from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from todo_engine.config import SETTINGS

engine = create_engine(SETTINGS.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db(bind: Engine | None = None) -> None:
    from . import models  # noqa: F401  registers tables on Base.metadata

    bind = bind or engine
    Base.metadata.create_all(bind)
    with bind.connect() as connection:
        connection.execute(text("SELECT 1"))
