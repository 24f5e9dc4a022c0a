# db/database.py
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from core.config import Settings

Base = declarative_base()


def make_engine(settings: Settings) -> Engine:
    """
    Settings から engine を作る。
    sqlite のインメモリ DB（テスト用）は接続を1本に固定しないとテーブルが消える
    """
    url = settings.database_url
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in {"sqlite://", "sqlite+pysqlite://"}:
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.db_echo, **kwargs)

    return create_engine(
        url,
        echo=settings.db_echo,   # 開発中だけ True にする
        pool_pre_ping=True,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    SessionLocal = request.app.state.session_factory
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
