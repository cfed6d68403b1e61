"""
src/database/connection.py
===========================
SQLAlchemy 데이터베이스 연결 관리.

[패턴] Singleton — @lru_cache로 엔진 인스턴스 재사용
[역할] get_engine(), get_session(), session_scope() 로 DB 연결을 제공합니다.

기본 DB 는 로컬 SQLite 파일(data/churn.db)입니다.
DATABASE_URL 을 mysql+pymysql://... 로 바꾸면 커넥션 풀 설정이 적용됩니다.

사용법:
    from src.database.connection import session_scope
    with session_scope() as session:
        session.add(run)          # 블록 종료 시 commit, 예외 시 rollback
"""

from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from config.settings import get_settings


@lru_cache()
def get_engine() -> Engine:
    """
    SQLAlchemy 엔진 싱글턴.

    테스트 시 get_engine.cache_clear() 호출로 초기화 가능.
    """
    settings = get_settings()
    url = make_url(settings.DATABASE_URL)

    if url.get_backend_name() == "sqlite":
        # 파일 DB 는 상위 디렉토리가 있어야 하고, 풀 크기 옵션은 받지 않음
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, connect_args={"check_same_thread": False}, echo=False)

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
        echo=False,
    )


def get_session() -> Session:
    """새 데이터베이스 세션을 생성합니다. 호출한 쪽이 close() 합니다."""
    return sessionmaker(bind=get_engine())()


@contextmanager
def session_scope() -> Iterator[Session]:
    """commit / rollback / close 를 묶은 트랜잭션 범위"""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """ORM 모델 기반으로 테이블을 생성합니다 (이미 있으면 건너뜀)."""
    from src.database.models import Base
    Base.metadata.create_all(get_engine())
