import asyncio
import json
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import AsyncIterator, Optional

from sqlalchemy import func, insert, select, text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)
from sqlalchemy.orm import declarative_base

from app.core.config import Settings, get_settings
from app.utils.exceptions import DatabaseUnavailableError

logger = logging.getLogger(__name__)

# 기초 데이터(JSON) 경로
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

# ORM 베이스
Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    """
    설정값으로 비동기 엔진 생성
    - MySQL(asyncmy): utf8mb4 + 커넥션 풀 설정
    - SQLite(aiosqlite): 로컬/테스트용, 풀 옵션 미사용
    """
    if settings.is_sqlite:
        return create_async_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, future=True)

    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        future=True,
        connect_args={
            "charset": "utf8mb4",
            "init_command": "SET NAMES utf8mb4 COLLATE utf8mb4_unicode_ci",
        },
        pool_size=settings.DB_POOL_SIZE,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


def is_connection_error(exc: Optional[BaseException]) -> bool:
    """
    연결 계열 장애인지 판별
    - 저장소 계층이 감싼 예외도 __cause__/__context__ 를 따라가며 확인
    """
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, (OperationalError, InterfaceError, OSError)):
            return True
        if isinstance(exc, DBAPIError) and exc.connection_invalidated:
            return True
        exc = exc.__cause__ or exc.__context__
    return False


class Database:
    """
    영속성 게이트웨이
    - 프로세스당 하나의 엔진(커넥션 풀)을 소유하고 요청마다 세션을 발급
    - 콜드 스타트 연결 확인(제한된 재시도)과 최선 노력 깨우기(warm-up) 제공
    """
    def __init__(self, settings: Settings, engine: Optional[AsyncEngine] = None):
        self.settings = settings
        self.engine = engine or build_engine(settings)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._connected = False

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """요청 단위 세션 발급 (블록 종료 시 닫힘)"""
        async with self.session_factory() as session:
            yield session

    async def ping(self) -> None:
        """단순 쿼리로 DB 연결 확인"""
        async with self.engine.connect() as conn:
            await conn.execute(text("select 1"))

    async def connect_with_retry(self) -> None:
        """
        DB 연결을 확인하고 실패 시 고정 간격으로 재시도
        - 최대 DB_CONNECT_MAX_ATTEMPTS 회 시도 후 DatabaseUnavailableError
        """
        attempts = self.settings.DB_CONNECT_MAX_ATTEMPTS
        backoff = self.settings.DB_CONNECT_BACKOFF_SECONDS
        for attempt in range(1, attempts + 1):
            try:
                await self.ping()
                self._connected = True
                return
            except (SQLAlchemyError, OSError) as e:
                logger.warning("DB 연결 실패 (%d/%d): %s", attempt, attempts, e)
                if attempt < attempts:
                    await asyncio.sleep(backoff)
        raise DatabaseUnavailableError("데이터베이스에 연결할 수 없습니다.")

    async def ensure_connected(self) -> None:
        """연결이 확인되지 않은 상태(최초 요청, 끊김 감지 후)에서만 연결 확인 수행"""
        if not self._connected:
            await self.connect_with_retry()

    def mark_disconnected(self) -> None:
        """연결 끊김 감지 시 다음 확인에서 다시 ping 하도록 상태 초기화"""
        self._connected = False

    async def reconnect(self) -> None:
        """연결 상태를 초기화하고 제한된 재시도로 다시 연결"""
        self.mark_disconnected()
        await self.connect_with_retry()

    async def warm_up(self, timeout: float) -> bool:
        """
        최선 노력 DB 깨우기
        - timeout 초 안에 연결되지 않으면 포기하고 False 반환 (요청은 계속 진행)
        """
        if timeout <= 0:
            logger.info("남은 실행 시간이 부족하여 DB 깨우기를 건너뜀")
            return False
        try:
            await asyncio.wait_for(self.connect_with_retry(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("DB 깨우기 제한 시간 초과 (%.2fs), 그대로 진행", timeout)
        except DatabaseUnavailableError as e:
            logger.warning("DB 깨우기 실패, 그대로 진행: %s", e)
        return False

    async def init_schema(self) -> None:
        """
        메타데이터 기반 테이블 생성 후 비어 있는 기초 데이터 테이블 채우기
        """
        # 모델 import로 메타데이터 등록
        from app.models import user, post, follower, post_like, vocabulary, revoked_token  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with self.session() as session:
            for model, column, filename in vocabulary.SEED_TABLES:
                await self._seed_table(session, model, column, filename)
            await session.commit()

    @staticmethod
    async def _seed_table(session: AsyncSession, model, column: str, filename: str) -> None:
        """JSON 목록을 읽어 테이블이 비어 있을 때만 적재"""
        count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
        if count:
            return
        values = json.loads((DATA_DIR / filename).read_text(encoding="utf-8"))
        await session.execute(insert(model), [{column: v} for v in values])
        logger.info("기초 데이터 적재: %s (%d건)", model.__tablename__, len(values))

    async def dispose(self) -> None:
        """커넥션 풀 정리"""
        await self.engine.dispose()


@lru_cache()
def get_database() -> Database:
    """
    Database 인스턴스를 싱글톤으로 반환
    - 서버리스 실행 환경에서 요청 간 커넥션 풀을 재사용
    """
    return Database(get_settings())
