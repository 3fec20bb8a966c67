import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.exceptions import RepositoryError, DatabaseCommitError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Repository 베이스 클래스"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        """트랜잭션 커밋 (예외 처리 포함)"""
        try:
            await self.session.commit()
            logger.debug("DB 커밋 성공")
        except SQLAlchemyError as e:
            logger.error(f"DB 커밋 실패: {e}")
            await self.session.rollback()
            raise DatabaseCommitError(f"DB 커밋 중 오류 발생: {e}")

    async def rollback(self) -> None:
        """트랜잭션 롤백"""
        try:
            await self.session.rollback()
            logger.debug("DB 롤백 완료")
        except SQLAlchemyError as e:
            logger.error(f"DB 롤백 실패: {e}")
            raise RepositoryError(f"DB 롤백 중 오류 발생: {e}")

    @asynccontextmanager
    async def transaction(self, operation_name: str = "operation") -> AsyncIterator[None]:
        """
        블록 안의 쓰기를 하나의 트랜잭션으로 묶음
        - 정상 종료 시 커밋, 예외 발생 시 롤백 후 예외 전파

        Usage:
            async with repo.transaction("게시글 생성"):
                ...
        """
        try:
            yield
        except Exception as e:
            await self.rollback()
            logger.error(f"{operation_name} 실패, 롤백: {e}")
            raise
        await self.commit()
        logger.debug(f"{operation_name} 완료")

    def insert_ignore(self, model):
        """
        이미 존재하는 행이면 아무 것도 하지 않는 조건부 INSERT 문 생성
        - 유일 제약 위반을 DB가 직접 무시하므로 동시 중복 요청에도 행은 하나만 남음
        """
        dialect = self.session.get_bind().dialect.name
        if dialect == "mysql":
            return mysql.insert(model).prefix_with("IGNORE")
        if dialect == "postgresql":
            return postgresql.insert(model).on_conflict_do_nothing()
        if dialect == "sqlite":
            return sqlite.insert(model).on_conflict_do_nothing()
        raise RepositoryError(f"조건부 INSERT를 지원하지 않는 DB입니다: {dialect}")
