import logging
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from app.models.revoked_token import RevokedToken
from app.repositories.base_repository import BaseRepository
from app.repositories.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class TokenRepository(BaseRepository):
    """
    무효화된 토큰(jti) 저장소
    - 서버리스 환경에서는 프로세스 메모리를 공유할 수 없으므로 DB에 보관
    """

    async def is_revoked(self, jti: str) -> bool:
        """jti가 무효화 목록에 있는지 확인"""
        try:
            result = await self.session.execute(
                select(RevokedToken.jti).where(RevokedToken.jti == jti)
            )
            return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error(f"토큰 무효화 여부 확인 실패: {e}")
            raise RepositoryError(f"토큰 무효화 여부 확인 중 오류: {e}")

    async def revoke(self, jti: str, username: str, expires_at: datetime) -> None:
        """jti를 무효화 목록에 추가 (이미 있으면 무시)"""
        try:
            stmt = self.insert_ignore(RevokedToken).values(
                jti=jti, username=username, expires_at=expires_at
            )
            await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"토큰 무효화 실패: {e}")
            raise RepositoryError(f"토큰 무효화 중 오류: {e}")

    async def prune_expired(self, now: datetime) -> int:
        """
        원래 만료 시각이 지난 무효화 기록 삭제
        Returns:
            int: 삭제된 행 수
        """
        try:
            result = await self.session.execute(
                delete(RevokedToken).where(RevokedToken.expires_at < now)
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error(f"만료 토큰 정리 실패: {e}")
            raise RepositoryError(f"만료 토큰 정리 중 오류: {e}")
