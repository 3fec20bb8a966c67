import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from app.models.follower import Follower
from app.repositories.base_repository import BaseRepository
from app.repositories.exceptions import RepositoryError

logger = logging.getLogger(__name__)


class FollowRepository(BaseRepository):
    """
    팔로우(Follower) 엣지 데이터 액세스 객체
    """

    async def add_if_absent(self, username: str, following: str) -> bool:
        """
        팔로우 엣지를 조건부로 추가
        Returns:
            bool: 새 행이 추가되었으면 True, 이미 있었으면 False
        """
        try:
            stmt = self.insert_ignore(Follower).values(username=username, following=following)
            result = await self.session.execute(stmt)
            inserted = result.rowcount == 1
            logger.debug(f"팔로우 추가: {username} → {following}, inserted={inserted}")
            return inserted
        except SQLAlchemyError as e:
            logger.error(f"팔로우 추가 실패: {e}")
            raise RepositoryError(f"팔로우 추가 중 오류: {e}")

    async def remove(self, username: str, following: str) -> None:
        """팔로우 엣지 삭제 (없으면 아무 것도 하지 않음)"""
        try:
            await self.session.execute(
                delete(Follower).where(
                    Follower.username == username,
                    Follower.following == following,
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"팔로우 삭제 실패: {e}")
            raise RepositoryError(f"팔로우 삭제 중 오류: {e}")

    async def get(self, username: str, following: str) -> Optional[Follower]:
        """팔로우 엣지 단건 조회"""
        try:
            result = await self.session.execute(
                select(Follower).where(
                    Follower.username == username,
                    Follower.following == following,
                )
            )
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"팔로우 조회 실패: {e}")
            raise RepositoryError(f"팔로우 조회 중 오류: {e}")

    async def list_followings(self, username: str) -> List[Follower]:
        """사용자가 팔로우 중인 엣지 목록 (대상 사용자명 순)"""
        try:
            result = await self.session.execute(
                select(Follower)
                .where(Follower.username == username)
                .order_by(Follower.following.asc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"팔로잉 목록 조회 실패: {e}")
            raise RepositoryError(f"팔로잉 목록 조회 중 오류: {e}")
